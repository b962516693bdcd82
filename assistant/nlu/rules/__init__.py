"""
Rule Sources - Ordered, independently authored classifiers.

Each source is a plain function (text, nlu) -> Candidate | None. Order is
significant: the arbitrator stops at the first match, so more specific
sources come first.

Usage:
    from assistant.nlu.rules import DEFAULT_RULE_SOURCES
"""

from typing import List

from assistant.nlu.arbitrator import RuleSource
from assistant.nlu.rules import ambiguity, connectivity, general, media, system, website, youtube


DEFAULT_RULE_SOURCES: List[RuleSource] = [
    RuleSource("ambiguity.detect_ambiguity", ambiguity.detect_ambiguity),
    RuleSource("youtube.search_youtube", youtube.search_youtube),
    RuleSource("website.search_google", website.search_google),
    RuleSource("website.ask_which_website", website.ask_which_website),
    RuleSource("website.open_website", website.open_website),
    RuleSource("connectivity.wifi_control", connectivity.wifi_control),
    RuleSource("connectivity.bluetooth_control", connectivity.bluetooth_control),
    RuleSource("system.volume_control", system.volume_control),
    RuleSource("system.screen_control", system.screen_control),
    RuleSource("system.power_control", system.power_control),
    RuleSource("media.music", media.music),
    RuleSource("general.time_and_date", general.time_and_date),
    RuleSource("general.greeting", general.greeting),
]

__all__ = ["DEFAULT_RULE_SOURCES"]
