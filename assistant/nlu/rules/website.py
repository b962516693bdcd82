"""
Website rules.

ask_which_website must be ordered before open_website; the YouTube search
rule must be ordered before both. search_google runs ahead of open_website
too, since "search google for X" names a known site.
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


ASK_PHRASES = {"open website", "visit website", "open a website"}
SEARCH_OR_PLAY = re.compile(r"search|find|play")
DOMAIN_ONLY = re.compile(r"^([a-z0-9.-]+\.[a-z]{2,})$", re.IGNORECASE)
GOOGLE_SEARCH_PATTERNS = [
    re.compile(r"\b(?:search|look up)\s+(?:on\s+)?google\s+for\s+(.+)", re.IGNORECASE),
    re.compile(r"\bgoogle\s+search\s+(?:for\s+)?(.+)", re.IGNORECASE),
    re.compile(r"\b(?:search|look up)\s+(?:for\s+)?(.+?)\s+on\s+google\b", re.IGNORECASE),
]
BARE_GOOGLE_SEARCH = {"search google", "google search", "search on google"}


def search_google(text: str, nlu: NLUContext) -> Optional[Candidate]:
    """Google search phrasing, e.g. "search google for X" or "look up X on google"."""
    msg = text.strip()
    if msg.lower() in BARE_GOOGLE_SEARCH:
        return Candidate(intent="google_search", confidence=1.0)

    for pattern in GOOGLE_SEARCH_PATTERNS:
        match = pattern.search(msg)
        if match:
            return Candidate(intent="google_search", confidence=1.0, entities={"query": match.group(1).strip()})
    return None


def ask_which_website(text: str, nlu: NLUContext) -> Optional[Candidate]:
    """Bare "open website" with no site named."""
    if text.lower().strip() in ASK_PHRASES:
        return Candidate(intent="ask_which_website", confidence=1.0)
    return None


def open_website(text: str, nlu: NLUContext) -> Optional[Candidate]:
    """
    Open a known site or an explicit URL.

    Leaves YouTube search/play phrasing to the YouTube rules.
    """
    msg = text.lower().strip()
    website = nlu.entity("website")

    if website == "youtube" and SEARCH_OR_PLAY.search(msg):
        return None

    if website and nlu.signal("isCommand"):
        if website == "youtube":
            return Candidate(intent="open_youtube", confidence=1.0, entities={"website": "youtube"})
        return Candidate(intent="open_website", confidence=1.0, entities={"url": website})

    urls = nlu.entity("urls", [])
    if urls:
        return Candidate(intent="open_website", confidence=1.0, entities={"url": urls[0]})

    match = DOMAIN_ONLY.match(msg)
    if match:
        return Candidate(intent="open_website", confidence=1.0, entities={"url": match.group(1)})

    return None
