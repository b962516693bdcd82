"""
Connectivity rules (WiFi, Bluetooth).
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


WIFI_ON = re.compile(r"\b(turn on|enable|start|switch on|connect to)\s+(the\s+)?wi-?fi\b", re.IGNORECASE)
WIFI_OFF = re.compile(r"\b(turn off|disable|stop|switch off|disconnect)\s+(the\s+)?wi-?fi\b", re.IGNORECASE)
WIFI_TOGGLE = re.compile(r"\b(toggle|switch)\s+(the\s+)?wi-?fi\b", re.IGNORECASE)

BLUETOOTH_ON = re.compile(r"\b(turn on|enable|start|switch on|connect)\s+(the\s+)?(bluetooth|bt)\b", re.IGNORECASE)
BLUETOOTH_OFF = re.compile(r"\b(turn off|disable|stop|switch off|disconnect)\s+(the\s+)?(bluetooth|bt)\b", re.IGNORECASE)
BLUETOOTH_TOGGLE = re.compile(r"\b(toggle|switch)\s+(the\s+)?(bluetooth|bt)\b", re.IGNORECASE)


def _toggle(text: str, intent: str, on, off, toggle) -> Optional[Candidate]:
    if on.search(text):
        return Candidate(intent=intent, confidence=1.0, entities={"action": "on"})
    if off.search(text):
        return Candidate(intent=intent, confidence=1.0, entities={"action": "off"})
    if toggle.search(text):
        return Candidate(intent=intent, confidence=1.0, entities={"action": "toggle"})
    return None


def wifi_control(text: str, nlu: NLUContext) -> Optional[Candidate]:
    return _toggle(text, "toggle_wifi", WIFI_ON, WIFI_OFF, WIFI_TOGGLE)


def bluetooth_control(text: str, nlu: NLUContext) -> Optional[Candidate]:
    return _toggle(text, "toggle_bluetooth", BLUETOOTH_ON, BLUETOOTH_OFF, BLUETOOTH_TOGGLE)
