"""
System rules (volume, screen, power).

Implied requests ("it's too quiet") score 0.85, explicit ones 1.0.
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


VOLUME_UP = re.compile(r"\b(volume up|increase (the )?volume|louder|turn (it )?up|raise (the )?volume|sound up)\b", re.IGNORECASE)
VOLUME_UP_IMPLIED = re.compile(r"\b(too quiet|cant hear|can't hear|volume low)\b", re.IGNORECASE)
VOLUME_DOWN = re.compile(r"\b(volume down|decrease (the )?volume|quieter|turn (it )?down|lower (the )?volume|sound down)\b", re.IGNORECASE)
VOLUME_DOWN_IMPLIED = re.compile(r"\b(too loud|too noisy|hurting my ears|lower the sound)\b", re.IGNORECASE)

LOCK_SCREEN = re.compile(r"\b(lock (the )?screen|lock my pc|lock (the )?computer|lock (the )?system)\b", re.IGNORECASE)

SHUTDOWN = re.compile(r"\b(shutdown|shut down|turn off (the )?computer|power off (the )?system)\b", re.IGNORECASE)
RESTART = re.compile(r"\b(restart|reboot)\b", re.IGNORECASE)


def volume_control(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if VOLUME_UP.search(text):
        return Candidate(intent="volume_up", confidence=1.0)
    if VOLUME_UP_IMPLIED.search(text):
        return Candidate(intent="volume_up", confidence=0.85)
    if VOLUME_DOWN.search(text):
        return Candidate(intent="volume_down", confidence=1.0)
    if VOLUME_DOWN_IMPLIED.search(text):
        return Candidate(intent="volume_down", confidence=0.85)
    return None


def screen_control(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if LOCK_SCREEN.search(text):
        return Candidate(intent="lock_screen", confidence=1.0)
    return None


def power_control(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if SHUTDOWN.search(text):
        return Candidate(intent="shutdown_system", confidence=1.0)
    if RESTART.search(text):
        return Candidate(intent="restart_system", confidence=1.0)
    return None
