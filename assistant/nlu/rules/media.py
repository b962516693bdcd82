"""
Media rules.

Deliberately broad; keep it after the volume rules.
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


MUSIC = re.compile(r"\b(music|song|player|volume|track)\b", re.IGNORECASE)


def music(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if MUSIC.search(text):
        return Candidate(intent="music_control", confidence=1.0)
    return None
