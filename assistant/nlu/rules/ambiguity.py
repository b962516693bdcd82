"""
Ambiguity rule.

Vague requests that would be unsafe to act on get a deliberately low score
so the Dispatcher answers with the low-confidence reply instead of guessing.
"""

from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


AMBIGUOUS_PHRASES = {
    "open it",
    "open that",
    "delete it",
    "delete something",
    "do something",
    "play it",
    "play that thing",
}


def detect_ambiguity(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if text.lower().strip() in AMBIGUOUS_PHRASES:
        return Candidate(intent="ambiguous", confidence=0.3)
    return None
