"""
General conversation rules (time, date, greetings).
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


TIME = re.compile(r"\b(what time is it|what's the time|whats the time|tell me the time|current time)\b", re.IGNORECASE)
DATE = re.compile(r"\b(what's the date|whats the date|what is the date|today's date|todays date|what day is it)\b", re.IGNORECASE)
GREETING = re.compile(r"\b(hello|hi|hey|greetings|namaste|yo|sup|wassup)\b", re.IGNORECASE)


def time_and_date(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if TIME.search(text):
        return Candidate(intent="tell_time", confidence=1.0)
    if DATE.search(text):
        return Candidate(intent="tell_date", confidence=1.0)
    return None


def greeting(text: str, nlu: NLUContext) -> Optional[Candidate]:
    if GREETING.search(text):
        return Candidate(intent="greeting", confidence=1.0)
    return None
