"""
YouTube rules.

Must run before the website rules: "search youtube for X" also contains a
known site name and would otherwise be read as "open youtube".
"""

import re
from typing import Optional

from assistant.nlu.schemas import Candidate, NLUContext


SEARCH_PATTERN = re.compile(r"search (?:youtube|you tube) for (.+)", re.IGNORECASE)


def search_youtube(text: str, nlu: NLUContext) -> Optional[Candidate]:
    msg = text.lower()

    match = SEARCH_PATTERN.search(msg)
    if match:
        return Candidate(intent="search_youtube", confidence=1.0, entities={"query": match.group(1).strip()})

    # NLU already found a query and YouTube is mentioned
    query = nlu.entity("searchQuery")
    if query and "youtube" in msg:
        return Candidate(intent="search_youtube", confidence=1.0, entities={"query": query})

    return None
