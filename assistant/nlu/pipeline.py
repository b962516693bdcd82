"""
NLU Pipeline - Rule-based extraction of entities and signals.

Builds the NLUContext handed to every rule source:

1. Normalization (lowercase, strip punctuation, collapse whitespace)
2. Entity extraction (URLs, known website names, search query, app name, numbers)
3. Intent signals (command/question shape, negation, rough sentiment)

Everything here is regex and word lists. Classification quality is the
rule sources' concern, not this module's.
"""

import re
from typing import Any, Dict, List, Optional

from assistant.nlu.schemas import NLUContext


# ---------------------------------------------------------------------------
# PATTERNS
# ---------------------------------------------------------------------------

URL_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?[a-z0-9-]+(?:\.[a-z]{2,})+(?:/\S*)?",
    re.IGNORECASE,
)

KNOWN_WEBSITES = (
    "google", "youtube", "facebook", "instagram", "twitter", "amazon",
    "flipkart", "github", "linkedin", "netflix",
)
WEBSITE_PATTERN = re.compile(r"\b(" + "|".join(KNOWN_WEBSITES) + r")\b", re.IGNORECASE)

SEARCH_QUERY_PATTERNS = [
    re.compile(r"search (?:for |on youtube for |youtube for )?(.+)", re.IGNORECASE),
    re.compile(r"find (.+?) (?:on|in|about)\b", re.IGNORECASE),
    re.compile(r"look up (.+)", re.IGNORECASE),
    re.compile(r"look for (.+)", re.IGNORECASE),
]

APP_NAME_PATTERN = re.compile(r"(?:open|launch|start|run) (\S+)", re.IGNORECASE)
NOT_AN_APP = re.compile(r"\.com|\.org|\.in|\.net|youtube|google|facebook|website")

COMMAND_PATTERN = re.compile(
    r"^(open|go|show|tell|find|search|play|turn|set|make|create|delete|remove|"
    r"enable|disable|switch|toggle|lock|shut|restart|launch|start|stop)\b",
    re.IGNORECASE,
)

QUESTION_WORDS = ("what", "where", "when", "who", "whom", "whose", "which", "why", "how")
YES_NO_QUESTION = re.compile(
    r"^(is|are|was|were|do|does|did|can|could|will|would|should|may|might)\s",
    re.IGNORECASE,
)

NEGATION_PATTERN = re.compile(r"\b(not|no|never|don'?t|doesn'?t|didn'?t|won'?t|can'?t|cannot)\b", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\b")

POSITIVE_WORDS = (
    "good", "great", "awesome", "nice", "love", "like", "thanks", "thank",
    "happy", "wonderful", "excellent", "amazing", "perfect", "best",
)
NEGATIVE_WORDS = (
    "bad", "terrible", "awful", "hate", "dislike", "angry", "sad", "worst",
    "horrible", "annoying", "wrong", "problem", "error",
)


# ---------------------------------------------------------------------------
# NORMALIZATION
# ---------------------------------------------------------------------------

def normalize(text: str) -> str:
    """
    Normalize text for pattern matching.

    Lowercases, replaces anything but letters, digits, spaces, apostrophes
    and hyphens with a space, and collapses whitespace.
    """
    if not text:
        return ""
    cleaned = re.sub(r"[^a-z0-9\s'-]", " ", text.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def tokenize(text: str) -> List[str]:
    """Split normalized text into words."""
    return [t for t in normalize(text).split(" ") if t]


# ---------------------------------------------------------------------------
# ENTITY EXTRACTION
# ---------------------------------------------------------------------------

def extract_urls(text: str) -> List[str]:
    """Find URL-looking tokens (with or without scheme)."""
    return [m.group(0).lower() for m in URL_PATTERN.finditer(text or "")]


def extract_website(text: str, urls: List[str]) -> Optional[str]:
    """First explicit URL, otherwise the first known site name mentioned."""
    if urls:
        return urls[0]
    match = WEBSITE_PATTERN.search(text or "")
    return match.group(1).lower() if match else None


def extract_search_query(text: str) -> Optional[str]:
    """Pull the query out of "search for X" / "look up X" style phrasing."""
    for pattern in SEARCH_QUERY_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return match.group(1).strip()
    return None


def extract_app_name(text: str) -> Optional[str]:
    """Name after open/launch/start/run, unless it looks like a website."""
    match = APP_NAME_PATTERN.search(text or "")
    if not match:
        return None
    app = match.group(1).strip().lower()
    if NOT_AN_APP.search(app):
        return None
    return app


# ---------------------------------------------------------------------------
# SIGNALS
# ---------------------------------------------------------------------------

def question_type(text: str) -> Optional[str]:
    """Return the leading question word, "yes_no" for inverted questions, or None."""
    lower = (text or "").lower().strip()
    for word in QUESTION_WORDS:
        if lower.startswith(word):
            return word
    if YES_NO_QUESTION.match(lower):
        return "yes_no"
    return None


def sentiment(text: str) -> str:
    """Very rough word-count sentiment: positive, negative or neutral."""
    lower = (text or "").lower()
    score = sum(1 for w in POSITIVE_WORDS if w in lower)
    score -= sum(1 for w in NEGATIVE_WORDS if w in lower)
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


def extract_signals(text: str) -> Dict[str, Any]:
    stripped = (text or "").strip()
    qtype = question_type(stripped)
    return {
        "isCommand": bool(COMMAND_PATTERN.match(stripped)),
        "isQuestion": stripped.endswith("?") or qtype is not None,
        "questionType": qtype,
        "hasNegation": bool(NEGATION_PATTERN.search(stripped)),
        "sentiment": sentiment(stripped),
    }


# ---------------------------------------------------------------------------
# PIPELINE
# ---------------------------------------------------------------------------

def build_nlu_context(text: str) -> NLUContext:
    """
    Run the full pipeline over one utterance.

    Args:
        text: Raw user input

    Returns:
        NLUContext with entities and signals

    Example:
        >>> ctx = build_nlu_context("open github")
        >>> ctx.entities["website"], ctx.signals["isCommand"]
        ('github', True)
    """
    urls = extract_urls(text)
    entities: Dict[str, Any] = {
        "urls": urls,
        "website": extract_website(text, urls),
        "searchQuery": extract_search_query(text),
        "appName": extract_app_name(text),
        "numbers": NUMBER_PATTERN.findall(text or ""),
    }
    return NLUContext(entities=entities, signals=extract_signals(text))
