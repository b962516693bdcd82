"""
Browser Skill - Opening websites, YouTube and Google searches.

open_website resolves a site name ("github"), a bare domain
("example.org") or a URL; anything else becomes a Google search.
With nothing to open it asks which website, and the answer comes back
on the next turn as the "ask_website_name" slot.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from assistant.services.outcome import Outcome
from assistant.skills.plugins.base import command_outcome, get_commands
from assistant.skills.registry import HandlerDescriptor, Skill


WEBSITE_SLOT = "ask_website_name"
YOUTUBE_QUERY_SLOT = "ask_youtube_query"
SEARCH_QUERY_SLOT = "ask_search_query"
GOOGLE_SEARCH_URL = "https://www.google.com/search?q={query}"

SITE_MAP = {
    "google": "https://google.com",
    "youtube": "https://youtube.com",
    "facebook": "https://facebook.com",
    "instagram": "https://instagram.com",
    "twitter": "https://twitter.com",
    "x": "https://x.com",
    "linkedin": "https://linkedin.com",
    "amazon": "https://amazon.in",
    "flipkart": "https://flipkart.com",
    "netflix": "https://netflix.com",
    "github": "https://github.com",
    "stackoverflow": "https://stackoverflow.com",
    "reddit": "https://reddit.com",
    "spotify": "https://open.spotify.com",
    "gmail": "https://mail.google.com",
    "wikipedia": "https://wikipedia.org",
}


def resolve_url(target: str) -> Optional[str]:
    """
    Map user input to a URL.

    Examples:
        >>> resolve_url("GitHub")
        'https://github.com'
        >>> resolve_url("example.org")
        'https://example.org'
        >>> resolve_url("cheap flights")
        'https://www.google.com/search?q=cheap+flights'
    """
    if not target or not target.strip():
        return None

    normalized = target.strip().lower()
    if normalized in SITE_MAP:
        return SITE_MAP[normalized]

    if normalized.startswith("http://") or normalized.startswith("https://"):
        return target.strip()
    if "." in normalized and " " not in normalized:
        return f"https://{normalized}"

    return GOOGLE_SEARCH_URL.format(query=quote_plus(target.strip()))


def display_url(url: str) -> str:
    for prefix in ("https://", "http://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
    return url.rstrip("/")


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------

async def open_website(entities: Dict[str, Any], context: Any) -> Outcome:
    target = (
        entities.get("url")
        or entities.get("site")
        or entities.get(WEBSITE_SLOT)
        or entities.get("query")
    )
    url = resolve_url(target) if target else None

    if url is None:
        context.memory.set_awaiting(WEBSITE_SLOT, "open_website")
        return Outcome(success=True, message="Which website would you like me to open?", action="open_website")

    result = await get_commands(context).open_url(url)
    if "google.com/search" in url:
        done = f'Searching Google for "{target.strip()}", sir.'
    else:
        done = f"Opening {display_url(url)}, sir."
    outcome = command_outcome(result, "open_website", done, "I couldn't open the browser")
    outcome.data = {**(outcome.data or {}), "url": url}
    return outcome


async def open_youtube(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).open_url("https://www.youtube.com")
    return command_outcome(result, "open_youtube", "Opening YouTube, sir.", "I couldn't open YouTube")


async def search_youtube(entities: Dict[str, Any], context: Any) -> Outcome:
    query = entities.get("query") or entities.get(YOUTUBE_QUERY_SLOT)
    if not query:
        context.memory.set_awaiting(YOUTUBE_QUERY_SLOT, "search_youtube")
        return Outcome(success=True, message="What should I search for on YouTube?", action="search_youtube")

    url = f"https://www.youtube.com/results?search_query={quote_plus(query)}"
    result = await get_commands(context).open_url(url)
    outcome = command_outcome(
        result, "search_youtube", f'Searching YouTube for "{query}", sir.', "I couldn't open YouTube"
    )
    outcome.data = {**(outcome.data or {}), "url": url, "query": query}
    return outcome


async def google_search(entities: Dict[str, Any], context: Any) -> Outcome:
    query = entities.get("query") or entities.get("search") or entities.get(SEARCH_QUERY_SLOT)
    if not query or not query.strip():
        context.memory.set_awaiting(SEARCH_QUERY_SLOT, "google_search")
        return Outcome(success=True, message="What would you like me to search for?", action="google_search")

    query = query.strip()
    url = GOOGLE_SEARCH_URL.format(query=quote_plus(query))
    result = await get_commands(context).open_url(url)
    outcome = command_outcome(
        result, "google_search", f'Searching Google for "{query}", sir.', "I couldn't open the browser"
    )
    outcome.data = {**(outcome.data or {}), "url": url, "query": query}
    return outcome


def ask_which_website(entities: Dict[str, Any], context: Any) -> Outcome:
    # No originating intent: the registry routes the slot to open_website
    context.memory.set_awaiting(WEBSITE_SLOT, None)
    return Outcome(success=True, message="Which website would you like me to open?", action="ask_which_website")


# ---------------------------------------------------------------------------
# SKILL
# ---------------------------------------------------------------------------

skill = Skill(
    name="browser",
    description="Browser control and web navigation",
    intents=[
        HandlerDescriptor("open_website", 0.5, False, open_website, "open a website"),
        HandlerDescriptor("open_youtube", 0.5, False, open_youtube, "open YouTube"),
        HandlerDescriptor("search_youtube", 0.6, False, search_youtube, "search YouTube"),
        HandlerDescriptor("google_search", 0.5, False, google_search, "search Google"),
        HandlerDescriptor("ask_which_website", 0.5, False, ask_which_website, "ask which website to open"),
    ],
    awaiting_routes={WEBSITE_SLOT: "open_website"},
)
