"""
Fallback Provider - Graceful replies for every non-happy path.

Randomized categories (unknown, low_confidence, error, plugin_not_found)
draw from an injected random.Random, so tests and reproducible
deployments can seed it. Confirmation replies are fixed templates.

Usage:
    fallback = FallbackProvider(rng=random.Random(42))
    fallback.unknown()
    fallback.low_confidence(0.42)
    fallback.confirmation_pending("shut down the computer")
"""

import logging
import random
from typing import Dict, List, Optional


logger = logging.getLogger("assistant.skills.fallback")


FALLBACK_RESPONSES: Dict[str, List[str]] = {
    "unknown": [
        "I'm not sure I understand that yet.",
        "Could you rephrase that, sir?",
        "I didn't quite catch that.",
        "I'm still learning, could you say that again?",
        "Hmm, I'm not sure what you mean. Can you try a different phrasing?",
    ],
    "low_confidence": [
        "I'm not entirely sure what you mean. Could you clarify?",
        "I think I understand, but could you be more specific?",
        "I'm having trouble understanding that request.",
        "Could you say that in a different way?",
    ],
    "error": [
        "Something went wrong on my end. Please try again.",
        "I encountered an error processing that request.",
        "Apologies, I couldn't complete that action. Please try again.",
        "There was an issue. Could you try that again?",
    ],
    "plugin_not_found": [
        "I don't have a skill for that yet.",
        "That capability isn't available at the moment.",
        "I can't help with that right now, but I'm always learning.",
    ],
}

CONFIRMATION_PENDING = "Are you sure you want to proceed with this action?"
CONFIRMATION_PENDING_ACTION = "Are you sure you want to {action}?"
CONFIRMATION_TIMEOUT = "I was waiting for your confirmation, but didn't receive a response."
CONFIRMATION_CANCELLED = "Alright, I've cancelled that action."
LOST_CONTEXT = "Sorry, I lost track of what we were doing. Could you start again?"

DEFAULT_RESPONSE = "I'm not sure how to respond to that."


class FallbackProvider:
    """Picks a reply for a failure category."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        responses: Optional[Dict[str, List[str]]] = None,
    ):
        self._rng = rng or random.Random()
        self._responses = responses if responses is not None else FALLBACK_RESPONSES

    def pick(self, category: str) -> str:
        """Random phrasing for a category (a generic line if the category is empty)."""
        options = self._responses.get(category)
        if not options:
            return DEFAULT_RESPONSE
        return self._rng.choice(options)

    def unknown(self) -> str:
        return self.pick("unknown")

    def low_confidence(self, confidence: Optional[float] = None) -> str:
        if confidence is not None:
            logger.debug(f"Low confidence reply ({confidence:.2f})")
        return self.pick("low_confidence")

    def error(self, err: Optional[BaseException] = None) -> str:
        if err is not None:
            logger.debug(f"Error reply for {type(err).__name__}: {err}")
        return self.pick("error")

    def plugin_not_found(self, intent: Optional[str] = None) -> str:
        if intent is not None:
            logger.debug(f"No skill registered for '{intent}'")
        return self.pick("plugin_not_found")

    def confirmation_pending(self, action: Optional[str] = None) -> str:
        if action:
            return CONFIRMATION_PENDING_ACTION.format(action=action)
        return CONFIRMATION_PENDING

    def confirmation_timeout(self) -> str:
        return CONFIRMATION_TIMEOUT

    def confirmation_cancelled(self) -> str:
        return CONFIRMATION_CANCELLED

    def lost_context(self) -> str:
        return LOST_CONTEXT
