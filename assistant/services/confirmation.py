"""
Confirmation Controller - Yes/no gate in front of sensitive actions.

State machine per session:

    Idle --request--> AwaitingConfirmation --yes--> Executed --> Idle
                              |           --no---> Cancelled --> Idle
                              +--neither--> AwaitingConfirmation (re-prompt)

The pending action lives in the SessionStore. take() clears it before the
Dispatcher runs the handler, so a retried "yes" finds nothing to execute.

The controller has no timer. Hosts expire stale confirmations with
SessionStore.stale_confirmations() and Dispatcher.expire_confirmation().
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, Optional

from assistant.services.outcome import Outcome
from assistant.services.session_store import PendingAction, SessionStore
from assistant.skills.fallback import FallbackProvider
from assistant.skills.registry import HandlerDescriptor


logger = logging.getLogger("assistant.services.confirmation")


# ---------------------------------------------------------------------------
# REPLY CLASSIFICATION
# ---------------------------------------------------------------------------

class ReplyKind(str, Enum):
    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"
    NEITHER = "neither"


YES_PATTERN = re.compile(
    r"^(?:yes|yeah|yep|yup|do\s+it|proceed|confirm|go\s+ahead|sure|ok|okay|absolutely|affirmative)"
    r"(?:\b|$|[.,!?\s])",
    re.IGNORECASE,
)
NO_PATTERN = re.compile(
    r"^(?:no|nope|nah|cancel|stop|don'?t|do\s+not|nevermind|never\s+mind|abort|negative)"
    r"(?:\b|$|[.,!?\s])",
    re.IGNORECASE,
)


def classify_reply(text: str) -> ReplyKind:
    """
    Classify a reply to a confirmation prompt.

    Only the start of the reply counts, so "yes please" is affirmative but
    "I said no earlier, yes" is not negative.

    Examples:
        >>> classify_reply("Yes, do it")
        <ReplyKind.AFFIRMATIVE: 'affirmative'>
        >>> classify_reply("never mind")
        <ReplyKind.NEGATIVE: 'negative'>
        >>> classify_reply("what time is it")
        <ReplyKind.NEITHER: 'neither'>
    """
    reply = (text or "").strip().lower()
    if YES_PATTERN.match(reply):
        return ReplyKind.AFFIRMATIVE
    if NO_PATTERN.match(reply):
        return ReplyKind.NEGATIVE
    return ReplyKind.NEITHER


# ---------------------------------------------------------------------------
# CONTROLLER
# ---------------------------------------------------------------------------

class ConfirmationController:
    """Stores, re-prompts, consumes and cancels pending actions."""

    def __init__(self, store: SessionStore, fallback: FallbackProvider):
        self._store = store
        self._fallback = fallback

    def has_pending(self, session_id: str) -> bool:
        return self._store.get_pending(session_id) is not None

    def prompt(self, pending: PendingAction) -> Outcome:
        """Confirmation question for a pending action."""
        return Outcome(
            success=True,
            message=self._fallback.confirmation_pending(pending.handler.description),
            action="confirmation_required",
            data={"intent": pending.intent, "entities": dict(pending.entities)},
        )

    def request(
        self,
        session_id: str,
        intent: str,
        entities: Dict[str, Any],
        handler: HandlerDescriptor,
    ) -> Outcome:
        """Hold the action and ask the user to confirm it."""
        pending = PendingAction(intent=intent, entities=dict(entities), handler=handler)
        self._store.set_pending(session_id, pending)
        logger.info(f"Session {session_id}: confirmation requested for {intent}")
        return self.prompt(pending)

    def take(self, session_id: str) -> Optional[PendingAction]:
        """Consume the pending action (None if there is none)."""
        return self._store.take_pending(session_id)

    def cancel(self, session_id: str) -> Outcome:
        pending = self._store.take_pending(session_id)
        if pending is not None:
            logger.info(f"Session {session_id}: {pending.intent} cancelled by user")
        return Outcome(
            success=True,
            message=self._fallback.confirmation_cancelled(),
            action="confirmation_cancelled",
            data={"intent": pending.intent} if pending else None,
        )

    def expire(self, session_id: str) -> Optional[Outcome]:
        """
        Drop a pending action that was never answered. None if nothing was pending.

        The timeout message is also left as the session's notice, so the
        user hears it on their next turn.
        """
        pending = self._store.take_pending(session_id)
        if pending is None:
            return None
        logger.info(f"Session {session_id}: confirmation for {pending.intent} timed out")
        message = self._fallback.confirmation_timeout()
        self._store.set_notice(session_id, message)
        return Outcome(
            success=False,
            message=message,
            action="confirmation_timeout",
            data={"intent": pending.intent},
        )
