"""
Session Store - Per-session conversational state.

Each session holds at most one of:
- awaiting: the assistant asked a question and the next utterance is
  the answer (e.g. "Which website would you like me to open?")
- pending_confirmation: a sensitive action is waiting for yes/no

Setting one always clears the other; the store enforces this so callers
cannot break it.

Every read-modify-write runs under one short threading.Lock. Sync handlers
execute in worker threads and reach the store through SessionMemory, so
an asyncio lock would not be enough. The lock is never held while a
handler runs.

Usage:
    store = SessionStore()
    store.set_awaiting("abc", "ask_website_name", None)
    awaiting = store.take_awaiting("abc")

    # Host-side expiry
    for session_id in store.stale_confirmations(max_age_seconds=45):
        ...
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from assistant.skills.registry import HandlerDescriptor


logger = logging.getLogger("assistant.services.session_store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# STATE RECORDS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AwaitingState:
    """
    The assistant is waiting for the user to supply a slot value.

    originating_intent may be None; the Dispatcher then asks the registry
    which intent consumes the slot.
    """
    slot_name: str
    originating_intent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"slot_name": self.slot_name, "originating_intent": self.originating_intent}


@dataclass(frozen=True)
class PendingAction:
    """A resolved intent held back until the user confirms it."""
    intent: str
    entities: Dict[str, Any]
    handler: HandlerDescriptor

    def to_dict(self) -> Dict[str, Any]:
        return {"intent": self.intent, "entities": dict(self.entities)}


@dataclass
class Session:
    """
    Conversational state for one session id.

    Only the store mutates a Session; callers get snapshots.
    """
    session_id: str
    awaiting: Optional[AwaitingState] = None
    pending_confirmation: Optional[PendingAction] = None
    created_at: datetime = field(default_factory=_utcnow)
    last_access: datetime = field(default_factory=_utcnow)
    pending_since: Optional[datetime] = None
    # One-shot message for the next turn (e.g. an expired confirmation)
    notice: Optional[str] = None

    def is_idle(self) -> bool:
        return self.awaiting is None and self.pending_confirmation is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "awaiting": self.awaiting.to_dict() if self.awaiting else None,
            "pending_confirmation": (
                self.pending_confirmation.to_dict() if self.pending_confirmation else None
            ),
            "created_at": self.created_at.isoformat(),
            "last_access": self.last_access.isoformat(),
            "pending_since": self.pending_since.isoformat() if self.pending_since else None,
            "notice": self.notice,
        }


# ---------------------------------------------------------------------------
# STORE
# ---------------------------------------------------------------------------

class SessionStore:
    """
    Keyed in-memory session store.

    Not a singleton: the host owns one instance and passes it in.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def _touch(self, session_id: str) -> Session:
        # Caller must hold self._lock
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id=session_id)
            self._sessions[session_id] = session
            logger.debug(f"Created session {session_id}")
        else:
            session.last_access = _utcnow()
        return session

    @staticmethod
    def _snapshot(session: Session) -> Session:
        return Session(
            session_id=session.session_id,
            awaiting=session.awaiting,
            pending_confirmation=session.pending_confirmation,
            created_at=session.created_at,
            last_access=session.last_access,
            pending_since=session.pending_since,
            notice=session.notice,
        )

    # -------------------------------------------------------------------------
    # SESSIONS
    # -------------------------------------------------------------------------

    def get_or_create(self, session_id: str) -> Session:
        """Snapshot of the session, creating it on first use."""
        with self._lock:
            return self._snapshot(self._touch(session_id))

    def get(self, session_id: str) -> Optional[Session]:
        """Snapshot of the session, or None. Does not refresh last_access."""
        with self._lock:
            session = self._sessions.get(session_id)
            return self._snapshot(session) if session else None

    def evict(self, session_id: str) -> bool:
        """Drop a session entirely. Returns True if it existed."""
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"Evicted session {session_id}")
        return removed

    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def cleanup_expired(self, ttl_seconds: float, now: Optional[datetime] = None) -> int:
        """
        Evict sessions not accessed for ttl_seconds.

        Sessions with a pending confirmation are kept; the confirmation
        expiry path resolves them first.

        Returns:
            Number of sessions evicted
        """
        cutoff = (now or _utcnow()) - timedelta(seconds=ttl_seconds)
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items()
                if s.last_access < cutoff and s.pending_confirmation is None
            ]
            for sid in expired:
                del self._sessions[sid]

        if expired:
            logger.info(f"Cleaned up {len(expired)} idle sessions")
        return len(expired)

    def stale_confirmations(self, max_age_seconds: float, now: Optional[datetime] = None) -> List[str]:
        """Session ids whose pending confirmation is older than max_age_seconds."""
        cutoff = (now or _utcnow()) - timedelta(seconds=max_age_seconds)
        with self._lock:
            return [
                sid for sid, s in self._sessions.items()
                if s.pending_confirmation is not None
                and s.pending_since is not None
                and s.pending_since < cutoff
            ]

    # -------------------------------------------------------------------------
    # AWAITING
    # -------------------------------------------------------------------------

    def set_awaiting(self, session_id: str, slot_name: str, originating_intent: Optional[str] = None) -> None:
        """Start waiting for a slot value. Clears any pending confirmation."""
        with self._lock:
            session = self._touch(session_id)
            if session.pending_confirmation is not None:
                logger.debug(f"Session {session_id}: awaiting '{slot_name}' replaces pending confirmation")
            session.pending_confirmation = None
            session.pending_since = None
            session.awaiting = AwaitingState(slot_name=slot_name, originating_intent=originating_intent)

    def get_awaiting(self, session_id: str) -> Optional[AwaitingState]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.awaiting if session else None

    def take_awaiting(self, session_id: str) -> Optional[AwaitingState]:
        """Return and clear the awaiting state in one step."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            awaiting, session.awaiting = session.awaiting, None
            return awaiting

    def clear_awaiting(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.awaiting = None

    # -------------------------------------------------------------------------
    # PENDING CONFIRMATION
    # -------------------------------------------------------------------------

    def set_pending(self, session_id: str, action: PendingAction) -> None:
        """Hold an action for confirmation. Clears any awaiting state."""
        with self._lock:
            session = self._touch(session_id)
            session.awaiting = None
            session.pending_confirmation = action
            session.pending_since = _utcnow()

    def get_pending(self, session_id: str) -> Optional[PendingAction]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.pending_confirmation if session else None

    def take_pending(self, session_id: str) -> Optional[PendingAction]:
        """
        Return and clear the pending action in one step.

        Whoever takes it owns it: a second take (a retried "yes" or a
        concurrent expiry) gets None, so an action can never run twice.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            pending = session.pending_confirmation
            session.pending_confirmation = None
            session.pending_since = None
            return pending

    def clear_pending(self, session_id: str) -> None:
        self.take_pending(session_id)

    # -------------------------------------------------------------------------
    # NOTICES
    # -------------------------------------------------------------------------

    def set_notice(self, session_id: str, message: str) -> None:
        """Leave a message for the session's next turn. No-op for unknown sessions."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.notice = message

    def take_notice(self, session_id: str) -> Optional[str]:
        """Return and clear the session's notice in one step."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            notice, session.notice = session.notice, None
            return notice

    def clear_all(self) -> None:
        """Drop every session. Use for testing only."""
        with self._lock:
            self._sessions.clear()
        logger.warning("Cleared all sessions")


# ---------------------------------------------------------------------------
# HANDLER-FACING CAPABILITY
# ---------------------------------------------------------------------------

class SessionMemory:
    """
    What a handler may do to session state: ask a follow-up question.

    Bound to the current session; session_id may be passed explicitly to
    address another one. The Dispatcher hands out one per handler call and
    closes it when the call returns or times out. Writes through a closed
    handle are dropped, so a handler abandoned on timeout cannot change a
    session that later turns have moved on.
    """

    def __init__(self, store: SessionStore, session_id: str):
        self._store = store
        self._session_id = session_id
        self._closed = False
        # Held across each write so close() never lands mid-write
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            self._closed = True

    def set_awaiting(
        self,
        slot_name: str,
        originating_intent: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> None:
        target = session_id or self._session_id
        with self._lock:
            if self._closed:
                logger.warning(f"Session {target}: dropped late set_awaiting('{slot_name}') from a finished turn")
                return
            self._store.set_awaiting(target, slot_name, originating_intent)

    def get_awaiting(self, session_id: Optional[str] = None) -> Optional[AwaitingState]:
        return self._store.get_awaiting(session_id or self._session_id)

    def clear_awaiting(self, session_id: Optional[str] = None) -> None:
        target = session_id or self._session_id
        with self._lock:
            if self._closed:
                logger.warning(f"Session {target}: dropped late clear_awaiting from a finished turn")
                return
            self._store.clear_awaiting(target)
