"""
Dispatcher - Turns an utterance into exactly one Outcome.

Turn algorithm:
===============
1. Load (or create) the session.
2. Pending confirmation? Classify the reply:
   - affirmative: consume it and run the stored handler
   - negative: consume it and answer "cancelled"
   - neither: ask again; the pending action stays, nothing is classified
3. Awaiting a slot? The utterance text becomes {slot_name: text}, the
   awaiting state is cleared and the originating intent (or the
   registry's route for the slot) is dispatched without arbitration.
4. Otherwise arbitrate over the rule sources. No candidate -> unknown
   reply; candidate below the confidence floor -> low-confidence reply.
5. Look up the handler; a miss -> plugin-not-found reply.
6. Handler requires confirmation -> store it and ask.
7. Execute. Exceptions and timeouts become the error reply; nothing a
   handler does can escape handle_turn.

Concurrency:
============
Turns for the same session are serialized by a per-session asyncio.Lock
held for the whole turn, so they apply in arrival order. Turns for
different sessions run in parallel. Session state itself is guarded by
the SessionStore's own lock, which is never held while a handler runs.

Usage:
    dispatcher = Dispatcher(registry, DEFAULT_RULE_SOURCES, store=SessionStore())
    outcome = await dispatcher.handle_turn("turn on wifi", session_id="abc")
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

from assistant.core.errors import HandlerExecutionError, UnknownIntentError
from assistant.monitoring.monitor import DispatchMonitor
from assistant.nlu.arbitrator import CandidateArbitrator, RuleSource
from assistant.nlu.pipeline import build_nlu_context
from assistant.nlu.schemas import Utterance
from assistant.services.confirmation import ConfirmationController, ReplyKind, classify_reply
from assistant.services.outcome import Outcome
from assistant.services.session_store import Session, SessionMemory, SessionStore
from assistant.skills.fallback import FallbackProvider
from assistant.skills.registry import HandlerDescriptor, SkillRegistry


logger = logging.getLogger("assistant.services.dispatcher")


DEFAULT_CONFIDENCE_FLOOR = 0.6
DEFAULT_HANDLER_TIMEOUT_SECONDS = 15.0
DEFAULT_SESSION_ID = "default"


# ---------------------------------------------------------------------------
# HANDLER CONTEXT
# ---------------------------------------------------------------------------

@dataclass
class HandlerContext:
    """
    What a handler receives alongside its entities.

    Attributes:
        session_id: Session the turn belongs to
        request_id: Unique identifier for this turn (for logging/tracing)
        memory: Lets the handler ask a follow-up question
            (memory.set_awaiting(slot_name, originating_intent))
        original_text: The utterance as typed/spoken
        start_time: Turn start time for latency tracking
        services: Host-provided collaborators (e.g. "system_commands")

    Usage:
        commands = context.get_service("system_commands", SystemCommands)
    """

    session_id: str
    request_id: str
    memory: SessionMemory
    original_text: str = ""
    start_time: float = field(default_factory=time.time)
    services: Dict[str, Any] = field(default_factory=dict)

    def get_service(self, name: str, default_factory: Any = None) -> Any:
        """
        Get a host-provided service, falling back to a default.

        Tests inject fakes by passing services= to the Dispatcher.

        Raises:
            ValueError: If service not found and no default provided
        """
        if name in self.services:
            return self.services[name]
        if default_factory is not None:
            return default_factory()
        raise ValueError(f"Service '{name}' not found and no default provided")


# ---------------------------------------------------------------------------
# TURN RESULT
# ---------------------------------------------------------------------------

@dataclass
class _Turn:
    """Bookkeeping for one turn, reported to the monitor."""
    outcome: Outcome
    route: str
    intent: Optional[str] = None
    confidence: Optional[float] = None
    classification_errors: int = 0


def _is_async_callable(fn: Any) -> bool:
    if inspect.iscoroutinefunction(fn):
        return True
    call = getattr(fn, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


def normalize_result(intent: str, result: Any) -> Outcome:
    """
    Coerce a handler's return value into an Outcome.

    - Outcome: returned as is
    - str: successful outcome with that message
    - dict: Outcome(**dict), action defaults to the intent

    Raises:
        TypeError: For anything else (including None)
    """
    if isinstance(result, Outcome):
        return result
    if isinstance(result, str):
        return Outcome(success=True, message=result, action=intent)
    if isinstance(result, dict):
        data = dict(result)
        data.setdefault("success", True)
        data.setdefault("message", "")
        data.setdefault("action", intent)
        return Outcome(**data)
    raise TypeError(f"Handler for '{intent}' returned {type(result).__name__}, expected Outcome, str or dict")


# ---------------------------------------------------------------------------
# DISPATCHER
# ---------------------------------------------------------------------------

class Dispatcher:
    """
    Orchestrates one turn: confirmation, awaiting, arbitration, execution.

    All collaborators are injected; nothing here is global.
    """

    def __init__(
        self,
        registry: SkillRegistry,
        rule_sources: Sequence[RuleSource],
        store: Optional[SessionStore] = None,
        fallback: Optional[FallbackProvider] = None,
        arbitrator: Optional[CandidateArbitrator] = None,
        confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
        handler_timeout: float = DEFAULT_HANDLER_TIMEOUT_SECONDS,
        services: Optional[Dict[str, Any]] = None,
        monitor: Optional[DispatchMonitor] = None,
        default_session_id: str = DEFAULT_SESSION_ID,
    ):
        self.registry = registry
        self.rule_sources: List[RuleSource] = list(rule_sources)
        self.store = store or SessionStore()
        self.fallback = fallback or FallbackProvider()
        self.arbitrator = arbitrator or CandidateArbitrator()
        self.confirmations = ConfirmationController(self.store, self.fallback)
        self.confidence_floor = confidence_floor
        self.handler_timeout = handler_timeout
        self.services = dict(services or {})
        self.monitor = monitor
        self.default_session_id = default_session_id

        # session_id -> [lock, number of turns holding or waiting on it]
        self._turn_locks: Dict[str, List[Any]] = {}

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    async def handle_turn(
        self,
        utterance: Union[str, Utterance],
        session_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Outcome:
        """
        Process one utterance for one session.

        Args:
            utterance: Raw text or an Utterance (with optional NLU context)
            session_id: Session key (defaults to the configured default)
            request_id: Tracing id (generated if absent)

        Returns:
            Exactly one Outcome. Never raises for handler or rule failures.
        """
        if isinstance(utterance, str):
            utterance = Utterance(text=utterance)
        session_id = session_id or self.default_session_id
        request_id = request_id or str(uuid4())
        start_time = time.time()

        async with self._session_turn(session_id):
            turn = await self._run_turn(utterance, session_id, request_id, start_time)

        latency_ms = (time.time() - start_time) * 1000
        logger.info(
            f"[{request_id}] session={session_id} route={turn.route} intent={turn.intent} "
            f"success={turn.outcome.success} ({latency_ms:.1f}ms)"
        )
        if self.monitor is not None:
            self.monitor.track_turn(
                request_id=request_id,
                session_id=session_id,
                route=turn.route,
                intent=turn.intent,
                confidence=turn.confidence,
                success=turn.outcome.success,
                latency_ms=latency_ms,
                classification_errors=turn.classification_errors,
            )
        return turn.outcome

    async def expire_confirmation(self, session_id: str) -> Optional[Outcome]:
        """
        Drop an unanswered confirmation for a session.

        Waits for any in-flight turn of that session, so it never races a
        "yes" that is already being handled.

        Returns:
            The confirmation-timeout Outcome, or None if nothing was pending
        """
        async with self._session_turn(session_id):
            outcome = self.confirmations.expire(session_id)

        if outcome is not None and self.monitor is not None:
            self.monitor.track_turn(
                request_id=str(uuid4()),
                session_id=session_id,
                route="confirmation_timeout",
                intent=outcome.data.get("intent") if outcome.data else None,
                confidence=None,
                success=False,
                latency_ms=0.0,
            )
        return outcome

    async def reset_session(self, session_id: str) -> bool:
        """
        Forget all state for a session.

        Waits for any in-flight turn of that session, so a handler finishing
        after the reset cannot bring the session back.
        """
        async with self._session_turn(session_id):
            return self.store.evict(session_id)

    # -------------------------------------------------------------------------
    # TURN SERIALIZATION
    # -------------------------------------------------------------------------

    def _session_turn(self, session_id: str) -> "_SessionTurn":
        return _SessionTurn(self._turn_locks, session_id)

    # -------------------------------------------------------------------------
    # TURN STEPS
    # -------------------------------------------------------------------------

    async def _run_turn(
        self,
        utterance: Utterance,
        session_id: str,
        request_id: str,
        start_time: float,
    ) -> _Turn:
        session = self.store.get_or_create(session_id)

        # A confirmation expired since the last turn: a late yes/no gets the
        # timeout reply, anything else is handled with the notice prefixed
        notice = self.store.take_notice(session_id)
        if notice is not None and session.pending_confirmation is None:
            if classify_reply(utterance.text) is not ReplyKind.NEITHER:
                return _Turn(
                    outcome=Outcome(success=False, message=notice, action="confirmation_timeout"),
                    route="confirmation_timeout",
                )
            turn = await self._route_turn(utterance, session, request_id, start_time)
            turn.outcome = replace(turn.outcome, message=f"{notice} {turn.outcome.message}".strip())
            return turn

        return await self._route_turn(utterance, session, request_id, start_time)

    async def _route_turn(
        self,
        utterance: Utterance,
        session: Session,
        request_id: str,
        start_time: float,
    ) -> _Turn:
        session_id = session.session_id
        text = utterance.text

        def make_context() -> HandlerContext:
            return HandlerContext(
                session_id=session_id,
                request_id=request_id,
                memory=SessionMemory(self.store, session_id),
                original_text=text,
                start_time=start_time,
                services=self.services,
            )

        # Step 2: pending confirmation
        if session.pending_confirmation is not None:
            return await self._handle_confirmation_reply(text, session_id, make_context)

        # Step 3: awaiting slot
        if session.awaiting is not None:
            awaiting = self.store.take_awaiting(session_id)
            if awaiting is not None:
                intent = awaiting.originating_intent or self.registry.route_for_slot(awaiting.slot_name)
                if intent is None:
                    logger.warning(
                        f"[{request_id}] Awaiting slot '{awaiting.slot_name}' has no consumer",
                        extra={"session_id": session_id},
                    )
                    return _Turn(
                        outcome=Outcome(success=False, message=self.fallback.lost_context(), action="lost_context"),
                        route="lost_context",
                    )
                entities = {awaiting.slot_name: text.strip()}
                return await self._dispatch_intent(intent, entities, None, session_id, make_context, "awaiting")

        # Step 4: arbitration
        nlu = utterance.nlu or build_nlu_context(text)
        result = self.arbitrator.arbitrate(text, nlu, self.rule_sources)
        errors = len(result.errors)
        candidate = result.candidate

        if candidate is None:
            return _Turn(
                outcome=Outcome(success=False, message=self.fallback.unknown(), action="unknown"),
                route="unknown",
                classification_errors=errors,
            )

        if candidate.confidence < self.confidence_floor:
            logger.debug(
                f"[{request_id}] {candidate.intent} below floor "
                f"({candidate.confidence:.2f} < {self.confidence_floor:.2f})"
            )
            return _Turn(
                outcome=Outcome(
                    success=False,
                    message=self.fallback.low_confidence(candidate.confidence),
                    action="low_confidence",
                    data={"intent": candidate.intent, "confidence": candidate.confidence},
                ),
                route="low_confidence",
                intent=candidate.intent,
                confidence=candidate.confidence,
                classification_errors=errors,
            )

        turn = await self._dispatch_intent(
            candidate.intent, dict(candidate.entities), candidate.confidence, session_id, make_context, "executed"
        )
        turn.classification_errors = errors
        return turn

    async def _handle_confirmation_reply(self, text: str, session_id: str, make_context) -> _Turn:
        kind = classify_reply(text)

        if kind is ReplyKind.AFFIRMATIVE:
            pending = self.confirmations.take(session_id)
            if pending is None:
                # Expired between load and take
                return _Turn(
                    outcome=Outcome(
                        success=False,
                        message=self.fallback.confirmation_timeout(),
                        action="confirmation_timeout",
                    ),
                    route="confirmation_timeout",
                )
            outcome, failed = await self._execute(pending.handler, dict(pending.entities), make_context())
            route = "error" if failed else "confirmation_executed"
            return _Turn(outcome=outcome, route=route, intent=pending.intent)

        if kind is ReplyKind.NEGATIVE:
            outcome = self.confirmations.cancel(session_id)
            intent = outcome.data.get("intent") if outcome.data else None
            return _Turn(outcome=outcome, route="confirmation_cancelled", intent=intent)

        pending = self.store.get_pending(session_id)
        if pending is None:
            return _Turn(
                outcome=Outcome(
                    success=False,
                    message=self.fallback.confirmation_timeout(),
                    action="confirmation_timeout",
                ),
                route="confirmation_timeout",
            )
        return _Turn(outcome=self.confirmations.prompt(pending), route="confirmation_reprompt", intent=pending.intent)

    async def _dispatch_intent(
        self,
        intent: str,
        entities: Dict[str, Any],
        confidence: Optional[float],
        session_id: str,
        make_context,
        route: str,
    ) -> _Turn:
        # Step 5: registry lookup
        descriptor = self.registry.lookup(intent)
        if descriptor is None:
            error = UnknownIntentError(intent)
            logger.warning(str(error), extra={"session_id": session_id})
            return _Turn(
                outcome=Outcome(
                    success=False,
                    message=self.fallback.plugin_not_found(intent),
                    action="plugin_not_found",
                    data={"intent": intent},
                ),
                route="plugin_not_found",
                intent=intent,
                confidence=confidence,
            )

        # Step 6: confirmation gate
        if descriptor.requires_confirmation:
            outcome = self.confirmations.request(session_id, intent, entities, descriptor)
            return _Turn(outcome=outcome, route="confirmation_required", intent=intent, confidence=confidence)

        # Step 7: execute
        outcome, failed = await self._execute(descriptor, entities, make_context())
        return _Turn(outcome=outcome, route="error" if failed else route, intent=intent, confidence=confidence)

    async def _execute(
        self,
        descriptor: HandlerDescriptor,
        entities: Dict[str, Any],
        context: HandlerContext,
    ) -> Tuple[Outcome, bool]:
        """
        Run a handler with the timeout applied. Returns (outcome, failed).

        Sync handlers run in a worker thread. On timeout the thread keeps
        running to completion; its result is discarded and its session
        writes are dropped, since the memory handle is closed on return.
        """
        intent = descriptor.intent
        try:
            if _is_async_callable(descriptor.execute):
                call = descriptor.execute(entities, context)
            else:
                call = asyncio.to_thread(descriptor.execute, entities, context)
            result = await asyncio.wait_for(call, timeout=self.handler_timeout)
            return normalize_result(intent, result), False
        except asyncio.TimeoutError as e:
            error = HandlerExecutionError(intent, e)
            logger.error(
                f"[{context.request_id}] Handler for '{intent}' timed out after {self.handler_timeout}s",
                extra={"session_id": context.session_id},
            )
        except Exception as e:
            error = HandlerExecutionError(intent, e)
            logger.error(f"[{context.request_id}] {error}", exc_info=True, extra={"session_id": context.session_id})
        finally:
            context.memory.close()

        return Outcome(
            success=False,
            message=self.fallback.error(error),
            action="error",
            data={"intent": intent, "error": type(error.cause).__name__},
        ), True


class _SessionTurn:
    """
    Async context manager holding a session's turn lock.

    Locks are created on first use and dropped when no turn holds or
    waits on them, so the table does not grow with every session ever seen.
    """

    def __init__(self, table: Dict[str, List[Any]], session_id: str):
        self._table = table
        self._session_id = session_id

    async def __aenter__(self) -> None:
        entry = self._table.get(self._session_id)
        if entry is None:
            entry = [asyncio.Lock(), 0]
            self._table[self._session_id] = entry
        entry[1] += 1
        try:
            await entry[0].acquire()
        except BaseException:
            self._release_ref(entry)
            raise

    async def __aexit__(self, exc_type, exc, tb) -> None:
        entry = self._table[self._session_id]
        entry[0].release()
        self._release_ref(entry)

    def _release_ref(self, entry: List[Any]) -> None:
        entry[1] -= 1
        if entry[1] == 0 and self._table.get(self._session_id) is entry:
            del self._table[self._session_id]
