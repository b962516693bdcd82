"""
Intent Router - API endpoints for turn processing.

HTTP handling only; every turn is delegated to the Dispatcher.

Endpoints:
==========
- POST   /intent                        process one utterance
- GET    /intent/skills                 registered skills and intents
- GET    /intent/stats                  dispatch metrics
- DELETE /intent/sessions/{session_id}  forget a session
"""

import logging
import time
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from assistant.deps import get_dispatcher
from assistant.monitoring import dispatch_monitor
from assistant.nlu.pipeline import build_nlu_context
from assistant.nlu.schemas import NLUContext, Utterance
from assistant.services.dispatcher import Dispatcher


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("assistant.routers.intent")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/intent", tags=["intent"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class IntentRequest(BaseModel):
    """
    Request schema for the /intent endpoint.

    Example:
    {
        "text": "turn on wifi",
        "session_id": "kitchen-speaker"
    }

    entities/signals, when given, are laid over the server-side NLU
    extraction for this utterance.
    """
    text: str = Field(..., min_length=1, max_length=500, description="User utterance")
    session_id: Optional[str] = Field(default=None, max_length=128, description="Session key")
    entities: Optional[Dict[str, Any]] = Field(default=None, description="Client-side entities")
    signals: Optional[Dict[str, Any]] = Field(default=None, description="Client-side signals")


class IntentResponse(BaseModel):
    """
    Response schema for the /intent endpoint.

    Example:
    {
        "success": true,
        "message": "Turning on WiFi, sir.",
        "action": "toggle_wifi",
        "data": null,
        "session_id": "kitchen-speaker",
        "request_id": "0b9c...",
        "processing_time_ms": 3.2
    }
    """
    success: bool
    message: str
    action: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    session_id: str
    request_id: str
    processing_time_ms: float


class SkillsResponse(BaseModel):
    """Response schema for /intent/skills endpoint."""
    skills: List[Dict[str, Any]]
    stats: Dict[str, Any]


class DispatchStatsResponse(BaseModel):
    """Response schema for /intent/stats endpoint."""
    total_turns: int
    successful_turns: int
    failed_turns: int
    success_rate: str
    avg_latency_ms: float
    classification_errors: int
    turns_by_route: Dict[str, int]
    turns_by_intent: Dict[str, int]
    active_sessions: int


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def _build_utterance(request: IntentRequest) -> Utterance:
    """Utterance with client-supplied entities/signals merged over ours."""
    if request.entities is None and request.signals is None:
        return Utterance(text=request.text)

    nlu = build_nlu_context(request.text)
    return Utterance(
        text=request.text,
        nlu=NLUContext(
            entities={**nlu.entities, **(request.entities or {})},
            signals={**nlu.signals, **(request.signals or {})},
        ),
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("", response_model=IntentResponse)
async def process_intent(
    request: IntentRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """
    Process one utterance.

    Failures inside the turn (unknown request, low confidence, handler
    errors) still return 200 with success=false and a user-facing message.

    **Examples:**
    - "turn on wifi"
    - "open website", then "github"
    - "shutdown", then "yes"
    """
    request_id = str(uuid4())
    session_id = request.session_id or dispatcher.default_session_id
    start_time = time.time()

    try:
        outcome = await dispatcher.handle_turn(
            _build_utterance(request),
            session_id=session_id,
            request_id=request_id,
        )
    except Exception as e:
        logger.error(f"[{request_id}] Failed to process intent: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process intent",
        )

    return IntentResponse(
        **outcome.to_dict(),
        session_id=session_id,
        request_id=request_id,
        processing_time_ms=round((time.time() - start_time) * 1000, 2),
    )


@router.get("/skills", response_model=SkillsResponse)
async def list_skills(dispatcher: Dispatcher = Depends(get_dispatcher)):
    """Registered skills with their intents and metadata."""
    return SkillsResponse(
        skills=dispatcher.registry.list_skills(),
        stats=dispatcher.registry.stats(),
    )


@router.get("/stats", response_model=DispatchStatsResponse)
async def get_dispatch_stats(dispatcher: Dispatcher = Depends(get_dispatcher)):
    """
    Aggregated dispatch metrics.

    Counts turns by route (executed, unknown, low_confidence, ...) and by
    intent, plus latency and rule-source failures.
    """
    monitor = dispatcher.monitor or dispatch_monitor
    stats = monitor.get_stats().to_dict()
    return DispatchStatsResponse(**stats, active_sessions=dispatcher.store.session_count())


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    dispatcher: Dispatcher = Depends(get_dispatcher),
):
    """Forget a session's awaiting/pending state."""
    if not await dispatcher.reset_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session '{session_id}' not found",
        )
