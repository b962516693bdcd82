"""
NLU Schemas - Pydantic models for utterances and classification candidates.

These schemas define what flows into the Candidate Arbitrator and what a
rule source may hand back.

Design Philosophy:
=================
- Immutable models (frozen) so one turn can never mutate another's input
- Validation at construction time (confidence must lie in [0, 1])
- Easy serialization to JSON/dict for logging and the HTTP surface
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class NLUContext(BaseModel):
    """
    Pre-extracted understanding of an utterance.

    Attributes:
        entities: Named values pulled from the text
            (e.g. "website", "urls", "searchQuery")
        signals: Named flags about the text (e.g. "isCommand", "isQuestion")
    """
    model_config = ConfigDict(frozen=True)

    entities: Dict[str, Any] = Field(default_factory=dict)
    signals: Dict[str, Any] = Field(default_factory=dict)

    def entity(self, name: str, default: Any = None) -> Any:
        """Get an entity value, or default if absent/empty."""
        value = self.entities.get(name)
        return default if value in (None, "", []) else value

    def signal(self, name: str) -> bool:
        """Get a boolean signal (False when absent)."""
        return bool(self.signals.get(name))


class Utterance(BaseModel):
    """
    One user turn.

    The NLU context is optional: when a client already ran its own
    extraction it can pass it here, otherwise the Dispatcher builds one.

    Example:
        Utterance(text="turn on wifi")
    """
    model_config = ConfigDict(frozen=True)

    text: str
    nlu: Optional[NLUContext] = None


class Candidate(BaseModel):
    """
    An unconfirmed classification produced by one rule source.

    Ephemeral: consumed within a single arbitration pass.
    """
    model_config = ConfigDict(frozen=True)

    intent: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    entities: Dict[str, Any] = Field(default_factory=dict)


# What a rule source is allowed to return
CandidateLike = Union[Candidate, Dict[str, Any], None]
