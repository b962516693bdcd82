"""
Candidate Arbitrator - Runs rule sources in priority order and picks a winner.

Policy: first match wins.
=========================
Rule sources are hand-ordered by specificity (a "search on YouTube" matcher
sits before the generic "open website" matcher whose pattern is a superset).
The arbitrator therefore never compares confidences across sources: the
first source to return a candidate wins and the remaining sources are not
invoked for that utterance.

A source that raises (or returns something that is not a valid candidate)
is isolated: the failure is recorded as a ClassificationError, logged, and
arbitration continues with the next source.

Floor gating (low confidence) is the Dispatcher's decision, not ours.

Usage:
    arbitrator = CandidateArbitrator()
    candidate = arbitrator.resolve("turn on wifi", nlu, DEFAULT_RULE_SOURCES)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from assistant.core.errors import ClassificationError
from assistant.nlu.schemas import Candidate, CandidateLike, NLUContext


logger = logging.getLogger("assistant.nlu.arbitrator")


# Signature every rule source follows
Classifier = Callable[[str, NLUContext], CandidateLike]


@dataclass(frozen=True)
class RuleSource:
    """
    A named classifier function.

    Attributes:
        name: Identifier used in logs and metrics (e.g. "website.open_website")
        classify: Pure function (text, nlu) -> Candidate | dict | None
    """
    name: str
    classify: Classifier


@dataclass
class ArbitrationResult:
    """
    Full record of one arbitration pass.

    Attributes:
        candidate: Winning candidate, or None if nothing matched
        source: Name of the winning rule source
        errors: Failures isolated during the pass
        attempted: Number of sources invoked (including the winner)
    """
    candidate: Optional[Candidate] = None
    source: Optional[str] = None
    errors: List[ClassificationError] = field(default_factory=list)
    attempted: int = 0

    @property
    def matched(self) -> bool:
        return self.candidate is not None


def coerce_candidate(raw: Any) -> Optional[Candidate]:
    """
    Turn a rule source's return value into a Candidate.

    Accepts a Candidate, a mapping with intent/confidence/entities, or None.

    Raises:
        TypeError: For any other return type
        ValidationError: If the mapping is not a valid candidate
    """
    if raw is None:
        return None
    if isinstance(raw, Candidate):
        return raw
    if isinstance(raw, dict):
        data = dict(raw)
        if data.get("entities") is None:
            data["entities"] = {}
        return Candidate.model_validate(data)
    raise TypeError(f"Rule source returned {type(raw).__name__}, expected Candidate, dict or None")


class CandidateArbitrator:
    """
    Selects one candidate per utterance from an ordered list of rule sources.

    Stateless: safe to share across concurrent turns.
    """

    def arbitrate(
        self,
        text: str,
        nlu: NLUContext,
        rule_sources: Sequence[RuleSource],
    ) -> ArbitrationResult:
        """
        Invoke sources in order until one returns a candidate.

        Args:
            text: Raw utterance text
            nlu: NLU context for the utterance
            rule_sources: Sources in priority order

        Returns:
            ArbitrationResult with the winner (if any) and isolated errors
        """
        result = ArbitrationResult()

        for source in rule_sources:
            result.attempted += 1
            try:
                candidate = coerce_candidate(source.classify(text, nlu))
            except Exception as e:
                error = ClassificationError(source.name, e)
                result.errors.append(error)
                logger.warning(
                    f"Rule source failed, treating as no match: {error}",
                    extra={"rule_source": source.name},
                )
                continue

            if candidate is not None:
                result.candidate = candidate
                result.source = source.name
                logger.debug(
                    f"Rule '{source.name}' matched intent={candidate.intent} "
                    f"confidence={candidate.confidence:.2f}"
                )
                return result

        logger.debug(f"No rule matched after {result.attempted} sources")
        return result

    def resolve(
        self,
        text: str,
        nlu: NLUContext,
        rule_sources: Sequence[RuleSource],
    ) -> Optional[Candidate]:
        """Return only the winning candidate (or None)."""
        return self.arbitrate(text, nlu, rule_sources).candidate
