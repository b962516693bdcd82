"""
Outcome - The single result type of a dispatched turn.

Every path through the Dispatcher ends in an Outcome: a handler's own
result, a confirmation prompt, or a fallback reply.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Outcome:
    """
    Result of one turn.

    Attributes:
        success: Whether the request was carried out
        message: Text to show or speak to the user
        action: Machine-readable label (intent name, or an engine label
            such as "unknown", "low_confidence", "confirmation_required")
        data: Optional structured payload
    """
    success: bool
    message: str
    action: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "action": self.action,
            "data": self.data,
        }
