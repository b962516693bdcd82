"""
Error taxonomy for intent resolution and skill dispatch.

Which errors are fatal:
- DuplicateIntentError, InvalidSkillError, RegistryFrozenError: raised while
  wiring skills at startup. They abort startup.
- ClassificationError: a rule source failed. Logged and treated as "no match".
- UnknownIntentError: registry miss. Surfaced as the plugin-not-found reply.
- HandlerExecutionError: a handler raised or timed out. Surfaced as the
  generic error reply, never propagated out of the Dispatcher.
"""

from typing import Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class AssistantError(Exception):
    """Base exception for all dispatch-engine errors."""
    pass


class ClassificationError(AssistantError):
    """Raised (and recorded) when a rule source fails to classify an utterance."""

    def __init__(self, source: str, cause: BaseException):
        super().__init__(f"Rule source '{source}' failed: {cause}")
        self.source = source
        self.cause = cause


class DuplicateIntentError(AssistantError):
    """Raised when an intent name is registered twice."""

    def __init__(self, intent: str, existing_plugin: Optional[str] = None):
        owner = f" Already registered by '{existing_plugin}'" if existing_plugin else ""
        super().__init__(f"Duplicate intent '{intent}'.{owner}")
        self.intent = intent
        self.existing_plugin = existing_plugin


class InvalidSkillError(AssistantError):
    """Raised when a skill bundle violates the plugin contract."""
    pass


class RegistryFrozenError(AssistantError):
    """Raised when registering after the registry was frozen for dispatch."""
    pass


class UnknownIntentError(AssistantError):
    """Raised when a resolved intent has no registered handler."""

    def __init__(self, intent: str):
        super().__init__(f"No handler registered for intent '{intent}'")
        self.intent = intent


class HandlerExecutionError(AssistantError):
    """Wraps a failure (exception or timeout) raised by a skill handler."""

    def __init__(self, intent: str, cause: BaseException):
        super().__init__(f"Handler for '{intent}' failed: {cause!r}")
        self.intent = intent
        self.cause = cause
