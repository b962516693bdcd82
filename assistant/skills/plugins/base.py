"""
Helpers shared by the built-in skills.
"""

from typing import Any

from assistant.services.outcome import Outcome
from assistant.services.system_commands import CommandResult, SystemCommands


def get_commands(context: Any) -> SystemCommands:
    """The SystemCommands service for this turn (a fake in tests)."""
    return context.get_service("system_commands", SystemCommands)


def command_outcome(result: CommandResult, intent: str, done: str, failed: str) -> Outcome:
    """
    Outcome for a skill that ran one OS command.

    Args:
        result: What the command reported
        intent: Intent name, used as the outcome action
        done: Message on success
        failed: Message prefix on failure; the command detail is appended
    """
    if result.success:
        return Outcome(success=True, message=done, action=intent, data={"dry_run": result.dry_run} if result.dry_run else None)
    return Outcome(success=False, message=f"{failed}: {result.detail}", action=intent)
