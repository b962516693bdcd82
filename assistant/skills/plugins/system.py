"""
System Skill - Volume, screen lock and power.

Power operations and the screen lock ask for confirmation first.
"""

from typing import Any, Dict

from assistant.services.outcome import Outcome
from assistant.skills.plugins.base import command_outcome, get_commands
from assistant.skills.registry import HandlerDescriptor, Skill


async def volume_up(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).volume_up()
    return command_outcome(result, "volume_up", "Turning the volume up, sir.", "I couldn't change the volume")


async def volume_down(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).volume_down()
    return command_outcome(result, "volume_down", "Turning the volume down, sir.", "I couldn't change the volume")


async def lock_screen(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).lock_screen()
    return command_outcome(result, "lock_screen", "Locking the screen, sir.", "I couldn't lock the screen")


async def shutdown_system(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).shutdown()
    return command_outcome(result, "shutdown_system", "Shutting down, sir. Goodbye.", "I couldn't shut down")


async def restart_system(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).restart()
    return command_outcome(result, "restart_system", "Restarting, sir.", "I couldn't restart")


skill = Skill(
    name="system",
    description="Volume, screen lock and power management",
    intents=[
        HandlerDescriptor("volume_up", 0.6, False, volume_up, "turn the volume up"),
        HandlerDescriptor("volume_down", 0.6, False, volume_down, "turn the volume down"),
        HandlerDescriptor("lock_screen", 0.8, True, lock_screen, "lock the screen"),
        HandlerDescriptor("shutdown_system", 0.9, True, shutdown_system, "shut down the computer"),
        HandlerDescriptor("restart_system", 0.9, True, restart_system, "restart the computer"),
    ],
)
