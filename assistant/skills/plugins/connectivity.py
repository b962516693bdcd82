"""
Connectivity Skill - WiFi and Bluetooth radios.

Entities: {"action": "on" | "off" | "toggle"} (defaults to toggle).
"""

from typing import Any, Dict

from assistant.services.outcome import Outcome
from assistant.skills.plugins.base import command_outcome, get_commands
from assistant.skills.registry import HandlerDescriptor, Skill


VERBS = {"on": "Turning on", "off": "Turning off", "toggle": "Toggling"}


def _action(entities: Dict[str, Any]) -> str:
    action = str(entities.get("action") or "toggle").lower()
    return action if action in VERBS else "toggle"


async def toggle_wifi(entities: Dict[str, Any], context: Any) -> Outcome:
    action = _action(entities)
    result = await get_commands(context).set_wifi(action)
    return command_outcome(result, "toggle_wifi", f"{VERBS[action]} WiFi, sir.", "I couldn't change the WiFi state")


async def toggle_bluetooth(entities: Dict[str, Any], context: Any) -> Outcome:
    action = _action(entities)
    result = await get_commands(context).set_bluetooth(action)
    return command_outcome(
        result, "toggle_bluetooth", f"{VERBS[action]} Bluetooth, sir.", "I couldn't change the Bluetooth state"
    )


skill = Skill(
    name="connectivity",
    description="WiFi and Bluetooth control",
    intents=[
        HandlerDescriptor("toggle_wifi", 0.7, False, toggle_wifi, "change the WiFi state"),
        HandlerDescriptor("toggle_bluetooth", 0.7, False, toggle_bluetooth, "change the Bluetooth state"),
    ],
)
