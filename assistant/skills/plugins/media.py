"""
Media Skill - Playback control.
"""

from typing import Any, Dict

from assistant.services.outcome import Outcome
from assistant.skills.plugins.base import command_outcome, get_commands
from assistant.skills.registry import HandlerDescriptor, Skill


async def music_control(entities: Dict[str, Any], context: Any) -> Outcome:
    result = await get_commands(context).media_play_pause()
    return command_outcome(result, "music_control", "Toggling playback, sir.", "I couldn't control the music player")


skill = Skill(
    name="media",
    description="Music and media playback control",
    intents=[
        HandlerDescriptor("music_control", 0.6, False, music_control, "play or pause music"),
    ],
)
