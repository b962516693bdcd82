"""
General Skill - Greetings, time and date.

Plain functions with no I/O; the Dispatcher runs them in a worker thread.
"""

import random
from datetime import datetime
from typing import Any, Dict

from assistant.skills.registry import HandlerDescriptor, Skill


GREETINGS = [
    "Hello sir, how can I assist you today?",
    "Good to see you, sir. What can I do for you?",
    "Hi there! How may I help?",
    "Hello! I'm ready to assist.",
    "Greetings! What would you like me to do?",
]


def time_of_day(hour: int) -> str:
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    if hour < 21:
        return "Good evening"
    return "Good night"


def greeting(entities: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return {
        "success": True,
        "message": random.choice(GREETINGS),
        "data": {"time_of_day": time_of_day(datetime.now().hour)},
    }


def tell_time(entities: Dict[str, Any], context: Any) -> str:
    return f"The current time is {datetime.now().strftime('%I:%M %p')}, sir."


def tell_date(entities: Dict[str, Any], context: Any) -> str:
    now = datetime.now()
    return f"Today is {now.strftime('%A')}, {now.day} {now.strftime('%B %Y')}, sir."


skill = Skill(
    name="general",
    description="Greetings and simple questions about the time and date",
    intents=[
        HandlerDescriptor("greeting", 0.4, False, greeting, "say hello"),
        HandlerDescriptor("tell_time", 0.5, False, tell_time, "tell the time"),
        HandlerDescriptor("tell_date", 0.5, False, tell_date, "tell the date"),
    ],
)
