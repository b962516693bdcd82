"""
Assistant - intent resolution and skill dispatch for a voice/text assistant.

Free-form utterances are classified by an ordered list of rule sources,
routed to registered skill handlers, optionally gated behind a yes/no
confirmation, and answered with an Outcome.

Entry points:
    assistant.services.dispatcher.Dispatcher  - the per-turn engine
    assistant.main:app                        - FastAPI host
"""

__version__ = "1.0.0"
