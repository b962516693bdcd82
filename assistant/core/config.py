"""
Configuration module - centralized settings for the assistant.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export CONFIDENCE_FLOOR=0.7
        export HANDLER_TIMEOUT_SECONDS=10
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    # APP_NAME: Display name shown in API docs and logging
    APP_NAME: str = "Assistant Dispatch Core"

    # DEBUG: Enable debug mode (more verbose errors)
    DEBUG: bool = False

    # LOG_LEVEL: Level for the "assistant" logger tree
    LOG_LEVEL: str = "INFO"

    # ---------------------------------------------------------------------------
    # INTENT RESOLUTION
    # ---------------------------------------------------------------------------
    # CONFIDENCE_FLOOR: Candidates below this score get the low-confidence
    # fallback instead of being dispatched. The bound is inclusive.
    CONFIDENCE_FLOOR: float = Field(default=0.6, ge=0.0, le=1.0)

    # FALLBACK_SEED: Seed for fallback phrasing selection.
    # Leave unset in production for varied replies.
    FALLBACK_SEED: Optional[int] = None

    # ---------------------------------------------------------------------------
    # SKILL EXECUTION
    # ---------------------------------------------------------------------------
    # HANDLER_TIMEOUT_SECONDS: Upper bound on a single handler call.
    # A handler that runs longer is abandoned and the user gets the error reply.
    HANDLER_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)

    # SYSTEM_COMMANDS_ENABLED: When False, OS commands issued by skills are
    # logged but not executed (useful for demos and CI).
    SYSTEM_COMMANDS_ENABLED: bool = True

    # ---------------------------------------------------------------------------
    # SESSIONS
    # ---------------------------------------------------------------------------
    # DEFAULT_SESSION_ID: Used when a client does not send a session id
    DEFAULT_SESSION_ID: str = "default"

    # SESSION_TTL_SECONDS: Idle sessions older than this are evicted by the
    # host cleanup loop (5 minutes)
    SESSION_TTL_SECONDS: int = 300

    # CONFIRMATION_TIMEOUT_SECONDS: The host expires pending confirmations
    # older than this and reports the timeout reply
    CONFIRMATION_TIMEOUT_SECONDS: int = 45

    # CLEANUP_INTERVAL_SECONDS: How often the host cleanup loop runs
    CLEANUP_INTERVAL_SECONDS: int = 30


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from assistant.core.config import settings
settings = Settings()
