"""
Main application entry point - FastAPI app instance and configuration.

Startup wiring (lifespan):
1. Configure logging
2. Build the skill registry from the built-in skills and freeze it
   (a broken or duplicate skill aborts startup here)
3. Build the Dispatcher with the default rule sources
4. Start the session cleanup loop

Run with: uvicorn assistant.main:app --reload
"""

import logging
import random
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant import __version__
from assistant.core.config import Settings, settings
from assistant.monitoring import dispatch_monitor, setup_logging
from assistant.nlu.rules import DEFAULT_RULE_SOURCES
from assistant.routers import intent
from assistant.services.dispatcher import Dispatcher
from assistant.services.session_cleanup import SessionCleanupService
from assistant.services.session_store import SessionStore
from assistant.services.system_commands import SystemCommands
from assistant.skills.fallback import FallbackProvider
from assistant.skills.plugins import load_builtin_skills
from assistant.skills.registry import SkillRegistry


logger = logging.getLogger("assistant.main")


def create_dispatcher(
    config: Settings = settings,
    services: Optional[Dict[str, Any]] = None,
) -> Dispatcher:
    """
    Wire the registry, rule sources and session store into a Dispatcher.

    Raises:
        DuplicateIntentError, InvalidSkillError: If a built-in skill is broken
    """
    registry = SkillRegistry()
    load_builtin_skills(registry)
    registry.freeze()

    if services is None:
        services = {"system_commands": SystemCommands(enabled=config.SYSTEM_COMMANDS_ENABLED)}

    return Dispatcher(
        registry=registry,
        rule_sources=DEFAULT_RULE_SOURCES,
        store=SessionStore(),
        fallback=FallbackProvider(rng=random.Random(config.FALLBACK_SEED)),
        confidence_floor=config.CONFIDENCE_FLOOR,
        handler_timeout=config.HANDLER_TIMEOUT_SECONDS,
        services=services,
        monitor=dispatch_monitor,
        default_session_id=config.DEFAULT_SESSION_ID,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the Dispatcher on startup, stop the cleanup loop on shutdown."""
    setup_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME} v{__version__}...")

    dispatcher = create_dispatcher(settings)
    cleanup = SessionCleanupService(
        dispatcher,
        confirmation_timeout=settings.CONFIRMATION_TIMEOUT_SECONDS,
        session_ttl=settings.SESSION_TTL_SECONDS,
    )
    app.state.dispatcher = dispatcher
    await cleanup.start_cleanup_loop(interval_seconds=settings.CLEANUP_INTERVAL_SECONDS)

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await cleanup.stop_cleanup_loop()
    app.state.dispatcher = None


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# intent.router: /intent turn processing, skills, stats, sessions
app.include_router(intent.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
