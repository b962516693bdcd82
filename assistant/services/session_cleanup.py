"""
Session Cleanup Service - Background expiry for the FastAPI host.

Every interval:
1. Unanswered confirmations older than CONFIRMATION_TIMEOUT_SECONDS are
   expired through the Dispatcher (so the expiry waits for any in-flight
   turn of that session and can never race a "yes").
2. Sessions idle for longer than SESSION_TTL_SECONDS are evicted.

The core has no timers of its own; this loop is the host's policy.

Usage:
    cleanup = SessionCleanupService(dispatcher, confirmation_timeout=45, session_ttl=300)
    await cleanup.start_cleanup_loop(interval_seconds=30)
    ...
    await cleanup.stop_cleanup_loop()
"""

import asyncio
import logging
from typing import List, Optional

from assistant.services.dispatcher import Dispatcher
from assistant.services.outcome import Outcome


logger = logging.getLogger("assistant.services.session_cleanup")


class SessionCleanupService:
    """Periodic confirmation expiry and idle-session eviction."""

    def __init__(self, dispatcher: Dispatcher, confirmation_timeout: float, session_ttl: float):
        self._dispatcher = dispatcher
        self._confirmation_timeout = confirmation_timeout
        self._session_ttl = session_ttl
        self._cleanup_task: Optional[asyncio.Task] = None

    async def run_once(self) -> List[Outcome]:
        """
        One cleanup pass.

        Returns:
            The confirmation-timeout outcomes produced in this pass
        """
        expired: List[Outcome] = []
        store = self._dispatcher.store

        for session_id in store.stale_confirmations(self._confirmation_timeout):
            outcome = await self._dispatcher.expire_confirmation(session_id)
            if outcome is not None:
                logger.info(f"Session {session_id}: {outcome.message}")
                expired.append(outcome)

        store.cleanup_expired(self._session_ttl)
        return expired

    async def start_cleanup_loop(self, interval_seconds: float = 30):
        """
        Start background task to run cleanup periodically.

        Args:
            interval_seconds: How often to run cleanup (default 30s)
        """
        if self._cleanup_task is not None:
            logger.warning("Cleanup loop already running")
            return

        async def cleanup_loop():
            while True:
                try:
                    await asyncio.sleep(interval_seconds)
                    await self.run_once()
                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error(f"Cleanup loop error: {e}", exc_info=True)

        self._cleanup_task = asyncio.create_task(cleanup_loop())
        logger.info(f"Started cleanup loop (interval: {interval_seconds}s)")

    async def stop_cleanup_loop(self):
        """Stop the background cleanup task."""
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Stopped cleanup loop")
