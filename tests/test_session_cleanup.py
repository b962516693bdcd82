"""
Tests for SessionCleanupService.

These tests verify:
- Stale confirmations are expired through the Dispatcher
- Idle sessions are evicted
- The background loop starts and stops cleanly
"""

import asyncio

import pytest

from assistant.services.session_cleanup import SessionCleanupService


class TestRunOnce:

    @pytest.mark.asyncio
    async def test_expires_stale_confirmation(self, dispatcher, fake_commands):
        await dispatcher.handle_turn("shutdown", session_id="s")
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=-1, session_ttl=3600)

        expired = await cleanup.run_once()

        assert [o.action for o in expired] == ["confirmation_timeout"]
        assert expired[0].data == {"intent": "shutdown_system"}
        assert dispatcher.store.get_pending("s") is None

        # The session survives; a late "yes" is told it timed out
        outcome = await dispatcher.handle_turn("yes", session_id="s")
        assert outcome.action == "confirmation_timeout"
        assert outcome.message == expired[0].message
        assert fake_commands.calls == []

    @pytest.mark.asyncio
    async def test_fresh_confirmation_kept(self, dispatcher):
        await dispatcher.handle_turn("restart", session_id="s")
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=45, session_ttl=3600)

        assert await cleanup.run_once() == []
        assert dispatcher.store.get_pending("s") is not None

    @pytest.mark.asyncio
    async def test_evicts_idle_sessions(self, dispatcher):
        await dispatcher.handle_turn("hello", session_id="a")
        await dispatcher.handle_turn("hello", session_id="b")
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=45, session_ttl=-1)

        await cleanup.run_once()

        assert dispatcher.store.session_count() == 0

    @pytest.mark.asyncio
    async def test_timeout_counted_by_monitor(self, dispatcher):
        await dispatcher.handle_turn("lock the screen", session_id="s")
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=-1, session_ttl=3600)

        await cleanup.run_once()

        assert dispatcher.monitor.get_stats().turns_by_route.get("confirmation_timeout") == 1


class TestCleanupLoop:

    @pytest.mark.asyncio
    async def test_loop_runs_and_stops(self, dispatcher):
        await dispatcher.handle_turn("shutdown", session_id="s")
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=-1, session_ttl=3600)

        await cleanup.start_cleanup_loop(interval_seconds=0.01)
        await asyncio.sleep(0.1)
        await cleanup.stop_cleanup_loop()

        assert dispatcher.store.get_pending("s") is None
        assert cleanup._cleanup_task is None

    @pytest.mark.asyncio
    async def test_second_start_is_ignored(self, dispatcher):
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=45, session_ttl=3600)

        await cleanup.start_cleanup_loop(interval_seconds=10)
        task = cleanup._cleanup_task
        await cleanup.start_cleanup_loop(interval_seconds=10)

        assert cleanup._cleanup_task is task
        await cleanup.stop_cleanup_loop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, dispatcher):
        cleanup = SessionCleanupService(dispatcher, confirmation_timeout=45, session_ttl=3600)

        await cleanup.stop_cleanup_loop()

        assert cleanup._cleanup_task is None
