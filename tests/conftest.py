"""
Test configuration and fixtures for pytest.

Shared fixtures:
- FakeSystemCommands: records OS commands instead of running them
- registry: built-in skills, frozen
- dispatcher: fully wired Dispatcher with a seeded fallback and the fake
- client: FastAPI TestClient bound to that dispatcher
"""

import random
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from assistant.deps import get_dispatcher
from assistant.main import app
from assistant.monitoring.monitor import DispatchMonitor
from assistant.nlu.rules import DEFAULT_RULE_SOURCES
from assistant.services.dispatcher import Dispatcher
from assistant.services.session_store import SessionStore
from assistant.services.system_commands import CommandResult
from assistant.skills.fallback import FallbackProvider
from assistant.skills.plugins import load_builtin_skills
from assistant.skills.registry import SkillRegistry


# ---------------------------------------------------------------------------
# FAKE OS LAYER
# ---------------------------------------------------------------------------

class FakeSystemCommands:
    """
    Stand-in for SystemCommands.

    Every call is appended to .calls as (operation, argument). Set
    .fail = "some reason" to make every call report failure.
    """

    def __init__(self):
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.fail: Optional[str] = None

    def _result(self, operation: str, argument: Optional[str] = None) -> CommandResult:
        self.calls.append((operation, argument))
        if self.fail:
            return CommandResult(success=False, operation=operation, detail=self.fail)
        return CommandResult(success=True, operation=operation)

    async def open_url(self, url: str) -> CommandResult:
        return self._result("open_url", url)

    async def set_wifi(self, action: str) -> CommandResult:
        return self._result("wifi", action)

    async def set_bluetooth(self, action: str) -> CommandResult:
        return self._result("bluetooth", action)

    async def volume_up(self) -> CommandResult:
        return self._result("volume_up")

    async def volume_down(self) -> CommandResult:
        return self._result("volume_down")

    async def media_play_pause(self) -> CommandResult:
        return self._result("media_play_pause")

    async def lock_screen(self) -> CommandResult:
        return self._result("lock_screen")

    async def shutdown(self) -> CommandResult:
        return self._result("shutdown")

    async def restart(self) -> CommandResult:
        return self._result("restart")


# ---------------------------------------------------------------------------
# ENGINE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_commands() -> FakeSystemCommands:
    return FakeSystemCommands()


@pytest.fixture
def registry() -> SkillRegistry:
    registry = SkillRegistry()
    load_builtin_skills(registry)
    registry.freeze()
    return registry


@pytest.fixture
def dispatcher(registry, fake_commands) -> Dispatcher:
    return Dispatcher(
        registry=registry,
        rule_sources=DEFAULT_RULE_SOURCES,
        store=SessionStore(),
        fallback=FallbackProvider(rng=random.Random(0)),
        services={"system_commands": fake_commands},
        monitor=DispatchMonitor(),
    )


# ---------------------------------------------------------------------------
# HTTP FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def client(dispatcher):
    """
    TestClient with the dispatcher fixture injected.

    The lifespan is not entered, so no cleanup loop runs during tests.
    """
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()
