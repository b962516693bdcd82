"""
Tests for the Skill Registry.

Tests for:
- Descriptor registration and lookup
- Duplicate intent rejection
- Plugin contract validation
- Freezing
- Awaiting routes
- The built-in skill set
"""

from dataclasses import FrozenInstanceError

import pytest

from assistant.core.errors import DuplicateIntentError, InvalidSkillError, RegistryFrozenError
from assistant.skills.registry import HandlerDescriptor, Skill, SkillRegistry


def noop(entities, context):
    return "ok"


def descriptor(intent: str, confirm: bool = False, confidence: float = 0.5, **kwargs) -> HandlerDescriptor:
    return HandlerDescriptor(intent, confidence, confirm, noop, **kwargs)


# ===========================================================================
# REGISTER / LOOKUP
# ===========================================================================

class TestRegisterAndLookup:

    def test_lookup_registered(self):
        registry = SkillRegistry()
        d = descriptor("toggle_wifi")

        registry.register(d)

        assert registry.lookup("toggle_wifi") is d
        assert registry.has_intent("toggle_wifi")

    def test_lookup_missing_returns_none(self):
        assert SkillRegistry().lookup("fly_to_moon") is None

    def test_lookup_is_pure(self):
        registry = SkillRegistry()
        registry.register(descriptor("a"))

        registry.lookup("a")
        registry.lookup("missing")

        assert registry.list_intents() == ["a"]

    def test_duplicate_register_raises(self):
        registry = SkillRegistry()
        registry.register(descriptor("toggle_wifi", plugin="connectivity"))

        with pytest.raises(DuplicateIntentError) as exc_info:
            registry.register(descriptor("toggle_wifi", plugin="other"))

        assert exc_info.value.intent == "toggle_wifi"
        assert exc_info.value.existing_plugin == "connectivity"

    def test_duplicate_keeps_original(self):
        registry = SkillRegistry()
        original = descriptor("a", description="first")
        registry.register(original)

        with pytest.raises(DuplicateIntentError):
            registry.register(descriptor("a", description="second"))

        assert registry.lookup("a") is original

    def test_descriptor_is_immutable(self):
        d = descriptor("a")
        with pytest.raises(FrozenInstanceError):
            d.requires_confirmation = True


# ===========================================================================
# SKILL BUNDLES
# ===========================================================================

class TestRegisterSkill:

    def test_registers_all_intents_with_owner(self):
        registry = SkillRegistry()
        registry.register_skill(Skill("demo", "Demo skill", [descriptor("a"), descriptor("b", confirm=True)]))

        assert registry.list_intents() == ["a", "b"]
        assert registry.lookup("a").plugin == "demo"
        assert registry.lookup("b").requires_confirmation is True

    def test_duplicate_across_skills(self):
        registry = SkillRegistry()
        registry.register_skill(Skill("one", "First", [descriptor("shared")]))

        with pytest.raises(DuplicateIntentError) as exc_info:
            registry.register_skill(Skill("two", "Second", [descriptor("fresh"), descriptor("shared")]))

        assert exc_info.value.existing_plugin == "one"
        # Nothing from the rejected skill was registered
        assert registry.lookup("fresh") is None

    def test_duplicate_within_skill(self):
        registry = SkillRegistry()

        with pytest.raises(DuplicateIntentError):
            registry.register_skill(Skill("dup", "Dup", [descriptor("x"), descriptor("x")]))

        assert registry.lookup("x") is None

    def test_same_skill_name_twice(self):
        registry = SkillRegistry()
        registry.register_skill(Skill("demo", "Demo", [descriptor("a")]))

        with pytest.raises(InvalidSkillError):
            registry.register_skill(Skill("demo", "Demo again", [descriptor("b")]))

    def test_awaiting_routes_registered(self):
        registry = SkillRegistry()
        registry.register_skill(Skill(
            "browser", "Browser", [descriptor("open_website")],
            awaiting_routes={"ask_website_name": "open_website"},
        ))

        assert registry.route_for_slot("ask_website_name") == "open_website"
        assert registry.route_for_slot("unknown_slot") is None


# ===========================================================================
# PLUGIN CONTRACT
# ===========================================================================

class TestPluginContract:

    @pytest.mark.parametrize("skill", [
        Skill("", "desc", []),
        Skill("   ", "desc", []),
        Skill("name", "", []),
        Skill("name", "desc", [HandlerDescriptor("x", 0.5, False, "not callable")]),
        Skill("name", "desc", [HandlerDescriptor("x", "high", False, noop)]),
        Skill("name", "desc", [HandlerDescriptor("x", 1.5, False, noop)]),
        Skill("name", "desc", [HandlerDescriptor("x", -0.1, False, noop)]),
        Skill("name", "desc", [HandlerDescriptor("x", True, False, noop)]),
        Skill("name", "desc", [HandlerDescriptor("x", 0.5, "yes", noop)]),
        Skill("name", "desc", [HandlerDescriptor("", 0.5, False, noop)]),
        Skill("name", "desc", [{"intent": "x"}]),
    ])
    def test_invalid_skill_rejected(self, skill):
        registry = SkillRegistry()

        with pytest.raises(InvalidSkillError):
            registry.register_skill(skill)

        assert registry.list_intents() == []

    def test_integer_confidence_accepted(self):
        registry = SkillRegistry()
        registry.register_skill(Skill("name", "desc", [HandlerDescriptor("x", 1, False, noop)]))
        assert registry.has_intent("x")

    def test_conflicting_awaiting_route(self):
        registry = SkillRegistry()
        registry.register_awaiting_route("slot", "a")
        registry.register_awaiting_route("slot", "a")

        with pytest.raises(InvalidSkillError):
            registry.register_awaiting_route("slot", "b")


# ===========================================================================
# FREEZING
# ===========================================================================

class TestFreeze:

    def test_register_after_freeze(self):
        registry = SkillRegistry()
        registry.register(descriptor("a"))
        registry.freeze()

        with pytest.raises(RegistryFrozenError):
            registry.register(descriptor("b"))
        with pytest.raises(RegistryFrozenError):
            registry.register_skill(Skill("late", "Late", [descriptor("c")]))
        with pytest.raises(RegistryFrozenError):
            registry.register_awaiting_route("slot", "a")

    def test_lookup_after_freeze(self):
        registry = SkillRegistry()
        registry.register(descriptor("a"))
        registry.freeze()
        registry.freeze()

        assert registry.frozen is True
        assert registry.lookup("a") is not None


# ===========================================================================
# BUILT-IN SKILLS
# ===========================================================================

class TestBuiltinSkills:

    def test_expected_intents(self, registry):
        assert set(registry.list_intents()) == {
            "open_website", "open_youtube", "search_youtube", "google_search", "ask_which_website",
            "toggle_wifi", "toggle_bluetooth",
            "volume_up", "volume_down", "lock_screen", "shutdown_system", "restart_system",
            "music_control",
            "greeting", "tell_time", "tell_date",
        }

    def test_sensitive_intents_require_confirmation(self, registry):
        assert registry.stats()["confirmation_required"] == ["lock_screen", "restart_system", "shutdown_system"]

    def test_website_slot_routed(self, registry):
        assert registry.route_for_slot("ask_website_name") == "open_website"

    def test_every_intent_has_description(self, registry):
        for intent in registry.list_intents():
            assert registry.lookup(intent).description

    def test_list_skills(self, registry):
        skills = {s["name"]: s for s in registry.list_skills()}

        assert set(skills) == {"browser", "connectivity", "system", "media", "general"}
        wifi = next(i for i in skills["connectivity"]["intents"] if i["intent"] == "toggle_wifi")
        assert wifi["plugin"] == "connectivity"
        assert "execute" not in wifi

    def test_get_metadata(self, registry):
        meta = registry.get_metadata("shutdown_system")

        assert meta["requires_confirmation"] is True
        assert meta["description"] == "shut down the computer"
        assert registry.get_metadata("missing") is None
