"""
Tests for the Fallback Provider.
"""

import random

import pytest

from assistant.skills.fallback import DEFAULT_RESPONSE, FALLBACK_RESPONSES, FallbackProvider


class TestRandomizedCategories:

    @pytest.mark.parametrize("category", ["unknown", "low_confidence", "error", "plugin_not_found"])
    def test_reply_from_category(self, category):
        provider = FallbackProvider(rng=random.Random(1))

        for _ in range(10):
            assert getattr(provider, category)() in FALLBACK_RESPONSES[category]

    def test_same_seed_same_sequence(self):
        a = FallbackProvider(rng=random.Random(42))
        b = FallbackProvider(rng=random.Random(42))

        assert [a.unknown() for _ in range(10)] == [b.unknown() for _ in range(10)]

    def test_replies_vary(self):
        provider = FallbackProvider(rng=random.Random(7))
        replies = {provider.unknown() for _ in range(50)}
        assert len(replies) > 1

    def test_missing_category(self):
        provider = FallbackProvider(responses={"unknown": []})

        assert provider.unknown() == DEFAULT_RESPONSE
        assert provider.pick("nonexistent") == DEFAULT_RESPONSE

    def test_context_arguments_accepted(self):
        provider = FallbackProvider(rng=random.Random(3))

        assert provider.low_confidence(0.42) in FALLBACK_RESPONSES["low_confidence"]
        assert provider.error(TimeoutError("slow")) in FALLBACK_RESPONSES["error"]
        assert provider.plugin_not_found("fly_drone") in FALLBACK_RESPONSES["plugin_not_found"]

    def test_custom_responses(self):
        provider = FallbackProvider(responses={"error": ["Oops."]})
        assert provider.error() == "Oops."


class TestFixedTemplates:

    def test_confirmation_with_action(self):
        provider = FallbackProvider()
        assert provider.confirmation_pending("shut down the computer") == \
            "Are you sure you want to shut down the computer?"

    def test_confirmation_without_action(self):
        assert FallbackProvider().confirmation_pending() == \
            "Are you sure you want to proceed with this action?"

    def test_timeout_and_cancelled(self):
        provider = FallbackProvider()

        assert provider.confirmation_timeout() == \
            "I was waiting for your confirmation, but didn't receive a response."
        assert provider.confirmation_cancelled() == "Alright, I've cancelled that action."

    def test_lost_context(self):
        assert "start again" in FallbackProvider().lost_context()
