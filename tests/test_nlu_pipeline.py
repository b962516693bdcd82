"""
Tests for the NLU pipeline (entity and signal extraction).
"""

import pytest
from pydantic import ValidationError

from assistant.nlu.pipeline import (
    build_nlu_context,
    extract_app_name,
    extract_search_query,
    extract_urls,
    extract_website,
    normalize,
    question_type,
    sentiment,
    tokenize,
)
from assistant.nlu.schemas import Candidate, NLUContext


class TestNormalization:

    def test_normalize(self):
        assert normalize("  Hello,   WORLD!! ") == "hello world"

    def test_normalize_empty(self):
        assert normalize("") == ""

    def test_tokenize(self):
        assert tokenize("Turn on the Wi-Fi!") == ["turn", "on", "the", "wi-fi"]


class TestEntities:

    def test_urls(self):
        assert extract_urls("go to https://Example.org/docs and github.com") == [
            "https://example.org/docs",
            "github.com",
        ]

    def test_website_prefers_url(self):
        assert extract_website("open github", ["example.org"]) == "example.org"

    def test_known_website(self):
        assert extract_website("please open Netflix", []) == "netflix"

    def test_no_website(self):
        assert extract_website("turn on wifi", []) is None

    @pytest.mark.parametrize("text,expected", [
        ("search for cat videos", "cat videos"),
        ("search youtube for lofi beats", "lofi beats"),
        ("look up the weather", "the weather"),
        ("find pizza places in town", "pizza places"),
        ("turn on wifi", None),
    ])
    def test_search_query(self, text, expected):
        assert extract_search_query(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("open spotify", "spotify"),
        ("launch Terminal", "terminal"),
        ("open google.com", None),
        ("open website", None),
        ("hello", None),
    ])
    def test_app_name(self, text, expected):
        assert extract_app_name(text) == expected


class TestSignals:

    @pytest.mark.parametrize("text,expected", [
        ("what time is it", "what"),
        ("How are you", "how"),
        ("is it raining", "yes_no"),
        ("turn on wifi", None),
    ])
    def test_question_type(self, text, expected):
        assert question_type(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("this is great, thanks", "positive"),
        ("that was terrible", "negative"),
        ("open github", "neutral"),
    ])
    def test_sentiment(self, text, expected):
        assert sentiment(text) == expected

    def test_full_context(self):
        nlu = build_nlu_context("Open GitHub")

        assert nlu.entity("website") == "github"
        assert nlu.signal("isCommand") is True
        assert nlu.signal("isQuestion") is False
        assert nlu.entity("urls") is None

    def test_negation(self):
        assert build_nlu_context("don't turn off wifi").signal("hasNegation") is True


class TestSchemas:

    def test_context_is_frozen(self):
        nlu = NLUContext(entities={"website": "github"})
        with pytest.raises(ValidationError):
            nlu.entities = {}

    def test_entity_default(self):
        nlu = NLUContext(entities={"urls": [], "website": ""})

        assert nlu.entity("urls", ["fallback"]) == ["fallback"]
        assert nlu.entity("website") is None

    @pytest.mark.parametrize("confidence", [-0.1, 1.1])
    def test_candidate_confidence_bounds(self, confidence):
        with pytest.raises(ValidationError):
            Candidate(intent="x", confidence=confidence)

    def test_candidate_requires_intent(self):
        with pytest.raises(ValidationError):
            Candidate(intent="", confidence=0.5)
