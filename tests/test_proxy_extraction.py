# tests/test_proxy_extraction.py
import pytest

from interview_prep.proxy import (
    extract_text,
    extract_text_with_source,
    extract_error_message,
    NO_CONTENT_FALLBACK,
)


CHOICES = {"choices": [{"message": {"role": "assistant", "content": "from choices"}}]}
PARTS = {"candidates": [{"content": {"parts": [{"text": "from parts"}]}}]}
OUTPUT_TEXT = {"candidates": [{"output_text": "from output_text"}]}
BARE_TEXT = {"text": "from text"}


@pytest.mark.parametrize("envelope,expected,source", [
    (CHOICES, "from choices", "choices"),
    (PARTS, "from parts", "candidates_parts"),
    (OUTPUT_TEXT, "from output_text", "candidates_output_text"),
    (BARE_TEXT, "from text", "text"),
])
def test_each_known_shape(envelope, expected, source):
    assert extract_text_with_source(envelope) == (expected, source)


def test_choices_take_precedence_when_all_present():
    envelope = {
        "choices": [{"message": {"content": "winner"}}],
        "candidates": [{"content": {"parts": [{"text": "loser"}]}, "output_text": "loser"}],
        "text": "loser",
    }
    assert extract_text(envelope) == "winner"


def test_empty_choice_content_falls_through():
    envelope = {
        "choices": [{"message": {"content": ""}}],
        "candidates": [{"output_text": "second chance"}],
    }
    assert extract_text(envelope) == "second chance"


@pytest.mark.parametrize("envelope", [
    {},
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"candidates": [{"content": {"parts": []}}]},
    {"candidates": "not-a-list"},
    {"text": None},
    [],
    None,
])
def test_nothing_populated_returns_fallback(envelope):
    assert extract_text(envelope) == NO_CONTENT_FALLBACK
    assert NO_CONTENT_FALLBACK == "AI did not return any content."


def test_error_message_priority():
    assert extract_error_message({"error": {"message": "rate limited", "code": 429}}) == "rate limited"
    assert extract_error_message({"error": "plain string"}) == "plain string"
    assert extract_error_message({"error": {"code": 500}}) == '{"code": 500}'
    assert extract_error_message({}) == "Unknown API error"
    assert extract_error_message([{"error": {"message": "list envelope"}}]) == "Unknown API error"
