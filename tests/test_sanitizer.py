# tests/test_sanitizer.py
import json

import pytest

from interview_prep.sanitizer import parse_question_list, strip_code_fences, looks_double_encoded

RECORDS = [
    {"id": "1", "question": "What is a closure?", "answer": "A function with captured scope.", "pinned": False},
    {"id": "2", "question": "Explain REST.", "answer": "An architectural style.", "pinned": False},
]


def test_fenced_json_round_trip():
    text = "```json\n" + json.dumps(RECORDS, indent=2) + "\n```"
    assert parse_question_list(text) == RECORDS


def test_fence_markers_are_case_insensitive():
    text = "```JSON\n" + json.dumps(RECORDS) + "\n```"
    assert parse_question_list(text) == RECORDS


def test_plain_json_array():
    assert parse_question_list(json.dumps(RECORDS)) == RECORDS


def test_double_encoded_repair():
    text = "\"[{\\\"id\\\":\\\"1\\\",\\\"question\\\":\\\"Q\\\",\\\"answer\\\":\\\"A\\\",\\\"pinned\\\":false}]\""
    assert parse_question_list(text) == [{"id": "1", "question": "Q", "answer": "A", "pinned": False}]


def test_double_encoded_inside_fences():
    inner = json.dumps(RECORDS)
    text = "```json\n" + json.dumps(inner) + "\n```"
    assert parse_question_list(text) == RECORDS


def test_escaped_quotes_without_wrapping_string():
    # not valid JSON as-is; the unescape path recovers it
    text = '[{\\"id\\":\\"7\\",\\"question\\":\\"Q\\",\\"answer\\":\\"A\\",\\"pinned\\":false}]'
    assert parse_question_list(text) == [{"id": "7", "question": "Q", "answer": "A", "pinned": False}]


def test_legit_escaped_quotes_in_values_parse_directly():
    records = [{"id": "1", "question": 'What does "idempotent" mean?', "answer": "Same result.", "pinned": False}]
    text = json.dumps(records)
    assert looks_double_encoded(text)
    assert parse_question_list(text) == records


@pytest.mark.parametrize("text", [
    "not json at all",
    "",
    None,
    "```json\n```",
    "[{\"id\": \"1\", ",
    "\"just a string\"",
    "{\"id\": \"1\"}",
    "42",
])
def test_failures_fall_back_to_empty_list(text):
    assert parse_question_list(text) == []


def test_strip_code_fences():
    assert strip_code_fences("```json\n[1]\n```") == "[1]"
    assert strip_code_fences("  ```[2]```  ") == "[2]"


def test_looks_double_encoded():
    assert looks_double_encoded('"[{}]"')
    assert looks_double_encoded('{\\"a\\": 1}')
    assert not looks_double_encoded("[1, 2, 3]")


def test_deeply_nested_content_falls_back_to_empty_list():
    assert parse_question_list("[" * 100000 + "]" * 100000) == []
