"""Tests for pulling JSON objects out of model output."""

import pytest

from core.gemini import LLMError
from shared.llm_json import LLMResponseParseError, extract_json_object


@pytest.mark.parametrize("text", [
    '{"score": 80}',
    '```json\n{"score": 80}\n```',
    '```\n{"score": 80}\n```',
    'Sure! Here is the analysis:\n{"score": 80}\nLet me know if you need more.',
])
def test_extracts_object(text):
    assert extract_json_object(text) == {"score": 80}


def test_nested_object_spanning_lines():
    text = 'Result:\n{\n  "a": {"b": [1, 2]},\n  "c": "x"\n}\nThanks'
    assert extract_json_object(text) == {"a": {"b": [1, 2]}, "c": "x"}


@pytest.mark.parametrize("text", ["", "   ", "no json here", "{not: valid}", "[1, 2, 3]"])
def test_raises_parse_error(text):
    with pytest.raises(LLMResponseParseError):
        extract_json_object(text)


def test_parse_error_is_llm_error_and_keeps_raw_text():
    with pytest.raises(LLMError) as exc_info:
        extract_json_object("garbage")
    assert exc_info.value.raw_text == "garbage"


def test_prose_fence_before_object():
    text = 'Observations:\n```\nknee valgus noted\n```\n{"overallScore": 60}'
    assert extract_json_object(text) == {"overallScore": 60}


def test_second_fence_holds_object():
    text = '```text\nquick notes\n```\nThen:\n```json\n{"severity": "mild"}\n```'
    assert extract_json_object(text) == {"severity": "mild"}
