"""
MotionCare Shared - LLM JSON extraction

Pulls the JSON object out of free-form model output. Parsing either
succeeds or raises; substituting a default is the caller's decision.
"""

import json
import re
from typing import Any, Dict

from core.gemini import LLMError

# First "{" to last "}" across lines
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class LLMResponseParseError(LLMError):
    """Model output did not contain a JSON object."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract and parse the JSON object embedded in model output.

    Handles Markdown code fences and prose before or after the object.

    Raises:
        LLMResponseParseError: if no JSON object can be parsed
    """
    if not text or not text.strip():
        raise LLMResponseParseError("Empty model response", text or "")

    # Fenced blocks first, then the whole reply; a fence may hold prose instead of the object
    candidates = [m.group(1) for m in _FENCE_PATTERN.finditer(text)]
    candidates.append(text)

    problem = "No JSON object found in model response"
    for candidate in candidates:
        match = _OBJECT_PATTERN.search(candidate)
        if not match:
            continue
        try:
            value = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            problem = f"Invalid JSON in model response: {e}"
            continue
        if isinstance(value, dict):
            return value
        problem = "Model response JSON is not an object"

    raise LLMResponseParseError(problem, text)
