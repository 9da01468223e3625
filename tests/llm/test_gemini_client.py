"""Tests for the Gemini client's response handling.

The SDK model object is replaced by a mock, so no request leaves the process.
"""

from types import SimpleNamespace
from unittest import mock

import pytest

from core.config import Settings
from core.gemini import GeminiClient, LLMError, LLMUnavailableError


def _candidate(*texts, finish_reason=1):
    parts = [SimpleNamespace(text=t) for t in texts]
    return SimpleNamespace(finish_reason=finish_reason, content=SimpleNamespace(parts=parts))


def _client(response=None, error=None, api_key="test-key"):
    client = GeminiClient(Settings(GEMINI_API_KEY=api_key, LLM_REQUEST_TIMEOUT=12.0))
    client.model = mock.Mock()
    if error is not None:
        client.model.generate_content.side_effect = error
    else:
        client.model.generate_content.return_value = response
    return client


# ═══════════════════════════════════════════════════════════════════════════════
# Successful generation
# ═══════════════════════════════════════════════════════════════════════════════

class TestGenerateContent:

    @pytest.mark.parametrize("finish_reason", [1, 2])
    def test_usable_finish_reasons_return_text(self, finish_reason):
        client = _client(SimpleNamespace(candidates=[_candidate("All good", finish_reason=finish_reason)]))
        assert client.generate_content("hello") == "All good"

    def test_parts_are_joined(self):
        client = _client(SimpleNamespace(candidates=[_candidate('{"a": ', "1}")]))
        assert client.generate_content("hello") == '{"a": 1}'

    def test_generation_options_forwarded(self):
        client = _client(SimpleNamespace(candidates=[_candidate("ok")]))
        client.generate_content("hello", temperature=0.4, max_tokens=4096)

        args, kwargs = client.model.generate_content.call_args
        assert args[0] == "hello"
        assert kwargs["generation_config"].temperature == 0.4
        assert kwargs["generation_config"].max_output_tokens == 4096
        assert kwargs["request_options"] == {"timeout": 12.0}

    def test_image_sent_inline(self):
        client = _client(SimpleNamespace(candidates=[_candidate("ok")]))
        client.generate_content_with_image("describe", b"\x89PNG", "image/png")

        contents = client.model.generate_content.call_args[0][0]
        assert contents == ["describe", {"mime_type": "image/png", "data": b"\x89PNG"}]


# ═══════════════════════════════════════════════════════════════════════════════
# Failure mapping
# ═══════════════════════════════════════════════════════════════════════════════

class TestGenerateContentFailures:

    def test_missing_key_is_unavailable(self):
        client = _client(SimpleNamespace(candidates=[_candidate("ok")]), api_key=None)

        assert client.is_configured is False
        with pytest.raises(LLMUnavailableError):
            client.generate_content("hello")
        client.model.generate_content.assert_not_called()

    def test_transport_error_wrapped(self):
        client = _client(error=RuntimeError("connection reset"))

        with pytest.raises(LLMError) as exc_info:
            client.generate_content("hello")
        assert not isinstance(exc_info.value, LLMUnavailableError)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_no_candidates(self):
        client = _client(SimpleNamespace(candidates=[]))
        with pytest.raises(LLMError, match="no candidates"):
            client.generate_content("hello")

    @pytest.mark.parametrize("finish_reason", [3, 4])
    def test_blocked_finish_reason(self, finish_reason):
        client = _client(SimpleNamespace(candidates=[_candidate("partial", finish_reason=finish_reason)]))
        with pytest.raises(LLMError, match="blocked"):
            client.generate_content("hello")

    def test_empty_parts(self):
        client = _client(SimpleNamespace(candidates=[_candidate()]))
        with pytest.raises(LLMError, match="empty content"):
            client.generate_content("hello")

    def test_parts_without_text(self):
        client = _client(SimpleNamespace(candidates=[_candidate("")]))
        with pytest.raises(LLMError, match="Empty response"):
            client.generate_content("hello")
