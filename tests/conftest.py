"""Shared fixtures: scripted LLM and image clients and an app wired to them."""

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.gemini import LLMError


class FakeLLM:
    """Records prompts and replays a scripted reply (or raises)."""

    is_configured = True

    def __init__(self, reply: str = "{}", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate_content(self, prompt, temperature=0.7, max_tokens=None):
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        return self.reply

    def generate_content_with_image(self, prompt, image_bytes, mime_type, temperature=0.3, max_tokens=None):
        self.calls.append({
            "prompt": prompt,
            "image_bytes": image_bytes,
            "mime_type": mime_type,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error:
            raise self.error
        return self.reply


class FakeImageClient:
    """Returns fixed PNG bytes; errors are raised in call order (None means succeed)."""

    is_configured = True
    exercise_model_name = "imagegeneration@006"

    def __init__(self, image_bytes: bytes = b"png-bytes", errors=None):
        self.image_bytes = image_bytes
        self.errors = list(errors or [])
        self.calls = []

    def generate_image(self, prompt, model_name=None, aspect_ratio="1:1", **options):
        self.calls.append({
            "prompt": prompt,
            "model_name": model_name,
            "aspect_ratio": aspect_ratio,
            "options": options,
        })
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        return self.image_bytes


def make_landmarks(points=None, visibility=1.0):
    """33 landmarks at (0.5, 0.5) with the given overrides {index: (x, y)}."""
    landmarks = [{"x": 0.5, "y": 0.5, "z": 0.0, "visibility": visibility} for _ in range(33)]
    for index, xy in (points or {}).items():
        if xy is None:
            landmarks[index] = None
        else:
            landmarks[index] = {"x": xy[0], "y": xy[1], "z": 0.0, "visibility": visibility}
    return landmarks


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def failing_llm():
    return FakeLLM(error=LLMError("upstream timeout"))


@pytest.fixture
def settings():
    return Settings(GEMINI_API_KEY="test-key", LLM_THREAD_POOL_SIZE=2)


@pytest.fixture
def make_client(settings):
    from main import create_app

    def _make(llm, images=None):
        return TestClient(create_app(settings, llm_client=llm, image_client=images or FakeImageClient()))

    return _make
