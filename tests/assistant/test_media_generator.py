"""Tests for Imagen-backed focus illustrations and exercise stills."""

import base64

import pytest

from assistant_service.models import MediaGenerator, failed_focus_images, focus_image_prompts
from core.gemini import LLMUnavailableError
from core.imagen import ImageGenerationError

from conftest import FakeImageClient


PNG_BYTES = b"\x89PNG\r\n\x1a\nimage"


def test_focus_prompts_name_location_and_injury():
    anatomy, exercise = focus_image_prompts("left knee", "ACL sprain")
    assert "left knee anatomy with ACL sprain" in anatomy
    assert "ACL sprain rehabilitation targeting left knee" in exercise


def test_failed_focus_images_keys():
    assert failed_focus_images() == {"image1": "placeholder_focus1", "image2": "placeholder_focus2"}


class TestFocusImages:

    def test_returns_two_data_urls(self):
        images = FakeImageClient(image_bytes=PNG_BYTES)
        result = MediaGenerator(images).focus_images("left knee", "ACL sprain")

        expected = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
        assert result == {"image1": expected, "image2": expected}
        assert len(images.calls) == 2
        assert all(call["aspect_ratio"] == "4:3" for call in images.calls)
        assert images.calls[0]["options"]["person_generation"] == "allow_adult"

    def test_single_failure_uses_labelled_placeholder(self):
        images = FakeImageClient(errors=[None, ImageGenerationError("filtered")])
        result = MediaGenerator(images).focus_images("left knee", "ACL sprain")

        assert result["image1"].startswith("data:image/png;base64,")
        assert result["image2"].startswith("https://via.placeholder.com/400x300/1a1f3a/00FFFF")
        assert result["image2"].endswith("?text=ACL%20sprain%20Exercise")

    def test_unconfigured_client_propagates(self):
        images = FakeImageClient(errors=[LLMUnavailableError("GOOGLE_CLOUD_PROJECT_ID is not configured")])
        with pytest.raises(LLMUnavailableError):
            MediaGenerator(images).focus_images("left knee", "ACL sprain")


class TestExerciseImage:

    def test_returns_base64_payload(self):
        images = FakeImageClient(image_bytes=PNG_BYTES)
        result = MediaGenerator(images).exercise_image("Person doing a wall squat")

        assert base64.b64decode(result["imageData"]) == PNG_BYTES
        assert result["mimeType"] == "image/png"
        assert "still image" in result["message"]

        call = images.calls[0]
        assert call["model_name"] == "imagegeneration@006"
        assert call["aspect_ratio"] == "16:9"
        assert call["options"]["guidance_scale"] == 15

    def test_generation_error_propagates(self):
        images = FakeImageClient(errors=[ImageGenerationError("quota exceeded")])
        with pytest.raises(ImageGenerationError):
            MediaGenerator(images).exercise_image("Wall squat")
