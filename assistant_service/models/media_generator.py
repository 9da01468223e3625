"""
MotionCare Assistant Service - Media Generator

Illustrations for the assessment page: two anatomical focus images for an
injury, and a still image for an exercise description.
"""

import base64
import logging
from typing import Any, Dict, Tuple
from urllib.parse import quote

from core.imagen import ImageGenerationError

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"

FOCUS_ASPECT_RATIO = "4:3"
FOCUS_OPTIONS = {"safety_filter_level": "block_some", "person_generation": "allow_adult"}

EXERCISE_ASPECT_RATIO = "16:9"
EXERCISE_OPTIONS = {
    "negative_prompt": "blurry, low quality, distorted, cartoon, text overlay",
    "guidance_scale": 15,
}
EXERCISE_IMAGE_NOTE = "Vertex AI Imagen returns a still image; video generation is not available."


def focus_image_prompts(pain_location: str, injury_type: str) -> Tuple[str, str]:
    """Anatomy prompt and rehabilitation-exercise prompt for an injury."""
    anatomy = (
        f"Medical illustration showing {pain_location} anatomy with {injury_type}, "
        "clear focus on affected area, professional medical visualization, anatomically accurate, "
        "clean white background, educational diagram style"
    )
    exercise = (
        f"Physical therapy exercise diagram for {injury_type} rehabilitation targeting {pain_location}, "
        "showing proper form and movement arrows, professional medical illustration, side view, "
        "clean background"
    )
    return anatomy, exercise


def placeholder_image(text: str, background: str = "1a1f3a", foreground: str = "00FF00") -> str:
    return f"https://via.placeholder.com/400x300/{background}/{foreground}?text={quote(text, safe='')}"


def failed_focus_images() -> Dict[str, str]:
    """Image keys returned alongside a 500 when generation is unavailable."""
    return {"image1": "placeholder_focus1", "image2": "placeholder_focus2"}


def to_data_url(image_bytes: bytes, mime_type: str = PNG_MIME_TYPE) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


class MediaGenerator:
    """Imagen-backed illustrations."""

    def __init__(self, image_client):
        self.images = image_client

    def focus_images(self, pain_location: str, injury_type: str) -> Dict[str, str]:
        """
        Two focus illustrations as data URLs.

        A single failed image is replaced by a labelled placeholder URL.

        Raises:
            LLMUnavailableError: if image generation is not configured
        """
        anatomy_prompt, exercise_prompt = focus_image_prompts(pain_location, injury_type)
        logger.info(f"🖼️ Generating focus images for {pain_location} - {injury_type}")

        image1 = self._render_or_placeholder(
            anatomy_prompt, placeholder_image(f"{pain_location} Focus", foreground="00FF00")
        )
        image2 = self._render_or_placeholder(
            exercise_prompt, placeholder_image(f"{injury_type} Exercise", foreground="00FFFF")
        )
        return {"image1": image1, "image2": image2}

    def _render_or_placeholder(self, prompt: str, placeholder: str) -> str:
        try:
            image_bytes = self.images.generate_image(
                prompt, aspect_ratio=FOCUS_ASPECT_RATIO, **FOCUS_OPTIONS
            )
        except ImageGenerationError as e:
            logger.warning(f"Focus image failed ({e}); using placeholder")
            return placeholder
        return to_data_url(image_bytes)

    def exercise_image(self, prompt: str) -> Dict[str, Any]:
        """
        Still image for an exercise description.

        Raises:
            LLMError: if generation fails or is not configured
        """
        image_bytes = self.images.generate_image(
            prompt,
            model_name=self.images.exercise_model_name,
            aspect_ratio=EXERCISE_ASPECT_RATIO,
            **EXERCISE_OPTIONS,
        )
        return {
            "imageData": base64.b64encode(image_bytes).decode("ascii"),
            "mimeType": PNG_MIME_TYPE,
            "message": EXERCISE_IMAGE_NOTE,
        }
