"""
MotionCare Imagen Client

Vertex AI Imagen wrapper used for anatomical focus illustrations and
exercise stills. Models are loaded on first use and cached per name.
"""

import logging
import threading
from typing import Optional

import vertexai
from vertexai.preview.vision_models import ImageGenerationModel

from core.config import Settings
from core.gemini import LLMError, LLMUnavailableError

logger = logging.getLogger(__name__)


class ImageGenerationError(LLMError):
    """Imagen call failed or produced no image."""


class ImagenClient:
    """
    Wrapper for Vertex AI Imagen.
    Handles project initialization, model loading and image generation.
    """

    def __init__(self, settings: Settings):
        self.project_id = settings.GOOGLE_CLOUD_PROJECT_ID
        self.location = settings.GOOGLE_CLOUD_LOCATION
        self.model_name = settings.IMAGEN_MODEL
        self.exercise_model_name = settings.IMAGEN_EXERCISE_MODEL

        self._models = {}
        self._initialized = False
        self._lock = threading.Lock()

        if not self.project_id:
            logger.warning("⚠️ GOOGLE_CLOUD_PROJECT_ID not set - image generation disabled")
        else:
            logger.info(f"ImagenClient ready (project={self.project_id}, location={self.location})")

    @property
    def is_configured(self) -> bool:
        return bool(self.project_id)

    def _get_model(self, model_name: str) -> ImageGenerationModel:
        with self._lock:
            if not self._initialized:
                vertexai.init(project=self.project_id, location=self.location)
                self._initialized = True

            model = self._models.get(model_name)
            if model is None:
                logger.info(f"📦 Loading Imagen model {model_name}")
                model = ImageGenerationModel.from_pretrained(model_name)
                self._models[model_name] = model
        return model

    def generate_image(
        self,
        prompt: str,
        model_name: Optional[str] = None,
        aspect_ratio: str = "1:1",
        **options,
    ) -> bytes:
        """
        Generate one PNG image for a prompt.

        Extra options (negative_prompt, guidance_scale, safety_filter_level,
        person_generation) are passed to the SDK unchanged.

        Raises:
            LLMUnavailableError: if no Google Cloud project is configured
            ImageGenerationError: if the call fails or returns no image
        """
        if not self.is_configured:
            raise LLMUnavailableError("GOOGLE_CLOUD_PROJECT_ID is not configured")

        model_name = model_name or self.model_name
        logger.info(f"🎨 Generating image with {model_name} (aspect={aspect_ratio})")
        try:
            model = self._get_model(model_name)
            response = model.generate_images(
                prompt=prompt,
                number_of_images=1,
                aspect_ratio=aspect_ratio,
                **options,
            )
        except Exception as e:
            logger.error(f"Imagen API error: {type(e).__name__}: {e}")
            raise ImageGenerationError(f"Failed to generate image: {e}") from e

        images = list(response.images) if response is not None else []
        if not images:
            raise ImageGenerationError("Imagen returned no images (prompt may have been filtered)")

        image_bytes = images[0]._image_bytes
        if not image_bytes:
            raise ImageGenerationError("Imagen returned an empty image")

        logger.info(f"Successfully generated image ({len(image_bytes)} bytes)")
        return image_bytes
