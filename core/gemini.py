"""
MotionCare Gemini Client

Thin wrapper around the Google Gemini API used by every LLM-backed flow.
Built once from the application settings and shared by reference.
"""

import logging
from typing import Optional

import google.generativeai as genai

from core.config import Settings

logger = logging.getLogger(__name__)

# finish_reason values that still carry usable text: STOP, MAX_TOKENS
_USABLE_FINISH_REASONS = (1, 2)


class LLMError(Exception):
    """Base error for failed language-model calls."""


class LLMUnavailableError(LLMError):
    """The model cannot be called (e.g. no API key configured)."""


class GeminiClient:
    """
    Wrapper for Google Gemini API.
    Handles API key configuration, model initialization, and content generation.
    """

    def __init__(self, settings: Settings):
        self.api_key = settings.GEMINI_API_KEY
        self.model_name = settings.GEMINI_MODEL
        self.timeout = settings.LLM_REQUEST_TIMEOUT

        if self.api_key:
            genai.configure(api_key=self.api_key)
        else:
            logger.warning("⚠️ GEMINI_API_KEY not set - LLM endpoints will fail until configured")

        self.model = genai.GenerativeModel(self.model_name)
        logger.info(f"GeminiClient initialized (model={self.model_name})")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate_content(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate text for a prompt.

        Raises:
            LLMError: if the API call fails or returns no usable text
        """
        return self._generate(prompt, temperature, max_tokens)

    def generate_content_with_image(
        self,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Generate text for a prompt accompanied by one inline image.

        Raises:
            LLMError: if the API call fails or returns no usable text
        """
        contents = [prompt, {"mime_type": mime_type, "data": image_bytes}]
        return self._generate(contents, temperature, max_tokens)

    def _generate(self, contents, temperature: float, max_tokens: Optional[int]) -> str:
        if not self.is_configured:
            raise LLMUnavailableError("GEMINI_API_KEY is not configured")

        generation_config = genai.types.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )

        logger.info(f"Generating content with Gemini (temp={temperature}, model={self.model_name})")
        try:
            response = self.model.generate_content(
                contents,
                generation_config=generation_config,
                request_options={"timeout": self.timeout},
            )
        except Exception as e:
            logger.error(f"Gemini API error: {type(e).__name__}: {e}")
            raise LLMError(f"Failed to generate content: {e}") from e

        if not response.candidates:
            raise LLMError("Gemini API returned no candidates")

        candidate = response.candidates[0]
        finish_reason = getattr(candidate, "finish_reason", None)
        if finish_reason and finish_reason not in _USABLE_FINISH_REASONS:
            raise LLMError(f"Content was blocked by Gemini (finish_reason={finish_reason})")

        if not candidate.content or not candidate.content.parts:
            raise LLMError("Gemini API returned empty content")

        text = "".join(getattr(part, "text", "") for part in candidate.content.parts)
        if not text:
            raise LLMError("Empty response from Gemini API")

        logger.info(f"Successfully generated content ({len(text)} chars)")
        return text
