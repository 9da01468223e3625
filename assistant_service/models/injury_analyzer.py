"""
MotionCare Assistant Service - Injury Analyzer

Identifies the injured structure, injury type and severity from a photo.
"""

import base64
import binascii
import logging
import re
from typing import Any, Dict, Tuple

from shared.llm_json import LLMResponseParseError, extract_json_object

from .prompts import INJURY_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"
_MIME_PATTERN = re.compile(r"data:([^;]+);")


def default_injury_analysis() -> Dict[str, Any]:
    """Analysis used when the model reply holds no JSON."""
    return {
        "body_part": "unspecified structure",
        "painLocation": "unspecified structure",
        "injuryType": "General discomfort",
        "severity": "moderate",
        "recommendations": ["Gentle stretching", "Ice therapy", "Rest"],
    }


def failed_injury_analysis() -> Dict[str, Any]:
    """Analysis returned alongside a 500 when the model could not be reached."""
    return {
        "body_part": "unspecified structure (analysis failed)",
        "painLocation": "unspecified structure",
        "injuryType": "General discomfort",
        "severity": "moderate",
        "recommendations": [
            "Consult a healthcare professional",
            "Apply ice if swelling present",
            "Rest the affected area",
        ],
    }


def decode_image_data_url(image_data_url: str) -> Tuple[bytes, str]:
    """
    Split a data URL (or bare base64 string) into bytes and MIME type.

    Raises:
        ValueError: if the payload is not valid base64
    """
    match = _MIME_PATTERN.match(image_data_url)
    mime_type = match.group(1) if match else DEFAULT_MIME_TYPE

    payload = image_data_url.split(",", 1)[1] if "," in image_data_url else image_data_url
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"imageDataUrl is not valid base64: {e}") from e

    if not image_bytes:
        raise ValueError("imageDataUrl contains no image data")
    return image_bytes, mime_type


class InjuryAnalyzer:
    """Vision analysis of an injury photo."""

    TEMPERATURE = 0.3
    MAX_TOKENS = 2048

    def __init__(self, llm_client):
        self.llm = llm_client

    def analyze(self, image_data_url: str) -> Dict[str, Any]:
        """
        Analyze an injury photo.

        Raises:
            ValueError: if the image payload cannot be decoded
            LLMError: if the model call fails
        """
        image_bytes, mime_type = decode_image_data_url(image_data_url)
        logger.info(f"🔍 Analyzing injury image ({mime_type}, {len(image_bytes)} bytes)")

        raw = self.llm.generate_content_with_image(
            INJURY_ANALYSIS_PROMPT,
            image_bytes,
            mime_type,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )

        try:
            parsed = extract_json_object(raw)
        except LLMResponseParseError as e:
            logger.warning(f"Injury analysis reply not parseable ({e}); using default analysis")
            return default_injury_analysis()

        return {
            "body_part": parsed.get("body_part") or parsed.get("painLocation"),
            "painLocation": parsed.get("painLocation") or parsed.get("body_part"),
            "injuryType": parsed.get("injuryType"),
            "severity": parsed.get("severity"),
            "recommendations": parsed.get("recommendations") or [],
        }
