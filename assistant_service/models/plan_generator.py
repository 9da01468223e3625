"""
MotionCare Assistant Service - Exercise Plan Generator

Four-week progressive rehabilitation plan for an injury.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from shared.llm_json import LLMResponseParseError, extract_json_object

from .prompts import EXERCISE_PLAN_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_SUMMARY = "Patient needs rehabilitation exercises"


def default_exercise_plan() -> Dict[str, Any]:
    """One gentle week used when the model reply holds no JSON."""
    return {
        "weeklyPlan": [
            {
                "week": 1,
                "exercises": [
                    {
                        "name": "Gentle Range of Motion",
                        "sets": 3,
                        "reps": 10,
                        "duration": "2 minutes",
                        "instructions": "Slowly move the affected area through its pain-free range of motion.",
                        "focusPoints": ["Move slowly", "Stop if pain increases"],
                        "safetyTips": ["Never force movement", "Warm up first"],
                    }
                ],
                "progressionNotes": "Focus on gentle movement and pain management.",
            }
        ],
        "overallGuidance": "Progress gradually and listen to your body.",
    }


class PlanGenerator:
    TEMPERATURE = 0.4
    MAX_TOKENS = 4096

    def __init__(self, llm_client):
        self.llm = llm_client

    def generate(
        self,
        injury_type: str,
        pain_location: str,
        conversation_summary: Optional[str] = None,
        target_muscles: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """
        Generate a rehabilitation plan.

        Raises:
            LLMError: if the model call fails
        """
        muscle_targets = (
            f"Target these muscles: {', '.join(target_muscles)}" if target_muscles else ""
        )
        prompt = EXERCISE_PLAN_PROMPT.format(
            injury_type=injury_type,
            pain_location=pain_location,
            conversation_summary=conversation_summary or DEFAULT_CONVERSATION_SUMMARY,
            muscle_targets=muscle_targets,
        )

        logger.info(f"📋 Generating exercise plan for {injury_type} at {pain_location}")
        raw = self.llm.generate_content(
            prompt,
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
        )

        try:
            return extract_json_object(raw)
        except LLMResponseParseError as e:
            logger.warning(f"Exercise plan reply not parseable ({e}); using default plan")
            return default_exercise_plan()
