"""
MotionCare Assistant Service Models

Gemini-backed injury photo analysis, intake chat and plan generation,
plus Imagen illustrations.
"""

from .injury_analyzer import (
    InjuryAnalyzer,
    decode_image_data_url,
    default_injury_analysis,
    failed_injury_analysis,
)

from .chat_assistant import (
    ChatAssistant,
    ChatTurn,
    InjuryContext,
    build_chat_prompt,
    normalize_history,
)

from .plan_generator import (
    PlanGenerator,
    default_exercise_plan,
)

from .media_generator import (
    MediaGenerator,
    failed_focus_images,
    focus_image_prompts,
)

__all__ = [
    # Injury Analyzer
    "InjuryAnalyzer",
    "decode_image_data_url",
    "default_injury_analysis",
    "failed_injury_analysis",
    # Chat Assistant
    "ChatAssistant",
    "ChatTurn",
    "InjuryContext",
    "build_chat_prompt",
    "normalize_history",
    # Plan Generator
    "PlanGenerator",
    "default_exercise_plan",
    # Media Generator
    "MediaGenerator",
    "failed_focus_images",
    "focus_image_prompts",
]
