"""
MotionCare Physio Service Models

Pose metric extraction and LLM-backed exercise form feedback.
"""

from .pose_metrics import (
    JointType,
    Landmark,
    PoseFrame,
    ExerciseDescriptor,
    AngleRange,
    MetricsRecord,
    EmptyHistoryError,
    ANGLE_JOINTS,
    MOVEMENT_JOINTS,
    calculate_angle,
    compute_metrics,
    parse_history,
)

from .form_analyzer import (
    FormAnalyzer,
    analysis_failed_result,
    build_form_analysis_prompt,
    default_form_analysis,
    first_prescribed_exercise,
    no_pose_data_result,
)

__all__ = [
    # Pose Metrics
    "JointType",
    "Landmark",
    "PoseFrame",
    "ExerciseDescriptor",
    "AngleRange",
    "MetricsRecord",
    "EmptyHistoryError",
    "ANGLE_JOINTS",
    "MOVEMENT_JOINTS",
    "calculate_angle",
    "compute_metrics",
    "parse_history",
    # Form Analyzer
    "FormAnalyzer",
    "analysis_failed_result",
    "build_form_analysis_prompt",
    "default_form_analysis",
    "first_prescribed_exercise",
    "no_pose_data_result",
]
