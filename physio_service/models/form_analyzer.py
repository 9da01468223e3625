"""
MotionCare Physio Service - Form Analyzer

Scores a recorded exercise attempt: computes pose metrics from the landmark
history and asks the language model for narrative form feedback.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from shared.llm_json import LLMResponseParseError, extract_json_object

from .pose_metrics import (
    ExerciseDescriptor,
    MetricsRecord,
    PoseFrame,
    UNKNOWN_EXERCISE,
    as_text_list,
    compute_metrics,
)

logger = logging.getLogger(__name__)


FORM_ANALYSIS_TEMPERATURE = 0.5
FORM_ANALYSIS_MAX_TOKENS = 1500


def no_pose_data_result() -> Dict[str, Any]:
    """Result returned when nothing was captured during the attempt."""
    return {
        "overallScore": 0,
        "error": True,
        "strengths": [],
        "improvements": [
            "No pose data was captured during the exercise",
            "Make sure you are visible in the camera",
            "Try recording again with better lighting",
        ],
        "safetyChecks": [
            "Ensure camera has permission to access webcam",
            "Check that you are within camera frame",
        ],
        "encouragement": "Let's try again! Make sure your full body is visible.",
        "nextSteps": "Record your exercise again, ensuring you are fully visible in the frame.",
    }


def analysis_failed_result() -> Dict[str, Any]:
    """Result returned when the model could not be reached."""
    return {
        "overallScore": 0,
        "error": True,
        "improvements": ["Analysis failed. Please try again."],
        "strengths": [],
        "safetyChecks": ["Ensure proper form", "Stop if you feel pain"],
        "encouragement": "Keep trying!",
        "nextSteps": "Try the exercise again with better lighting.",
    }


def default_form_analysis(metrics: Dict[str, Any]) -> Dict[str, Any]:
    """Neutral analysis used when the model reply holds no JSON."""
    return {
        "overallScore": 75,
        "exercisePerformed": metrics.get("exerciseName") or UNKNOWN_EXERCISE,
        "wasCorrectExercise": True,
        "strengths": ["Completed the exercise", "Good effort in performing movements"],
        "improvements": [
            "Focus on maintaining proper form throughout",
            "Work on movement consistency",
        ],
        "safetyChecks": ["Continue monitoring pain levels during exercise"],
        "formAnalysis": "Exercise completed with reasonable form based on pose tracking data.",
        "specificFeedback": (
            f"Movement detected across {metrics.get('frames')} frames "
            f"over {_fmt(metrics.get('duration'), 1)} seconds."
        ),
        "encouragement": "Great work! Keep practicing and you'll see improvement in your rehabilitation.",
        "nextSteps": "Continue with prescribed exercises and gradually increase intensity as pain allows.",
    }


def first_prescribed_exercise(exercise_plan: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First exercise of the first week of a generated plan, if any."""
    if not exercise_plan:
        return None
    weeks = exercise_plan.get("weeklyPlan")
    if not isinstance(weeks, list) or not weeks or not isinstance(weeks[0], dict):
        return None
    exercises = weeks[0].get("exercises")
    if not isinstance(exercises, list) or not exercises or not isinstance(exercises[0], dict):
        return None
    return exercises[0]


def _fmt(value: Any, digits: int) -> str:
    try:
        return f"{float(value):.{digits}f}"
    except (TypeError, ValueError):
        return str(value)


def _range_line(label: str, metrics: Dict[str, Any], key: str) -> Optional[str]:
    rng = metrics.get(f"{key}Range")
    if not rng:
        return None
    return (
        f"- {label} Angles: {_fmt(rng.get('min'), 1)}° → {_fmt(rng.get('max'), 1)}° "
        f"(avg {_fmt(rng.get('avg'), 1)}°, movement amplitude {_fmt(metrics.get(f'{key}Movement'), 2)})"
    )


def build_form_analysis_prompt(
    metrics: Dict[str, Any],
    exercise: Optional[Dict[str, Any]] = None,
    injury: Optional[Dict[str, Any]] = None,
) -> str:
    """Prompt asking for a JSON form assessment of the metrics payload."""
    exercise = exercise or {}
    injury = injury or {}
    pain_location = injury.get("painLocation")

    joint_lines: List[str] = [
        line for line in (
            _range_line("Wrist", metrics, "wrist"),
            _range_line("Elbow", metrics, "elbow"),
            _range_line("Hip", metrics, "hip"),
            _range_line("Knee", metrics, "knee"),
            _range_line("Ankle", metrics, "ankle"),
        ) if line
    ]
    if metrics.get("hipMovement"):
        joint_lines.append(f"- Hip Movement: {_fmt(metrics['hipMovement'], 2)} range")
    joint_section = "\n".join(joint_lines) or "- No joint angles could be tracked"

    focus_points = ", ".join(as_text_list(metrics.get("exerciseFocusPoints"))) or "General form"
    safety_tips = ", ".join(as_text_list(metrics.get("exerciseSafetyTips"))) or "Listen to your body"

    return f"""You are an expert physical therapist analyzing REAL-TIME 3D SKELETON TRACKING data from body pose detection.

**PATIENT INJURY:**
- Type: {injury.get('injuryType') or 'General rehabilitation'}
- Location: {pain_location or 'Not specified'}

**PRESCRIBED EXERCISE:**
- Name: {metrics.get('exerciseName') or exercise.get('name') or 'Not specified'}
- Sets/Reps: {exercise.get('sets') or 'N/A'} sets × {exercise.get('reps') or 'N/A'} reps
- Instructions: {exercise.get('instructions') or 'See focus points'}
- Focus Points: {focus_points}
- Safety Tips: {safety_tips}

**3D POSE DETECTION DATA (33-landmark tracking):**
- Total Frames Captured: {metrics.get('frames')}
- Exercise Duration: {_fmt(metrics.get('duration'), 1)} seconds
- Average Landmark Visibility: {_fmt(metrics.get('avgVisibility'), 0)}%
- Body Stability (hip sway per frame): {_fmt(metrics.get('bodyStability'), 4)}
- Movement Score (joint travel per frame): {_fmt(metrics.get('movementScore'), 4)}

**JOINT ANGLE MEASUREMENTS (degrees):**
{joint_section}

**CRITICAL INSTRUCTIONS:**
1. **ONLY reference joint measurements that are RELEVANT to the injury location** ({pain_location or 'affected area'})
2. If the injury is in the wrist/hand, focus ONLY on wrist angles and arm movements
3. If the injury is in the knee/leg, focus ONLY on knee and ankle angles
4. Do NOT mention unrelated joints (e.g., don't discuss knee angles for a wrist injury)
5. Analyze if the movement amplitude is appropriate for this specific injury type
6. Check if the exercise matches what was prescribed
7. Provide injury-specific safety observations

Return ONLY valid JSON with this structure:
{{
  "overallScore": 85,
  "exercisePerformed": "Name of exercise detected from movement pattern",
  "wasCorrectExercise": true,
  "strengths": ["What they did well - be specific about joint angles"],
  "improvements": ["What to work on - specific to injured body part only"],
  "safetyChecks": ["Safety observations relevant to the injury"],
  "formAnalysis": "Technical analysis of movement quality for the injured area",
  "specificFeedback": "Detailed feedback about the affected joint's performance",
  "encouragement": "Positive, motivating message",
  "nextSteps": "Specific actions for next session targeting the injury"
}}

Score 0-100 based on: form quality (40%), safety (30%), movement amplitude (20%), consistency (10%)"""


class FormAnalyzer:
    """
    Pose-metrics based exercise form feedback.

    The model reply is relayed as-is; only a missing JSON object is
    replaced by the neutral default analysis.
    """

    def __init__(self, llm_client):
        self.llm = llm_client

    def compute(
        self,
        pose_history: Sequence[PoseFrame],
        exercise: Optional[Dict[str, Any]] = None,
    ) -> MetricsRecord:
        """Metrics for a non-empty history (raises EmptyHistoryError otherwise)."""
        return compute_metrics(pose_history, ExerciseDescriptor.from_dict(exercise))

    def analyze(
        self,
        pose_history: Optional[Sequence[PoseFrame]],
        exercise_plan: Optional[Dict[str, Any]] = None,
        injury: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Full analysis of a recorded attempt.

        Returns the canned no-data result without computing metrics when
        the history is empty.

        Raises:
            LLMError: if the model call fails
        """
        if not pose_history:
            logger.warning("⚠️ No pose frames captured - returning no-data result")
            return no_pose_data_result()

        exercise = first_prescribed_exercise(exercise_plan)
        metrics = self.compute(pose_history, exercise)
        logger.info(
            f"📐 Metrics computed: {metrics.frames} frames, {metrics.duration:.1f}s, "
            f"visibility {metrics.avg_visibility:.0f}%, ranges={sorted(metrics.ranges())}"
        )
        return self.analyze_metrics(metrics.to_dict(), exercise, injury)

    def analyze_metrics(
        self,
        metrics: Dict[str, Any],
        exercise: Optional[Dict[str, Any]] = None,
        injury: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Ask the model to assess a metrics payload.

        Raises:
            LLMError: if the model call fails
        """
        prompt = build_form_analysis_prompt(metrics, exercise, injury)
        logger.debug(f"Form analysis metrics: {json.dumps(metrics)[:500]}")

        raw = self.llm.generate_content(
            prompt,
            temperature=FORM_ANALYSIS_TEMPERATURE,
            max_tokens=FORM_ANALYSIS_MAX_TOKENS,
        )

        try:
            analysis = extract_json_object(raw)
        except LLMResponseParseError as e:
            logger.warning(f"Form analysis reply not parseable ({e}); using default analysis")
            return default_form_analysis(metrics)

        logger.info(f"✅ Form analysis complete - score: {analysis.get('overallScore')}")
        return analysis
