"""Tests for the form analyzer and its prompt construction."""

import json

import pytest

from physio_service.models import (
    FormAnalyzer,
    PoseFrame,
    build_form_analysis_prompt,
    first_prescribed_exercise,
)

from conftest import FakeLLM, make_landmarks


PLAN = {
    "weeklyPlan": [
        {
            "week": 1,
            "exercises": [
                {
                    "name": "Squat",
                    "sets": 3,
                    "reps": 10,
                    "focusPoints": ["Knees over toes"],
                    "safetyTips": ["Keep back straight"],
                }
            ],
        }
    ]
}

INJURY = {"injuryType": "Knee strain", "painLocation": "left knee"}


def _history(count=3):
    return [
        PoseFrame.from_dict({"timestamp": i * 100, "landmarks": make_landmarks(visibility=0.9)})
        for i in range(count)
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# first_prescribed_exercise
# ═══════════════════════════════════════════════════════════════════════════════

def test_first_prescribed_exercise():
    assert first_prescribed_exercise(PLAN)["name"] == "Squat"


@pytest.mark.parametrize("plan", [
    None,
    {},
    {"weeklyPlan": []},
    {"weeklyPlan": [{"exercises": []}]},
    {"weeklyPlan": ["week one"]},
    {"weeklyPlan": "week one"},
    {"weeklyPlan": [{"exercises": ["Squat"]}]},
])
def test_first_prescribed_exercise_missing(plan):
    assert first_prescribed_exercise(plan) is None


# ═══════════════════════════════════════════════════════════════════════════════
# FormAnalyzer.analyze
# ═══════════════════════════════════════════════════════════════════════════════

class TestFormAnalyzer:

    def test_empty_history_skips_model(self):
        llm = FakeLLM()
        result = FormAnalyzer(llm).analyze([], PLAN, INJURY)

        assert result["overallScore"] == 0
        assert result["error"] is True
        assert len(result["improvements"]) == 3
        assert len(result["safetyChecks"]) == 2
        assert llm.calls == []

    def test_relays_model_json(self):
        reply = {"overallScore": 88, "strengths": ["Deep squat"], "custom": "kept"}
        llm = FakeLLM(reply="Here you go:\n```json\n" + json.dumps(reply) + "\n```")

        result = FormAnalyzer(llm).analyze(_history(), PLAN, INJURY)

        assert result == reply
        assert llm.calls[0]["temperature"] == 0.5
        assert llm.calls[0]["max_tokens"] == 1500

    def test_prompt_carries_exercise_and_injury(self):
        llm = FakeLLM(reply='{"overallScore": 70}')
        FormAnalyzer(llm).analyze(_history(), PLAN, INJURY)

        prompt = llm.calls[0]["prompt"]
        assert "Squat" in prompt
        assert "Knees over toes" in prompt
        assert "left knee" in prompt
        assert "Total Frames Captured: 3" in prompt
        assert "Average Landmark Visibility: 90%" in prompt

    def test_unparseable_reply_uses_default(self):
        llm = FakeLLM(reply="I cannot analyze this right now.")
        result = FormAnalyzer(llm).analyze(_history(4), PLAN, INJURY)

        assert result["overallScore"] == 75
        assert result["exercisePerformed"] == "Squat"
        assert "4 frames" in result["specificFeedback"]
        assert "0.3 seconds" in result["specificFeedback"]

    def test_without_plan_uses_unknown_exercise(self):
        llm = FakeLLM(reply="nope")
        result = FormAnalyzer(llm).analyze(_history(), None, None)
        assert result["exercisePerformed"] == "Unknown exercise"

    def test_model_errors_propagate(self):
        from core.gemini import LLMError

        llm = FakeLLM(error=LLMError("quota exceeded"))
        with pytest.raises(LLMError):
            FormAnalyzer(llm).analyze(_history(), PLAN, INJURY)


# ═══════════════════════════════════════════════════════════════════════════════
# build_form_analysis_prompt
# ═══════════════════════════════════════════════════════════════════════════════

def test_prompt_lists_only_tracked_ranges():
    metrics = {
        "frames": 10,
        "duration": 1.0,
        "avgVisibility": 95.0,
        "kneeRange": {"min": 80.0, "max": 170.0, "avg": 120.0},
        "kneeMovement": 0.4,
        "exerciseName": "Squat",
    }
    prompt = build_form_analysis_prompt(metrics)

    assert "Knee Angles: 80.0° → 170.0°" in prompt
    assert "Wrist Angles" not in prompt
    assert "Elbow Angles" not in prompt


def test_prompt_without_any_ranges():
    prompt = build_form_analysis_prompt({"frames": 1, "duration": 0})
    assert "No joint angles could be tracked" in prompt
    assert "General form" in prompt


def test_prompt_keeps_string_focus_points_whole():
    prompt = build_form_analysis_prompt({"frames": 1, "duration": 0, "exerciseFocusPoints": "Knees out"})
    assert "Focus Points: Knees out" in prompt
