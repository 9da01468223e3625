"""
MotionCare Physio Service Router

Endpoints for pose metric extraction and AI exercise form feedback.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.gemini import LLMError
from core.threading import WorkerPool
from shared.utils import error_response, handle_exceptions, require_fields, success_response

from .models import (
    FormAnalyzer,
    analysis_failed_result,
    first_prescribed_exercise,
    parse_history,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_form_analyzer(request: Request) -> FormAnalyzer:
    return request.app.state.form_analyzer


def get_llm_pool(request: Request) -> WorkerPool:
    return request.app.state.llm_pool


# ============= Pydantic Models =============

class PoseMetricsRequest(BaseModel):
    poseHistory: Optional[List[Dict[str, Any]]] = None
    exercise: Optional[Dict[str, Any]] = None


class AnalyzeExerciseFormRequest(BaseModel):
    poseHistory: Optional[List[Dict[str, Any]]] = None
    poseMetrics: Optional[Dict[str, Any]] = None
    exercisePlan: Optional[Dict[str, Any]] = None
    injuryAnalysis: Optional[Dict[str, Any]] = None


# ============= REST Endpoints =============

@router.post("/pose-metrics")
@handle_exceptions
async def pose_metrics(
    request: PoseMetricsRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
):
    """
    Compute joint angle ranges and movement totals for a pose history.

    An empty history is rejected with 400.
    """
    history = parse_history(request.poseHistory)
    metrics = analyzer.compute(history, request.exercise)

    logger.info(f"📐 Pose metrics for '{metrics.exercise_name}': {metrics.frames} frames")
    return success_response(metrics=metrics.to_dict())


@router.post("/analyze-exercise-form")
@handle_exceptions
async def analyze_exercise_form(
    request: AnalyzeExerciseFormRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """
    Score an exercise attempt from pose data.

    Accepts either the raw pose history (metrics are computed here) or a
    precomputed metrics payload. An empty history returns the no-data
    result without calling the model.
    """
    require_fields(request.model_dump(), "exercisePlan")
    if request.poseHistory is None and request.poseMetrics is None:
        raise HTTPException(status_code=400, detail="poseHistory or poseMetrics is required")

    injury = request.injuryAnalysis or {}
    logger.info(
        f"Analyzing exercise form (injury: {injury.get('injuryType')} at {injury.get('painLocation')})"
    )

    try:
        if request.poseHistory is not None:
            history = parse_history(request.poseHistory)
            analysis = await pool.submit_async(
                analyzer.analyze, history, request.exercisePlan, request.injuryAnalysis
            )
        else:
            metrics = request.poseMetrics
            exercise = first_prescribed_exercise(request.exercisePlan) or {
                "name": metrics.get("exerciseName")
            }
            analysis = await pool.submit_async(
                analyzer.analyze_metrics, metrics, exercise, request.injuryAnalysis
            )
    except LLMError as e:
        logger.error(f"/analyze-exercise-form failed: {e}")
        return JSONResponse(
            status_code=500,
            content=error_response(str(e), analysis=analysis_failed_result()),
        )

    return success_response(analysis=analysis)
