"""
MotionCare Assistant Service Router

Endpoints for injury photo analysis, intake chat, rehabilitation
plan generation and Imagen illustrations.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.gemini import LLMError
from core.threading import WorkerPool
from shared.utils import error_response, handle_exceptions, require_fields, success_response, truncate

from .models import (
    ChatAssistant,
    InjuryAnalyzer,
    MediaGenerator,
    PlanGenerator,
    failed_focus_images,
    failed_injury_analysis,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_injury_analyzer(request: Request) -> InjuryAnalyzer:
    return request.app.state.injury_analyzer


def get_chat_assistant(request: Request) -> ChatAssistant:
    return request.app.state.chat_assistant


def get_plan_generator(request: Request) -> PlanGenerator:
    return request.app.state.plan_generator


def get_media_generator(request: Request) -> MediaGenerator:
    return request.app.state.media_generator


def get_llm_pool(request: Request) -> WorkerPool:
    return request.app.state.llm_pool


# ============= Pydantic Models =============

class AnalyzeImageRequest(BaseModel):
    imageDataUrl: Optional[str] = None


class ChatRequest(BaseModel):
    prompt: Optional[str] = None
    history: Optional[List[Dict[str, Any]]] = None
    injuryContext: Optional[Dict[str, Any]] = None


class GeneratePlanRequest(BaseModel):
    injuryType: Optional[str] = None
    painLocation: Optional[str] = None
    conversationSummary: Optional[str] = None
    targetMuscles: Optional[List[str]] = None


class GenerateImagesRequest(BaseModel):
    painLocation: Optional[str] = None
    injuryType: Optional[str] = None


class GenerateExerciseImageRequest(BaseModel):
    prompt: Optional[str] = None
    exerciseId: Optional[str] = None

# ============= REST Endpoints =============

@router.post("/analyze-image")
@handle_exceptions
async def analyze_image(
    request: AnalyzeImageRequest,
    analyzer: InjuryAnalyzer = Depends(get_injury_analyzer),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """Analyze an injury photo sent as a data URL."""
    require_fields(request.model_dump(), "imageDataUrl")

    try:
        analysis = await pool.submit_async(analyzer.analyze, request.imageDataUrl)
    except LLMError as e:
        logger.error(f"/analyze-image failed: {e}")
        return JSONResponse(
            status_code=500,
            content=error_response(str(e), analysis=failed_injury_analysis()),
        )

    logger.info(f"✅ Injury analysis complete: {analysis.get('injuryType')} at {analysis.get('painLocation')}")
    return success_response(analysis=analysis)


@router.post("/chat")
@handle_exceptions
async def chat(
    request: ChatRequest,
    assistant: ChatAssistant = Depends(get_chat_assistant),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """Conversational intake with optional injury context."""
    require_fields(request.model_dump(), "prompt")
    logger.info(f"Received chat request: {truncate(request.prompt)}")

    try:
        text = await pool.submit_async(
            assistant.reply, request.prompt, request.history, request.injuryContext
        )
    except LLMError as e:
        logger.error(f"/chat failed: {e}")
        return JSONResponse(status_code=500, content=error_response(str(e)))

    return success_response(text=text)


@router.post("/generate-plan")
@handle_exceptions
async def generate_plan(
    request: GeneratePlanRequest,
    generator: PlanGenerator = Depends(get_plan_generator),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """Generate a personalized 4-week exercise plan."""
    require_fields(request.model_dump(), "injuryType", "painLocation")

    try:
        plan = await pool.submit_async(
            generator.generate,
            request.injuryType,
            request.painLocation,
            request.conversationSummary,
            request.targetMuscles,
        )
    except LLMError as e:
        logger.error(f"/generate-plan failed: {e}")
        return JSONResponse(status_code=500, content=error_response(str(e)))

    return success_response(plan=plan)


@router.post("/generate-images")
@handle_exceptions
async def generate_images(
    request: GenerateImagesRequest,
    generator: MediaGenerator = Depends(get_media_generator),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """Generate the two anatomical focus illustrations for an injury."""
    require_fields(request.model_dump(), "painLocation", "injuryType")

    try:
        images = await pool.submit_async(
            generator.focus_images, request.painLocation, request.injuryType
        )
    except LLMError as e:
        logger.error(f"/generate-images failed: {e}")
        return JSONResponse(
            status_code=500,
            content=error_response(str(e), **failed_focus_images()),
        )

    return success_response(**images)


@router.post("/generate-video")
@handle_exceptions
async def generate_exercise_image(
    request: GenerateExerciseImageRequest,
    generator: MediaGenerator = Depends(get_media_generator),
    pool: WorkerPool = Depends(get_llm_pool),
):
    """Generate a still image for an exercise (Imagen has no video output)."""
    require_fields(request.model_dump(), "prompt")
    logger.info(f"Exercise image request for {request.exerciseId}: {truncate(request.prompt)}")

    try:
        result = await pool.submit_async(generator.exercise_image, request.prompt)
    except LLMError as e:
        logger.error(f"/generate-video failed: {e}")
        return JSONResponse(status_code=500, content=error_response(str(e)))

    return success_response(**result)
