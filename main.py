"""
MotionCare AI Backend API
Injury assessment, rehabilitation planning and exercise form feedback

FastAPI application entry point. Blocking Gemini calls run on a worker
thread pool so request handling never stalls the event loop.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# ============================================
# Configure Root Logger First
# ============================================
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Service routers
from physio_service.router import router as physio_router
from assistant_service.router import router as assistant_router

from physio_service.models import FormAnalyzer
from assistant_service.models import ChatAssistant, InjuryAnalyzer, MediaGenerator, PlanGenerator

# Core utilities
from core.config import Settings, get_settings
from core.gemini import GeminiClient
from core.imagen import ImagenClient
from core.threading import WorkerPool
from shared.utils import error_response, get_now_iso, setup_logger

logger = setup_logger("motioncare.main")
request_logger = setup_logger("motioncare.requests")


# ============================================
# Request Logging Middleware
# ============================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all incoming requests and responses with timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_ip = request.client.host if request.client else "unknown"
        request_logger.info(f"➡️  {request.method} {request.url.path}")
        request_logger.debug(f"    Client: {client_ip}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            request_logger.error(
                f"💥 {request.method} {request.url.path} → ERROR: "
                f"{type(e).__name__}: {e} ({process_time:.1f}ms)"
            )
            raise

        process_time = (time.time() - start_time) * 1000
        if response.status_code < 400:
            status_emoji = "✅"
        elif response.status_code < 500:
            status_emoji = "⚠️"
        else:
            status_emoji = "❌"

        request_logger.info(
            f"{status_emoji} {request.method} {request.url.path} → {response.status_code} ({process_time:.1f}ms)"
        )
        return response


# ============================================
# Error Handlers
# ============================================

async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_response(str(exc.detail)))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content=error_response(message))


# ============================================
# Application Factory
# ============================================

def create_app(settings: Optional[Settings] = None, llm_client=None, image_client=None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Resolved settings (defaults to the process settings)
        llm_client: Language-model client (defaults to a GeminiClient)
        image_client: Image-generation client (defaults to an ImagenClient)
    """
    settings = settings or get_settings()
    llm_client = llm_client or GeminiClient(settings)
    image_client = image_client or ImagenClient(settings)
    llm_pool = WorkerPool(max_workers=settings.LLM_THREAD_POOL_SIZE, name="llm_inference")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"🚀 {settings.APP_NAME} API starting up...")
        if not getattr(llm_client, "is_configured", True):
            logger.warning("⚠️ Gemini API key missing - LLM endpoints will return errors")
        if not getattr(image_client, "is_configured", True):
            logger.warning("⚠️ Google Cloud project missing - image endpoints will return placeholders")
        logger.info(f"✅ {settings.APP_NAME} API ready!")

        yield  # Application runs here

        logger.info(f"👋 {settings.APP_NAME} API shutting down...")
        llm_pool.shutdown(wait=True)
        logger.info("✅ Shutdown complete")

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Injury assessment, rehabilitation planning and pose-based exercise feedback",
        version="1.0.0",
        debug=settings.DEBUG,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # Services are built once and shared through app.state
    app.state.settings = settings
    app.state.llm_pool = llm_pool
    app.state.form_analyzer = FormAnalyzer(llm_client)
    app.state.injury_analyzer = InjuryAnalyzer(llm_client)
    app.state.chat_assistant = ChatAssistant(llm_client)
    app.state.plan_generator = PlanGenerator(llm_client)
    app.state.media_generator = MediaGenerator(image_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get(f"{settings.API_PREFIX}/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        return {
            "status": "ok",
            "service": f"{settings.APP_NAME} Server",
            "llm": "configured" if getattr(llm_client, "is_configured", True) else "missing_api_key",
            "imagen": "configured" if getattr(image_client, "is_configured", True) else "missing_project",
            "timestamp": get_now_iso(),
        }

    @app.get(f"{settings.API_PREFIX}/stats")
    async def get_stats():
        """Get service statistics."""
        return {"llm_pool": llm_pool.get_stats()}

    app.include_router(physio_router, prefix=settings.API_PREFIX, tags=["Physio Service"])
    app.include_router(assistant_router, prefix=settings.API_PREFIX, tags=["Assistant Service"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
