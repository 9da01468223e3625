"""
MotionCare Shared Utilities

Logging, response models, and error-handling decorators.
"""

import asyncio
import logging
import sys
from typing import Any, Optional
from datetime import datetime, timezone
from functools import wraps

from pydantic import BaseModel
from fastapi import HTTPException


# ============================================
# Logging Configuration
# ============================================

def setup_logger(name: str = "motioncare", level: int = logging.INFO) -> logging.Logger:
    """
    Set up a configured logger with console output.

    Usage:
        logger = setup_logger(__name__)
        logger.info("Hello from MotionCare")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    # Root handler from basicConfig would print every record twice
    logger.propagate = False

    return logger


logger = setup_logger("motioncare")


# ============================================
# Response Models
# ============================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: Optional[str] = None
    details: Optional[dict] = None
    timestamp: str = ""

    def __init__(self, **data):
        if "timestamp" not in data or not data["timestamp"]:
            data["timestamp"] = get_now_iso()
        super().__init__(**data)


def success_response(**fields: Any) -> dict:
    """Create a success response dict carrying the given payload fields."""
    return {"success": True, **fields}


def error_response(error: str, error_code: str = None, **fields: Any) -> dict:
    """Create an error response dict, optionally with fallback payload fields."""
    body = ErrorResponse(error=error, error_code=error_code).model_dump(exclude_none=True)
    body.update(fields)
    return body


# ============================================
# Decorators
# ============================================

def handle_exceptions(func):
    """Decorator to turn ValueError into 400 and unexpected errors into 500."""
    @wraps(func)
    async def async_wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HTTPException:
            raise
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {type(e).__name__}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    @wraps(func)
    def sync_wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HTTPException:
            raise
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {type(e).__name__}: {e}")
            raise HTTPException(status_code=500, detail="Internal server error")

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper


def require_fields(body: dict, *names: str):
    """Raise 400 for the first required field that is missing or empty."""
    for name in names:
        if not body.get(name):
            raise HTTPException(status_code=400, detail=f"{name} is required")


# ============================================
# Utility Functions
# ============================================

def get_now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def truncate(text: str, limit: int = 100) -> str:
    """Shorten text for log lines."""
    return text if len(text) <= limit else f"{text[:limit]}..."
