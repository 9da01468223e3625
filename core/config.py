"""
MotionCare Configuration

Environment variables and application settings.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "MotionCare AI"
    DEBUG: bool = True
    API_PREFIX: str = "/api"
    PORT: int = 3001

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Gemini
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    LLM_REQUEST_TIMEOUT: float = 60.0

    # Vertex AI Imagen (focus illustrations and exercise stills)
    GOOGLE_CLOUD_PROJECT_ID: Optional[str] = None
    GOOGLE_CLOUD_LOCATION: str = "us-central1"
    IMAGEN_MODEL: str = "imagen-3.0-generate-001"
    IMAGEN_EXERCISE_MODEL: str = "imagegeneration@006"

    # Thread Pool
    LLM_THREAD_POOL_SIZE: int = 4

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Resolve settings once per process."""
    return Settings()
