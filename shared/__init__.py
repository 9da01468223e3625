"""
MotionCare Shared Module

Common utilities used across all services.
"""

from .utils import (
    setup_logger,
    success_response,
    error_response,
    handle_exceptions,
    require_fields,
)
from .llm_json import LLMResponseParseError, extract_json_object

__all__ = [
    'setup_logger',
    'success_response',
    'error_response',
    'handle_exceptions',
    'require_fields',
    'LLMResponseParseError',
    'extract_json_object',
]
