"""
Utilities Module

Logging setup and helpers shared by the backend and services.
"""

from .logging_config import (
    MoodMusicLogger,
    setup_logging,
    get_logger,
    log_performance,
    log_api_request,
    log_error,
    set_request_context,
)

__all__ = [
    "MoodMusicLogger",
    "setup_logging",
    "get_logger",
    "log_performance",
    "log_api_request",
    "log_error",
    "set_request_context",
]
