"""Configuration package — settings, logging, and exceptions."""

from config.exceptions import (
    NovelAgentError,
    NotFoundError,
    NotConfiguredError,
    ValidationError,
    GenerationError,
    ResponseParseError,
    OriginalityRejectedError,
    TaskStateError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "NovelAgentError",
    "NotFoundError",
    "NotConfiguredError",
    "ValidationError",
    "GenerationError",
    "ResponseParseError",
    "OriginalityRejectedError",
    "TaskStateError",
]
