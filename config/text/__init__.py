"""Text transformation configuration aggregation."""

from .defaults import (
    ALTERNATIVES_COUNT,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    KEY_ROTATION_MAX_ATTEMPTS,
    KEY_ROTATION_BACKOFF_SECONDS,
    MAX_CONTEXT_INPUT_CHARS,
    MAX_LANGUAGE_CODE_CHARS,
    MAX_TEXT_INPUT_CHARS,
)
from . import prompts

__all__ = [
    "ALTERNATIVES_COUNT",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "KEY_ROTATION_MAX_ATTEMPTS",
    "KEY_ROTATION_BACKOFF_SECONDS",
    "MAX_CONTEXT_INPUT_CHARS",
    "MAX_LANGUAGE_CODE_CHARS",
    "MAX_TEXT_INPUT_CHARS",
    "prompts",
]
