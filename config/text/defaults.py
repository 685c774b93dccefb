"""Text transformation defaults shared by the Gemini provider and routes."""

import os

DEFAULT_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
DEFAULT_TEMPERATURE = 0.3

# Key rotation: one attempt per key, capped, with a linear back-off between attempts
KEY_ROTATION_MAX_ATTEMPTS = 4
KEY_ROTATION_BACKOFF_SECONDS = 0.25

# Request limits
MAX_TEXT_INPUT_CHARS = 5000
MAX_LANGUAGE_CODE_CHARS = 32
MAX_CONTEXT_INPUT_CHARS = 5000

ALTERNATIVES_COUNT = 3

__all__ = [
    "ALTERNATIVES_COUNT",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "KEY_ROTATION_MAX_ATTEMPTS",
    "KEY_ROTATION_BACKOFF_SECONDS",
    "MAX_CONTEXT_INPUT_CHARS",
    "MAX_LANGUAGE_CODE_CHARS",
    "MAX_TEXT_INPUT_CHARS",
]
