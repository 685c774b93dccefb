"""Audio/STT configuration defaults."""

from __future__ import annotations

import os

DEFAULT_TRANSCRIBE_MODEL = os.getenv("GEMINI_TRANSCRIBE_MODEL") or os.getenv(
    "GEMINI_MODEL", "gemini-3-flash-preview"
)
DEFAULT_AUDIO_MIME_TYPE = "audio/webm"
MAX_AUDIO_INPUT_BYTES = 5 * 1024 * 1024

__all__ = [
    "DEFAULT_AUDIO_MIME_TYPE",
    "DEFAULT_TRANSCRIBE_MODEL",
    "MAX_AUDIO_INPUT_BYTES",
]
