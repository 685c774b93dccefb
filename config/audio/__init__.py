"""Speech-to-text configuration."""

from .defaults import (
    DEFAULT_AUDIO_MIME_TYPE,
    DEFAULT_TRANSCRIBE_MODEL,
    MAX_AUDIO_INPUT_BYTES,
)
from .prompts import TRANSCRIBE_INSTRUCTIONS, build_transcribe_instructions

__all__ = [
    "DEFAULT_AUDIO_MIME_TYPE",
    "DEFAULT_TRANSCRIBE_MODEL",
    "MAX_AUDIO_INPUT_BYTES",
    "TRANSCRIBE_INSTRUCTIONS",
    "build_transcribe_instructions",
]
