"""Text-to-speech configuration."""

from __future__ import annotations

from .defaults import (
    DEFAULT_AUDIO_FORMAT,
    DEFAULT_PROVIDER,
    DEFAULT_VOICE,
    MAX_RATE_PERCENT,
    MAX_TTS_TEXT_CHARS,
    TTS_CACHE_MAX_ENTRIES,
    TTS_CACHE_TTL_SECONDS,
    TTS_FILE_CACHE_DIR,
    VOICES_BY_LANGUAGE,
)

__all__ = [
    "DEFAULT_AUDIO_FORMAT",
    "DEFAULT_PROVIDER",
    "DEFAULT_VOICE",
    "MAX_RATE_PERCENT",
    "MAX_TTS_TEXT_CHARS",
    "TTS_CACHE_MAX_ENTRIES",
    "TTS_CACHE_TTL_SECONDS",
    "TTS_FILE_CACHE_DIR",
    "VOICES_BY_LANGUAGE",
]
