"""Voice message personalization configuration."""

from __future__ import annotations

import os

FANOUT_CONCURRENCY = max(1, int(os.getenv("VOICE_FANOUT_CONCURRENCY", "4")))
DEFAULT_SOURCE_LANGUAGE = "en"
BYPASS_LANGUAGE = "und"
SYNTHESIZED_AUDIO_EXTENSION = "mp3"
SYNTHESIZED_AUDIO_CONTENT_TYPE = "audio/mpeg"
CONTENT_HASH_LENGTH = 12

__all__ = [
    "BYPASS_LANGUAGE",
    "CONTENT_HASH_LENGTH",
    "DEFAULT_SOURCE_LANGUAGE",
    "FANOUT_CONCURRENCY",
    "SYNTHESIZED_AUDIO_CONTENT_TYPE",
    "SYNTHESIZED_AUDIO_EXTENSION",
]
