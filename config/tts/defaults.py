"""Text-to-speech configuration defaults."""

from __future__ import annotations

import os
from typing import Dict

DEFAULT_PROVIDER = "edge"
DEFAULT_AUDIO_FORMAT = "mp3"
DEFAULT_VOICE = "en-US-AriaNeural"
MAX_RATE_PERCENT = 50

# Playback clips served by /api/v1/tts
MAX_TTS_TEXT_CHARS = 2000
TTS_CACHE_TTL_SECONDS = int(os.getenv("TTS_CACHE_TTL_SECONDS", str(30 * 60)))
TTS_CACHE_MAX_ENTRIES = int(os.getenv("TTS_CACHE_MAX_ENTRIES", "200"))
# Empty disables the file cache; tests run without one
TTS_FILE_CACHE_DIR = os.getenv(
    "TTS_FILE_CACHE_DIR",
    "" if os.getenv("NODE_ENV") == "test" else "/tmp/tts_cache",
)


VOICES_BY_LANGUAGE: Dict[str, str] = {
    "ar": "ar-SA-ZariyahNeural",
    "de": "de-DE-KatjaNeural",
    "en": "en-US-AriaNeural",
    "es": "es-ES-ElviraNeural",
    "fr": "fr-FR-DeniseNeural",
    "hi": "hi-IN-SwaraNeural",
    "it": "it-IT-ElsaNeural",
    "ja": "ja-JP-NanamiNeural",
    "ko": "ko-KR-SunHiNeural",
    "nl": "nl-NL-ColetteNeural",
    "pl": "pl-PL-ZofiaNeural",
    "pt": "pt-BR-FranciscaNeural",
    "ru": "ru-RU-SvetlanaNeural",
    "sv": "sv-SE-SofieNeural",
    "tr": "tr-TR-EmelNeural",
    "zh": "zh-CN-XiaoxiaoNeural",
}


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
