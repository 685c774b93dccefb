"""Dependency helpers for the TTS feature."""

from __future__ import annotations

from functools import lru_cache

from .service import SpeechSynthesisService


@lru_cache(maxsize=1)
def _speech_service_singleton() -> SpeechSynthesisService:
    return SpeechSynthesisService()


def get_speech_service() -> SpeechSynthesisService:
    """Return a cached instance of :class:`SpeechSynthesisService`."""

    return _speech_service_singleton()


__all__ = ["get_speech_service"]
