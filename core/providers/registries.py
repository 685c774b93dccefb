"""Provider Registries - Global registries for AI providers."""

from __future__ import annotations

from typing import Dict, Type

from core.providers.audio.base import BaseAudioProvider
from core.providers.base import BaseTextProvider
from core.providers.tts_base import BaseTTSProvider

_text_providers: Dict[str, Type[BaseTextProvider]] = {}
_audio_providers: Dict[str, Type[BaseAudioProvider]] = {}
_tts_providers: Dict[str, Type[BaseTTSProvider]] = {}


def register_text_provider(name: str, provider_class: Type[BaseTextProvider]) -> None:
    """Register a text provider implementation."""
    _text_providers[name] = provider_class


def register_audio_provider(name: str, provider_class: Type[BaseAudioProvider]) -> None:
    """Register a speech-to-text provider implementation."""
    _audio_providers[name] = provider_class


def register_tts_provider(name: str, provider_class: Type[BaseTTSProvider]) -> None:
    """Register a text-to-speech provider implementation."""
    _tts_providers[name] = provider_class


__all__ = [
    "register_audio_provider",
    "register_text_provider",
    "register_tts_provider",
]
