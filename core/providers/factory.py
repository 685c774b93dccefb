"""Provider Factory - resolve configured providers by name.

Providers are registered in ``core/providers/__init__.py``; the factory hands
out one shared instance per provider name.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from config.tts import DEFAULT_PROVIDER as DEFAULT_TTS_PROVIDER
from core.exceptions import ConfigurationError
from core.providers import registries
from core.providers.audio.base import BaseAudioProvider
from core.providers.base import BaseTextProvider
from core.providers.tts_base import BaseTTSProvider

logger = logging.getLogger(__name__)

DEFAULT_TEXT_PROVIDER = "gemini"
DEFAULT_AUDIO_PROVIDER = "gemini"

_instances: Dict[str, object] = {}


def _resolve(kind: str, registry: Dict[str, type], name: str) -> object:
    cache_key = f"{kind}:{name}"
    instance = _instances.get(cache_key)
    if instance is not None:
        return instance
    provider_class = registry.get(name)
    if provider_class is None:
        raise ConfigurationError(f"Unknown {kind} provider '{name}'", key=f"{kind}_provider")
    instance = provider_class()
    _instances[cache_key] = instance
    logger.debug("Initialised %s provider %s", kind, name)
    return instance


def get_text_provider(name: Optional[str] = None) -> BaseTextProvider:
    return _resolve("text", registries._text_providers, name or DEFAULT_TEXT_PROVIDER)  # type: ignore[return-value]


def get_audio_provider(name: Optional[str] = None) -> BaseAudioProvider:
    return _resolve("audio", registries._audio_providers, name or DEFAULT_AUDIO_PROVIDER)  # type: ignore[return-value]


def get_tts_provider(name: Optional[str] = None) -> BaseTTSProvider:
    return _resolve("tts", registries._tts_providers, name or DEFAULT_TTS_PROVIDER)  # type: ignore[return-value]


def reset_provider_cache() -> None:
    _instances.clear()


__all__ = [
    "get_audio_provider",
    "get_text_provider",
    "get_tts_provider",
    "reset_provider_cache",
]
