"""Base classes and schemas for text-to-speech providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping

from config.tts import DEFAULT_AUDIO_FORMAT


@dataclass(slots=True)
class TTSRequest:
    """Container describing a text-to-speech generation request.

    ``rate`` uses the signed percentage form (``"+10%"``, ``"-20%"``).
    """

    text: str
    voice: str
    rate: str = "+0%"
    format: str = DEFAULT_AUDIO_FORMAT
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TTSResult:
    """Normalised text-to-speech response returned by providers."""

    audio_bytes: bytes
    provider: str
    format: str
    voice: str | None = None
    content_type: str = "audio/mpeg"
    metadata: Mapping[str, Any] | None = None


class BaseTTSProvider(ABC):
    """Base interface for text-to-speech providers."""

    name: str = "tts"

    @abstractmethod
    async def generate(self, request: TTSRequest) -> TTSResult:
        """Return generated audio for the supplied text request."""


__all__ = ["BaseTTSProvider", "TTSRequest", "TTSResult"]
