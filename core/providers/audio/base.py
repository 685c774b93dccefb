"""Base types and interfaces for speech-to-text providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping

from config.audio import DEFAULT_AUDIO_MIME_TYPE


@dataclass(slots=True)
class SpeechProviderRequest:
    """Container describing an audio transcription request."""

    file_bytes: bytes
    mime_type: str = DEFAULT_AUDIO_MIME_TYPE
    filename: str | None = None
    model: str | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SpeechTranscriptionResult:
    """Normalised transcription result returned by providers.

    ``language`` is the detected language code, ``None`` when the provider
    could not tell.
    """

    text: str
    provider: str
    language: str | None = None
    metadata: Mapping[str, Any] | None = None


class BaseAudioProvider(ABC):
    """Common behaviour shared across speech-to-text providers."""

    name: str = "audio"

    @abstractmethod
    async def transcribe(self, request: SpeechProviderRequest) -> SpeechTranscriptionResult:
        """Return a transcription (and detected language) for an audio recording."""


__all__ = [
    "BaseAudioProvider",
    "SpeechProviderRequest",
    "SpeechTranscriptionResult",
]
