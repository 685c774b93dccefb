"""Speech-to-text providers."""

from .base import BaseAudioProvider, SpeechProviderRequest, SpeechTranscriptionResult
from .gemini import GeminiSpeechProvider

__all__ = [
    "BaseAudioProvider",
    "GeminiSpeechProvider",
    "SpeechProviderRequest",
    "SpeechTranscriptionResult",
]
