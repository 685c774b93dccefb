"""Provider Registry - import-time registration of all providers.

Importing this package registers every concrete provider so the factory
functions in ``core.providers.factory`` can resolve them by name.

Usage Example:
    from core.providers.factory import get_text_provider
    provider = get_text_provider()
    reply = await provider.generate("Hello")
"""

from core.providers import factory  # re-export for convenience
from core.providers.audio.gemini import GeminiSpeechProvider
from core.providers.registries import (
    register_audio_provider,
    register_text_provider,
    register_tts_provider,
)
from core.providers.text.gemini import GeminiTextProvider
from core.providers.tts.edge import EdgeTTSProvider

register_text_provider("gemini", GeminiTextProvider)
register_audio_provider("gemini", GeminiSpeechProvider)
register_tts_provider("edge", EdgeTTSProvider)

__all__ = ["factory"]
