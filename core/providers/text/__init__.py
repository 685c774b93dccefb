"""Text provider implementations."""

from .gemini import GeminiTextProvider

__all__ = ["GeminiTextProvider"]
