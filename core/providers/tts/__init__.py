"""Text-to-speech providers."""

from .edge import EdgeTTSProvider

__all__ = ["EdgeTTSProvider"]
