"""Microsoft Edge neural voices via ``edge-tts``."""

from __future__ import annotations

import logging

import edge_tts
from edge_tts.exceptions import NoAudioReceived

from core.exceptions import ProviderError
from core.providers.tts_base import BaseTTSProvider, TTSRequest, TTSResult

logger = logging.getLogger(__name__)


class EdgeTTSProvider(BaseTTSProvider):
    """Synthesize MP3 speech with the Edge read-aloud service."""

    name = "edge"

    async def generate(self, request: TTSRequest) -> TTSResult:
        text = request.text.strip()
        if not text:
            raise ProviderError("Cannot synthesize empty text", provider=self.name, retryable=False)

        communicate = edge_tts.Communicate(text, request.voice, rate=request.rate)
        chunks: list[bytes] = []
        try:
            async for event in communicate.stream():
                if event.get("type") == "audio" and event.get("data"):
                    chunks.append(event["data"])
        except NoAudioReceived as exc:
            raise ProviderError(
                "TTS returned empty audio", provider=self.name, original_error=exc, retryable=False
            ) from exc
        except Exception as exc:
            logger.error("Edge TTS request failed for voice %s: %s", request.voice, exc)
            raise ProviderError(
                f"Edge TTS request failed: {exc}", provider=self.name, original_error=exc
            ) from exc

        audio = b"".join(chunks)
        if not audio:
            raise ProviderError("TTS returned empty audio", provider=self.name, retryable=False)

        return TTSResult(
            audio_bytes=audio,
            provider=self.name,
            format=request.format,
            voice=request.voice,
            content_type="audio/mpeg",
            metadata={"rate": request.rate, "bytes": len(audio)},
        )


__all__ = ["EdgeTTSProvider"]
