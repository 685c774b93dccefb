"""Google Gemini speech provider implementation."""

from __future__ import annotations

import logging
from typing import Optional

from google.genai import types as genai_types

from config.audio import DEFAULT_TRANSCRIBE_MODEL, build_transcribe_instructions
from config.languages import normalize_language
from core.clients.ai import GeminiKeyRotator, get_gemini_rotator
from core.exceptions import ProviderError
from core.providers.audio.base import (
    BaseAudioProvider,
    SpeechProviderRequest,
    SpeechTranscriptionResult,
)
from core.utils.json_parsing import coerce_str, try_parse_json

logger = logging.getLogger(__name__)


def parse_transcription_response(raw: str) -> tuple[str, Optional[str]]:
    """Extract ``(text, language)`` from the model's JSON reply.

    A reply that is not JSON is taken as the transcript itself.
    """

    parsed = try_parse_json(raw)
    if isinstance(parsed, dict):
        text = coerce_str(parsed.get("text")) or ""
        language = normalize_language(coerce_str(parsed.get("language")))
        return text, language
    return raw.strip(), None


class GeminiSpeechProvider(BaseAudioProvider):
    """Transcribe audio inline with Gemini and detect the spoken language."""

    name = "gemini"

    def __init__(self, rotator: Optional[GeminiKeyRotator] = None, *, model: str = DEFAULT_TRANSCRIBE_MODEL) -> None:
        self._rotator = rotator or get_gemini_rotator()
        self.model = model

    async def transcribe(self, request: SpeechProviderRequest) -> SpeechTranscriptionResult:
        if not request.file_bytes:
            raise ProviderError("Audio input required", provider=self.name, retryable=False)

        part = genai_types.Part.from_bytes(data=request.file_bytes, mime_type=request.mime_type)
        model_name = request.model or self.model
        response = await self._rotator.generate_content(
            model=model_name,
            contents=[part, build_transcribe_instructions()],
        )

        raw_text = (getattr(response, "text", None) or "").strip()
        text, language = parse_transcription_response(raw_text)
        logger.debug("Gemini transcription: %d chars, language=%s", len(text), language)

        return SpeechTranscriptionResult(
            text=text,
            provider=self.name,
            language=language,
            metadata={
                "model": model_name,
                "filename": request.filename,
            },
        )


__all__ = ["GeminiSpeechProvider", "parse_transcription_response"]
