"""Google Gemini text generation provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

from google.genai import types  # type: ignore

from config.text import DEFAULT_MODEL, DEFAULT_TEMPERATURE
from core.clients.ai import GeminiKeyRotator, get_gemini_rotator
from core.exceptions import ProviderError
from core.providers.base import BaseTextProvider

logger = logging.getLogger(__name__)


class GeminiTextProvider(BaseTextProvider):
    """Text provider backed by Google Gemini with API key rotation."""

    name = "gemini"

    def __init__(self, rotator: Optional[GeminiKeyRotator] = None, *, model: str = DEFAULT_MODEL) -> None:
        self._rotator = rotator or get_gemini_rotator()
        self.model = model

    async def generate(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        if not prompt or not prompt.strip():
            raise ProviderError("Prompt must not be empty", provider=self.name, retryable=False)

        config = types.GenerateContentConfig(
            temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
        )
        response = await self._rotator.generate_content(
            model=model or self.model,
            contents=prompt,
            config=config,
        )
        text = (getattr(response, "text", None) or "").strip()
        logger.debug("Gemini text response (%d chars) from %s", len(text), model or self.model)
        return text


__all__ = ["GeminiTextProvider"]
