"""Request schema for playback clips."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class SpeechRequest(BaseModel):
    text: str = Field("", description="Text to speak (max 2000 characters)")
    language: Optional[str] = Field(None, description="Language used to pick a voice when none is given")
    voice: Optional[str] = Field(None, description="Explicit Edge voice, e.g. fr-FR-HenriNeural")
    rate: Union[float, str, None] = Field(None, description="Speech rate in percent, clamped to ±50")


__all__ = ["SpeechRequest"]
