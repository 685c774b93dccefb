"""Pydantic schemas for the voice message endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FinalizeVoiceMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: Optional[str] = Field(None, alias="messageId", description="Voice message to personalize")


class FinalizeVoiceMessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    message_id: str = Field(..., alias="messageId")
    recipients_processed: int = Field(..., alias="recipientsProcessed")
    warnings: int = Field(0, description="Count of degraded steps across recipients")


__all__ = ["FinalizeVoiceMessageRequest", "FinalizeVoiceMessageResponse"]
