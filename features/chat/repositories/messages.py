"""Repository helpers for chat messages."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError
from features.chat.db_models import PROCESSING_STATUSES, Message

logger = logging.getLogger(__name__)


class MessageRepository:
    """Read and update :class:`Message` rows."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_message(self, message_id: str) -> Message | None:
        result = await self._session.execute(select(Message).where(Message.id == message_id))
        return result.scalars().first()

    async def _require(self, message_id: str) -> Message:
        message = await self.get_message(message_id)
        if message is None:
            raise NotFoundError(f"Message {message_id} not found", resource="message")
        return message

    async def update_processing_status(self, message_id: str, status: str) -> Message:
        if status not in PROCESSING_STATUSES:
            raise ValueError(f"Unsupported processing status: {status}")

        message = await self._require(message_id)
        message.processing_status = status
        await self._session.flush()
        logger.debug("Message %s processing_status=%s", message_id, status)
        return message

    async def store_transcript(
        self,
        message_id: str,
        *,
        text: str,
        language: Optional[str],
    ) -> Message:
        """Record the transcript of a voice message and mark it ``processing``."""

        message = await self._require(message_id)
        message.original_text = text
        message.original_language = language
        message.processing_status = "processing"
        await self._session.flush()
        return message


__all__ = ["MessageRepository"]
