"""Persistence for cached message translations and scaled texts.

Rows are immutable once written. Inserts flush immediately so a uniqueness
conflict surfaces inside the caller's transaction scope.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from features.chat.db_models import MessageScaledText, MessageTranslation


class TransformationRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_translation(self, *, message_id: str, target_language: str) -> MessageTranslation | None:
        query = select(MessageTranslation).where(
            MessageTranslation.message_id == message_id,
            MessageTranslation.target_language == target_language,
        )
        result = await self._session.execute(query)
        return result.scalars().first()

    async def insert_translation(
        self,
        *,
        message_id: str,
        target_language: str,
        translated_text: str,
    ) -> MessageTranslation:
        record = MessageTranslation(
            message_id=message_id,
            target_language=target_language,
            translated_text=translated_text,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_scaled_text(
        self,
        *,
        message_id: str,
        target_language: str,
        target_proficiency: str,
    ) -> MessageScaledText | None:
        query = select(MessageScaledText).where(
            MessageScaledText.message_id == message_id,
            MessageScaledText.target_language == target_language,
            MessageScaledText.target_proficiency == target_proficiency,
        )
        result = await self._session.execute(query)
        return result.scalars().first()

    async def insert_scaled_text(
        self,
        *,
        message_id: str,
        target_language: str,
        target_proficiency: str,
        scaled_text: str,
    ) -> MessageScaledText:
        record = MessageScaledText(
            message_id=message_id,
            target_language=target_language,
            target_proficiency=target_proficiency,
            scaled_text=scaled_text,
        )
        self._session.add(record)
        await self._session.flush()
        return record


__all__ = ["TransformationRepository"]
