"""Repository helpers for per-recipient voice renderings."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError
from features.chat.db_models import MessageVoiceRendering

# Columns a rendering write may set; identity columns are excluded from updates
RENDERING_FIELDS = (
    "source_language",
    "target_language",
    "target_proficiency",
    "needs_translation",
    "needs_scaling",
    "transcript_text",
    "translated_text",
    "scaled_text",
    "final_text",
    "final_language",
    "final_audio_path",
    "processing_status",
    "error_message",
)


def _rendering_values(values: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = set(values) - set(RENDERING_FIELDS)
    if unknown:
        raise ValueError(f"Unknown rendering fields: {', '.join(sorted(unknown))}")
    return dict(values)


class VoiceRenderingRepository:
    """Manage :class:`MessageVoiceRendering` rows keyed by ``(message_id, user_id)``."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_rendering(self, *, message_id: str, user_id: str) -> MessageVoiceRendering | None:
        query = select(MessageVoiceRendering).where(
            MessageVoiceRendering.message_id == message_id,
            MessageVoiceRendering.user_id == user_id,
        )
        result = await self._session.execute(query)
        return result.scalars().first()

    async def list_for_message(self, message_id: str) -> List[MessageVoiceRendering]:
        query = (
            select(MessageVoiceRendering)
            .where(MessageVoiceRendering.message_id == message_id)
            .order_by(MessageVoiceRendering.user_id)
        )
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def insert_rendering(
        self,
        *,
        message_id: str,
        user_id: str,
        values: Mapping[str, Any],
    ) -> MessageVoiceRendering:
        rendering = MessageVoiceRendering(message_id=message_id, user_id=user_id, **_rendering_values(values))
        self._session.add(rendering)
        await self._session.flush()
        return rendering

    async def update_rendering(
        self,
        *,
        message_id: str,
        user_id: str,
        values: Mapping[str, Any],
    ) -> None:
        statement = (
            update(MessageVoiceRendering)
            .where(
                MessageVoiceRendering.message_id == message_id,
                MessageVoiceRendering.user_id == user_id,
            )
            .values(**_rendering_values(values))
        )
        result = await self._session.execute(statement)
        if result.rowcount == 0:
            raise NotFoundError(
                f"Voice rendering for message {message_id} and user {user_id} not found",
                resource="message_voice_rendering",
            )


__all__ = ["RENDERING_FIELDS", "VoiceRenderingRepository"]
