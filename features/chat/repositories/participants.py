"""Conversation participant lookups joined with profile preferences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from features.chat.db_models import ConversationParticipant, Profile


@dataclass(slots=True)
class RecipientProfile:
    user_id: str
    language_preference: Optional[str] = None
    language_proficiency: Optional[str] = None
    tts_voice: Optional[str] = None
    tts_rate: Optional[int] = None


class ParticipantRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_participant_preferences(self, conversation_id: str) -> List[RecipientProfile]:
        """Return every participant with their personalization settings.

        Participants without a profile row come back with empty preferences.
        """

        query = (
            select(
                ConversationParticipant.user_id,
                Profile.language_preference,
                Profile.language_proficiency,
                Profile.tts_voice,
                Profile.tts_rate,
            )
            .outerjoin(Profile, Profile.id == ConversationParticipant.user_id)
            .where(ConversationParticipant.conversation_id == conversation_id)
            .order_by(ConversationParticipant.joined_at, ConversationParticipant.user_id)
        )
        result = await self._session.execute(query)
        return [
            RecipientProfile(
                user_id=row.user_id,
                language_preference=row.language_preference,
                language_proficiency=row.language_proficiency,
                tts_voice=row.tts_voice,
                tts_rate=row.tts_rate,
            )
            for row in result.all()
        ]


__all__ = ["ParticipantRepository", "RecipientProfile"]
