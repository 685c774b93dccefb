"""Voice message finalization: one recording, one rendering per recipient.

The shared steps (download, transcription, transcript storage) run once. Each
recipient then gets an independent pipeline::

    transcript -> translate (if languages differ) -> scale (if proficiency set)
               -> synthesize with the recipient's voice and rate -> upload
               -> upsert rendering row

Translation, scaling and synthesis degrade instead of failing: the recipient
keeps the best text available and a failed synthesis falls back to the
original recording. Only shared-step errors and rendering writes fail the
whole message.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from config.languages import PROFICIENCY_LEVELS, normalize_language
from config.voice_messages import (
    BYPASS_LANGUAGE,
    DEFAULT_SOURCE_LANGUAGE,
    FANOUT_CONCURRENCY,
    SYNTHESIZED_AUDIO_CONTENT_TYPE,
)
from core.exceptions import (
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from core.providers.tts_base import BaseTTSProvider, TTSRequest
from features.chat.repositories import (
    MessageRepository,
    ParticipantRepository,
    RecipientProfile,
    VoiceRenderingRepository,
)
from features.transformations.service import TextTransformationService
from features.tts.utils import normalize_rate, pick_voice
from infrastructure.aws.storage import VoiceStorageService
from infrastructure.db import is_unique_violation, session_scope

from .utils import build_final_audio_path, guess_audio_mime_type

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FinalizeOutcome:
    ok: bool
    message_id: str
    recipients_processed: int
    warnings: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "messageId": self.message_id,
            "recipientsProcessed": self.recipients_processed,
            "warnings": self.warnings,
        }


@dataclass(slots=True)
class _MessageSnapshot:
    id: str
    sender_id: str
    conversation_id: str
    audio_path: Optional[str]
    bypass: bool


@dataclass(slots=True)
class RecipientRendering:
    """What one recipient ends up with, plus the warnings collected on the way."""

    user_id: str
    values: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return self.values["processing_status"]


def _reason(exc: BaseException) -> str:
    return str(exc).strip() or exc.__class__.__name__


class VoiceMessageService:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        *,
        storage: VoiceStorageService,
        text_service: TextTransformationService,
        tts_provider: BaseTTSProvider,
        concurrency: int = FANOUT_CONCURRENCY,
    ) -> None:
        self._session_factory = session_factory
        self._storage = storage
        self._text_service = text_service
        self._tts_provider = tts_provider
        self._concurrency = max(1, concurrency)

    async def finalize(self, *, message_id: str, caller_id: str) -> FinalizeOutcome:
        """Produce personalized renderings of a voice message for every recipient.

        Raises ``NotFoundError`` / ``AuthorizationError`` before touching the
        message. Any later failure marks the message ``failed`` and propagates.
        Re-running on the same message overwrites its renderings.
        """

        if not message_id or not str(message_id).strip():
            raise ValidationError("Missing messageId", field="messageId")

        message = await self._load_message(message_id)
        if message.sender_id != caller_id:
            raise AuthorizationError("Only the sender can finalize this voice message", resource="message")

        try:
            return await self._finalize(message)
        except Exception as exc:
            logger.error("Voice message %s finalization failed: %s", message.id, exc)
            await self._mark_failed(message.id)
            raise

    async def _finalize(self, message: _MessageSnapshot) -> FinalizeOutcome:
        if not message.audio_path:
            raise ValidationError("Voice message has no audio", field="audio_path")

        participants = await self._list_participants(message.conversation_id)
        if not participants:
            raise ServiceError("No conversation participants found")

        if message.bypass:
            return await self._finalize_bypass(message, participants)

        audio = await self._storage.download(message.audio_path)
        transcription = await self._text_service.transcribe(
            audio,
            mime_type=guess_audio_mime_type(message.audio_path),
            filename=message.audio_path.rsplit("/", 1)[-1],
        )
        transcript = (transcription.get("text") or "").strip()
        if not transcript:
            raise ServiceError("Transcription returned empty text")
        source_language = normalize_language(transcription.get("language")) or DEFAULT_SOURCE_LANGUAGE

        async with session_scope(self._session_factory) as session:
            await MessageRepository(session).store_transcript(
                message.id,
                text=transcript,
                language=source_language,
            )

        recipients = [profile for profile in participants if profile.user_id != message.sender_id] or participants
        logger.info(
            "Finalizing voice message %s for %d recipient(s), source language %s",
            message.id,
            len(recipients),
            source_language,
        )

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _run(recipient: RecipientProfile) -> RecipientRendering:
            async with semaphore:
                rendering = await self.render_recipient(message, recipient, transcript, source_language)
                await self._write_rendering(message.id, rendering.user_id, rendering.values)
                return rendering

        results = await asyncio.gather(*(_run(recipient) for recipient in recipients), return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            raise failures[0]

        await self._update_status(message.id, "ready")
        warnings = sum(len(result.warnings) for result in results if isinstance(result, RecipientRendering))
        return FinalizeOutcome(
            ok=True,
            message_id=message.id,
            recipients_processed=len(recipients),
            warnings=warnings,
        )

    async def render_recipient(
        self,
        message: _MessageSnapshot,
        recipient: RecipientProfile,
        transcript: str,
        source_language: str,
    ) -> RecipientRendering:
        """Build one recipient's rendering. Never raises for provider failures."""

        target_language = normalize_language(recipient.language_preference) or source_language
        proficiency = recipient.language_proficiency if recipient.language_proficiency in PROFICIENCY_LEVELS else None
        warnings: List[str] = []

        translated_text: Optional[str] = None
        scaled_text: Optional[str] = None
        final_text = transcript
        final_language = source_language

        if target_language != source_language:
            try:
                result = await self._text_service.translate(transcript, source_language, target_language)
                translated_text = result["translated_text"]
                if translated_text.strip():
                    final_text = translated_text
                    final_language = target_language
            except Exception as exc:
                logger.warning("Translation for %s on message %s skipped: %s", recipient.user_id, message.id, exc)
                warnings.append(f"Translation skipped: {_reason(exc)}")

        if proficiency:
            try:
                result = await self._text_service.scale(final_text, proficiency, final_language)
                scaled_text = result["scaledText"]
                if scaled_text.strip():
                    final_text = scaled_text
            except Exception as exc:
                logger.warning("Scaling for %s on message %s skipped: %s", recipient.user_id, message.id, exc)
                warnings.append(f"Scaling skipped: {_reason(exc)}")

        if not final_text.strip():
            final_text = transcript

        status = "ready"
        error_message: Optional[str] = None
        final_audio_path = message.audio_path
        try:
            speech = await self._tts_provider.generate(
                TTSRequest(
                    text=final_text,
                    voice=pick_voice(final_language, recipient.tts_voice),
                    rate=normalize_rate(recipient.tts_rate),
                )
            )
            final_audio_path = await self._storage.upload(
                build_final_audio_path(message.id, message.sender_id, recipient.user_id, final_text),
                speech.audio_bytes,
                SYNTHESIZED_AUDIO_CONTENT_TYPE,
            )
        except Exception as exc:
            reason = _reason(exc)
            logger.warning("Audio synthesis for %s on message %s failed: %s", recipient.user_id, message.id, reason)
            status = "failed"
            warnings.append(f"Audio synthesis skipped: {reason}")
            error_message = f"Audio rendering unavailable: {reason}"

        return RecipientRendering(
            user_id=recipient.user_id,
            values={
                "source_language": source_language,
                "target_language": target_language,
                "target_proficiency": proficiency,
                "needs_translation": translated_text is not None,
                "needs_scaling": scaled_text is not None,
                "transcript_text": transcript,
                "translated_text": translated_text,
                "scaled_text": scaled_text,
                "final_text": final_text,
                "final_language": final_language,
                "final_audio_path": final_audio_path,
                "processing_status": status,
                "error_message": error_message,
            },
            warnings=warnings,
        )

    async def _finalize_bypass(
        self,
        message: _MessageSnapshot,
        participants: List[RecipientProfile],
    ) -> FinalizeOutcome:
        """Everyone hears the original recording; no provider is called."""

        for participant in participants:
            await self._write_rendering(
                message.id,
                participant.user_id,
                {
                    "source_language": None,
                    "target_language": BYPASS_LANGUAGE,
                    "target_proficiency": None,
                    "needs_translation": False,
                    "needs_scaling": False,
                    "transcript_text": "",
                    "translated_text": None,
                    "scaled_text": None,
                    "final_text": "",
                    "final_language": BYPASS_LANGUAGE,
                    "final_audio_path": message.audio_path,
                    "processing_status": "ready",
                    "error_message": None,
                },
            )

        await self._update_status(message.id, "ready")
        logger.info("Voice message %s finalized with recipient preferences bypassed", message.id)
        return FinalizeOutcome(ok=True, message_id=message.id, recipients_processed=len(participants))

    async def _load_message(self, message_id: str) -> _MessageSnapshot:
        async with session_scope(self._session_factory) as session:
            message = await MessageRepository(session).get_message(message_id)
            if message is None:
                raise NotFoundError(f"Message {message_id} not found", resource="message")
            return _MessageSnapshot(
                id=message.id,
                sender_id=message.sender_id,
                conversation_id=message.conversation_id,
                audio_path=message.audio_path,
                bypass=bool(message.bypass_recipient_preferences),
            )

    async def _list_participants(self, conversation_id: str) -> List[RecipientProfile]:
        async with session_scope(self._session_factory) as session:
            return await ParticipantRepository(session).list_participant_preferences(conversation_id)

    async def _write_rendering(self, message_id: str, user_id: str, values: Dict[str, Any]) -> None:
        """Insert the rendering, or update it when one already exists for the recipient."""

        try:
            async with session_scope(self._session_factory) as session:
                await VoiceRenderingRepository(session).insert_rendering(
                    message_id=message_id,
                    user_id=user_id,
                    values=values,
                )
            return
        except DatabaseError as exc:
            if not is_unique_violation(exc):
                raise

        async with session_scope(self._session_factory) as session:
            await VoiceRenderingRepository(session).update_rendering(
                message_id=message_id,
                user_id=user_id,
                values=values,
            )

    async def _update_status(self, message_id: str, status: str) -> None:
        async with session_scope(self._session_factory) as session:
            await MessageRepository(session).update_processing_status(message_id, status)

    async def _mark_failed(self, message_id: str) -> None:
        try:
            await self._update_status(message_id, "failed")
        except (DatabaseError, NotFoundError) as exc:
            logger.error("Could not mark voice message %s as failed: %s", message_id, exc)


__all__ = ["FinalizeOutcome", "RecipientRendering", "VoiceMessageService"]
