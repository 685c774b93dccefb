"""Dependency helpers for the voice message feature."""

from __future__ import annotations

from functools import lru_cache

from core.providers.factory import get_tts_provider
from features.transformations.dependencies import get_transformation_service
from infrastructure.aws.storage import VoiceStorageService
from infrastructure.db import require_main_session_factory

from .service import VoiceMessageService


@lru_cache(maxsize=1)
def _voice_message_service_singleton() -> VoiceMessageService:
    return VoiceMessageService(
        require_main_session_factory(),
        storage=VoiceStorageService(),
        text_service=get_transformation_service(),
        tts_provider=get_tts_provider(),
    )


def get_voice_message_service() -> VoiceMessageService:
    """Return a cached instance of :class:`VoiceMessageService`."""

    return _voice_message_service_singleton()


__all__ = ["get_voice_message_service"]
