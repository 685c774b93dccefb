"""Helpers for rendering paths and stored audio types."""

from __future__ import annotations

import hashlib
from pathlib import PurePosixPath
from typing import Optional

from config.audio import DEFAULT_AUDIO_MIME_TYPE
from config.voice_messages import CONTENT_HASH_LENGTH, SYNTHESIZED_AUDIO_EXTENSION

_MIME_TYPES_BY_EXTENSION = {
    ".webm": "audio/webm",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".aac": "audio/aac",
}


def content_hash(text: str, length: int = CONTENT_HASH_LENGTH) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:length]


def build_final_audio_path(message_id: str, sender_id: str, recipient_id: str, text: str) -> str:
    """Return ``<sender>/<message>/tts-<recipient>-<hash>.mp3`` for a rendering.

    The hash covers the final text, so re-finalizing unchanged text lands on
    the same object.
    """

    return f"{sender_id}/{message_id}/tts-{recipient_id}-{content_hash(text)}.{SYNTHESIZED_AUDIO_EXTENSION}"


def guess_audio_mime_type(path: Optional[str]) -> str:
    if not path:
        return DEFAULT_AUDIO_MIME_TYPE
    return _MIME_TYPES_BY_EXTENSION.get(PurePosixPath(path).suffix.lower(), DEFAULT_AUDIO_MIME_TYPE)


__all__ = [
    "build_final_audio_path",
    "content_hash",
    "guess_audio_mime_type",
]
