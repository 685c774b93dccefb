"""Shared builders and fakes for the test-suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.exceptions import ProviderError
from core.providers.tts_base import TTSRequest, TTSResult
from features.chat.db_models import Conversation, ConversationParticipant, Message, Profile
from infrastructure.db import session_scope


@dataclass
class ChatFixture:
    conversation_id: str
    message_id: str
    sender_id: str
    recipient_ids: List[str]
    audio_path: str


async def seed_chat(
    session_factory,
    *,
    bypass: bool = False,
    audio_path: Optional[str] = "alice/msg-1/original.webm",
    profiles: Optional[List[Dict[str, Any]]] = None,
) -> ChatFixture:
    profiles = profiles or [
        {"id": "alice", "username": "alice", "language_preference": "en"},
        {"id": "bruno", "username": "bruno", "language_preference": "es", "language_proficiency": "beginner"},
        {"id": "chloe", "username": "chloe", "language_preference": "fr", "tts_voice": "fr-FR-HenriNeural", "tts_rate": 20},
    ]
    async with session_scope(session_factory) as session:
        session.add_all([Profile(**values) for values in profiles])
        session.add(Conversation(id="conv-1", title="Travel plans"))
        await session.flush()
        session.add_all(
            [ConversationParticipant(conversation_id="conv-1", user_id=values["id"]) for values in profiles]
        )
        session.add(
            Message(
                id="msg-1",
                conversation_id="conv-1",
                sender_id=profiles[0]["id"],
                content_type="voice",
                audio_path=audio_path,
                bypass_recipient_preferences=bypass,
            )
        )

    return ChatFixture(
        conversation_id="conv-1",
        message_id="msg-1",
        sender_id=profiles[0]["id"],
        recipient_ids=[values["id"] for values in profiles[1:]],
        audio_path=audio_path or "",
    )


class FakeTextService:
    """Stands in for ``TextTransformationService`` with canned replies."""

    def __init__(
        self,
        *,
        transcript: str = "Hello, see you tomorrow",
        language: Optional[str] = "en",
        fail_translate_for: tuple[str, ...] = (),
        fail_scale: bool = False,
    ) -> None:
        self.transcript = transcript
        self.language = language
        self.fail_translate_for = fail_translate_for
        self.fail_scale = fail_scale
        self.transcribe_calls = 0
        self.translate_calls: List[tuple[str, str, str]] = []
        self.scale_calls: List[tuple[str, str, Optional[str]]] = []

    async def transcribe(self, audio: bytes, *, mime_type=None, filename=None) -> Dict[str, Optional[str]]:
        self.transcribe_calls += 1
        return {"text": self.transcript, "language": self.language}

    async def translate(self, text: str, source_lang: str, target_lang: str) -> Dict[str, str]:
        self.translate_calls.append((text, source_lang, target_lang))
        if target_lang in self.fail_translate_for:
            raise ProviderError("Gemini request failed: overloaded", provider="gemini", retryable=True)
        return {
            "translated_text": f"[{target_lang}] {text}",
            "source_language": source_lang,
            "target_language": target_lang,
        }

    async def scale(self, text: str, target_level: str, language: Optional[str] = None) -> Dict[str, Any]:
        self.scale_calls.append((text, target_level, language))
        if self.fail_scale:
            raise ProviderError("Gemini request failed: timeout", provider="gemini", retryable=True)
        return {"original": text, "scaledText": f"{text} ({target_level})", "targetLevel": target_level}


class FakeTTSProvider:
    name = "fake"

    def __init__(self, *, fail_for_voices: tuple[str, ...] = ()) -> None:
        self.fail_for_voices = fail_for_voices
        self.requests: List[TTSRequest] = []

    async def generate(self, request: TTSRequest) -> TTSResult:
        self.requests.append(request)
        if request.voice in self.fail_for_voices:
            raise ProviderError("TTS returned empty audio", provider=self.name, retryable=False)
        return TTSResult(audio_bytes=f"mp3:{request.text}".encode(), provider=self.name, format="mp3", voice=request.voice)


@dataclass
class FakeStorage:
    objects: Dict[str, bytes] = field(default_factory=dict)
    uploads: List[tuple[str, str]] = field(default_factory=list)
    fail_uploads: bool = False

    async def download(self, path: str) -> bytes:
        if path not in self.objects:
            raise ProviderError(f"Failed to download {path}", provider="s3", status_code=404, retryable=False)
        return self.objects[path]

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        if self.fail_uploads:
            raise ProviderError("Failed to upload", provider="s3", status_code=503, retryable=True)
        self.objects[path] = data
        self.uploads.append((path, content_type))
        return path
