from typing import Any, Callable, Iterator, List

import pytest
from httpx import ASGITransport, AsyncClient

from config.rate_limits import MAX_TEXT_REQUEST_BYTES
from config.text import MAX_TEXT_INPUT_CHARS
from core.exceptions import ProviderError, QueueExhaustedError
from core.providers.audio.base import BaseAudioProvider, SpeechTranscriptionResult
from core.providers.base import BaseTextProvider
from features.chat.repositories import MessageRepository
from features.transformations import rate_limiter as rate_limiter_module
from features.transformations import service as service_module
from features.transformations.cache import CacheStatus, TransformationOutcome, TransformationRequest
from features.transformations.dependencies import (
    get_chat_session,
    get_transformation_cache,
    get_transformation_service,
)
from features.transformations.rate_limiter import RateLimiter
from features.transformations.service import TextTransformationService
from infrastructure.db import session_scope
from main import app

pytestmark = pytest.mark.anyio


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> Iterator[None]:
    try:
        yield
    finally:
        app.dependency_overrides.clear()


class StubTextProvider(BaseTextProvider):
    name = "stub"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt, *, model=None, temperature=None, **kwargs):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class StubAudioProvider(BaseAudioProvider):
    name = "stub-stt"

    async def transcribe(self, request):
        return SpeechTranscriptionResult(text="Bonjour", provider=self.name, language="fr")


class StubCache:
    def __init__(self, outcome: TransformationOutcome | None = None, error: Exception | None = None) -> None:
        self.outcome = outcome
        self.error = error
        self.requests: List[TransformationRequest] = []

    async def get_or_create(self, request: TransformationRequest) -> TransformationOutcome:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.outcome


def _use_provider(provider: StubTextProvider) -> None:
    service = TextTransformationService(provider, StubAudioProvider())
    app.dependency_overrides[get_transformation_service] = lambda: service


def _use_chat_session(session_factory) -> None:
    async def _session():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_chat_session] = _session


async def _post(path: str, **kwargs: Any):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.post(path, **kwargs)


async def test_translate_returns_envelope() -> None:
    _use_provider(StubTextProvider("Hola"))

    response = await _post("/api/v1/translate", json={"text": "Hello", "source_lang": "en", "target_lang": "es"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["data"] == {"translated_text": "Hola", "source_language": "en", "target_language": "es"}


async def test_translate_requires_all_fields() -> None:
    _use_provider(StubTextProvider("Hola"))

    response = await _post("/api/v1/translate", json={"text": "Hello", "source_lang": "en"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "Missing required fields: text, source_lang, target_lang"
    assert payload["data"]["error"] == "validation_error"


async def test_translate_provider_failure_is_bad_gateway() -> None:
    error = ProviderError("Gemini request failed: overloaded", provider="gemini", status_code=503, retryable=True)
    _use_provider(StubTextProvider(error=error))

    response = await _post("/api/v1/translate", json={"text": "Hello", "source_lang": "en", "target_lang": "es"})

    assert response.status_code == 502
    payload = response.json()
    assert payload["message"] == "Translation failed"
    assert payload["data"]["context"] == {"provider": "gemini", "status_code": 503, "retryable": True}


async def test_scale_uses_camel_case_fields() -> None:
    _use_provider(StubTextProvider('{"scaledText": "I go home.", "originalLevel": "advanced", "wasScaled": true}'))

    response = await _post("/api/v1/scale", json={"text": "I am heading home.", "targetLevel": "beginner"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["scaledText"] == "I go home."
    assert data["targetLevel"] == "beginner"
    assert data["originalLevel"] == "advanced"
    assert data["wasScaled"] is True


async def test_scale_rejects_unknown_level() -> None:
    _use_provider(StubTextProvider("{}"))

    response = await _post("/api/v1/scale", json={"text": "Hello", "targetLevel": "expert"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid target level. Must be beginner, intermediate, or advanced"


async def test_scale_rejects_oversized_text() -> None:
    _use_provider(StubTextProvider("{}"))

    response = await _post(
        "/api/v1/scale",
        json={"text": "a" * (MAX_TEXT_INPUT_CHARS + 1), "targetLevel": "beginner"},
    )

    assert response.status_code == 413
    assert response.json()["data"]["context"] == {"field": "text", "limit": MAX_TEXT_INPUT_CHARS}


async def test_correction_falls_back_when_reply_is_not_json() -> None:
    _use_provider(StubTextProvider("sorry, no JSON today"))

    response = await _post("/api/v1/correction", json={"text": "I goes home"})

    assert response.status_code == 200
    analysis = response.json()["data"]["analysis"]
    assert analysis["correctedSentence"] == "I goes home"
    assert analysis["overallScore"] == 100
    assert analysis["praise"] == service_module.UNPARSABLE_CORRECTION_PRAISE


async def test_transcribe_accepts_multipart_audio() -> None:
    _use_provider(StubTextProvider())

    response = await _post("/api/v1/transcribe", files={"audio": ("clip.webm", b"webm-bytes", "audio/webm")})

    assert response.status_code == 200
    assert response.json()["data"] == {"text": "Bonjour", "language": "fr"}


async def test_transcribe_requires_a_file() -> None:
    _use_provider(StubTextProvider())

    response = await _post("/api/v1/transcribe", data={"note": "no file"})

    assert response.status_code == 400
    assert response.json()["message"] == "Missing audio file"


async def test_transcribe_rejects_large_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(service_module, "MAX_AUDIO_INPUT_BYTES", 4)
    _use_provider(StubTextProvider())

    response = await _post("/api/v1/transcribe", files={"audio": ("clip.webm", b"webm-bytes", "audio/webm")})

    assert response.status_code == 413


async def test_message_transformation_requires_authorization() -> None:
    response = await _post(
        "/api/v1/transformations",
        json={"messageId": "msg-1", "targetLanguage": "es"},
    )

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["data"] == {"reason": "token_missing"}


async def test_message_transformation_returns_cached_text(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    async with session_scope(session_factory) as session:
        await MessageRepository(session).store_transcript(chat.message_id, text="Hello", language="en")
    cache = StubCache(TransformationOutcome(CacheStatus.CACHED, text="Hola"))
    _use_chat_session(session_factory)
    app.dependency_overrides[get_transformation_cache] = lambda: cache

    response = await _post(
        "/api/v1/transformations",
        json={"messageId": chat.message_id, "targetLanguage": "es"},
        headers={"Authorization": f"Bearer {auth_token_factory(user_id='bruno')}"},
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"messageId": "msg-1", "status": "cached", "text": "Hola"}
    [request] = cache.requests
    assert request.viewer_id == "bruno"
    assert request.sender_id == "alice"
    assert request.source_text == "Hello"
    assert request.source_language == "en"


async def test_message_transformation_pending_is_accepted(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    async with session_scope(session_factory) as session:
        await MessageRepository(session).store_transcript(chat.message_id, text="Hello", language="en")
    _use_chat_session(session_factory)
    app.dependency_overrides[get_transformation_cache] = lambda: StubCache(TransformationOutcome(CacheStatus.PENDING))

    response = await _post(
        "/api/v1/transformations",
        json={"messageId": chat.message_id, "kind": "scaling", "targetLanguage": "es", "targetProficiency": "beginner"},
        headers={"Authorization": f"Bearer {auth_token_factory(user_id='bruno')}"},
    )

    assert response.status_code == 202
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Transformation queued"
    assert payload["data"] == {"messageId": "msg-1", "status": "pending", "text": None}


async def test_message_transformation_unknown_message(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    _use_chat_session(session_factory)
    app.dependency_overrides[get_transformation_cache] = lambda: StubCache()

    response = await _post(
        "/api/v1/transformations",
        json={"messageId": "missing", "targetLanguage": "es"},
        headers={"Authorization": f"Bearer {auth_token_factory(user_id='bruno')}"},
    )

    assert response.status_code == 404
    assert response.json()["data"]["context"] == {"resource": "message"}


async def test_message_transformation_without_text_is_rejected(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    cache = StubCache()
    _use_chat_session(session_factory)
    app.dependency_overrides[get_transformation_cache] = lambda: cache

    response = await _post(
        "/api/v1/transformations",
        json={"messageId": chat.message_id, "targetLanguage": "es"},
        headers={"Authorization": f"Bearer {auth_token_factory(user_id='bruno')}"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Message has no text to transform"
    assert cache.requests == []


async def test_message_transformation_exhausted_is_bad_gateway(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    async with session_scope(session_factory) as session:
        await MessageRepository(session).store_transcript(chat.message_id, text="Hello", language="en")
    _use_chat_session(session_factory)
    exhausted = QueueExhaustedError("Request failed after 4 attempts", attempts=4)
    app.dependency_overrides[get_transformation_cache] = lambda: StubCache(error=exhausted)

    response = await _post(
        "/api/v1/transformations",
        json={"messageId": chat.message_id, "targetLanguage": "es"},
        headers={"Authorization": f"Bearer {auth_token_factory(user_id='bruno')}"},
    )

    assert response.status_code == 502
    payload = response.json()
    assert payload["message"] == "Transformation failed"
    assert payload["data"]["error"] == "queue_exhausted"
    assert payload["data"]["context"] == {"attempts": 4}


async def test_alternatives_returns_three_options() -> None:
    provider = StubTextProvider('["Could we meet tomorrow?", "See you tomorrow!", "Tomorrow?"]')
    _use_provider(provider)

    response = await _post("/api/v1/alternatives", json={"text": "Can we meet tomorrow?", "context": "Work chat"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] == "Alternatives generated"
    assert payload["data"] == {
        "original": "Can we meet tomorrow?",
        "alternatives": ["Could we meet tomorrow?", "See you tomorrow!", "Tomorrow?"],
    }
    assert "Context: Work chat" in provider.prompts[0]


async def test_alternatives_requires_text() -> None:
    _use_provider(StubTextProvider("[]"))

    response = await _post("/api/v1/alternatives", json={"context": "Work chat"})

    assert response.status_code == 400
    assert response.json()["data"]["error"] == "validation_error"


async def test_translate_with_alternatives_uses_camel_case_fields() -> None:
    _use_provider(StubTextProvider('{"direct": "Hola", "formal": "Buenos días", "casual": "¡Hola!"}'))

    response = await _post("/api/v1/translate-with-alternatives", json={"text": "Hello", "targetLanguage": "es"})

    assert response.status_code == 200
    assert response.json()["data"] == {
        "original": "Hello",
        "targetLanguage": "es",
        "translations": {"direct": "Hola", "formal": "Buenos días", "casual": "¡Hola!"},
    }


async def test_translate_with_alternatives_provider_failure_is_bad_gateway() -> None:
    _use_provider(StubTextProvider(error=ProviderError("Gemini request failed", provider="gemini")))

    response = await _post("/api/v1/translate-with-alternatives", json={"text": "Hello", "targetLanguage": "es"})

    assert response.status_code == 502
    assert response.json()["message"] == "Failed to translate"


async def test_text_routes_answer_too_many_requests(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(rate_limiter_module, "_rate_limiters", {("ai_text", "ip"): RateLimiter(capacity=1)})
    provider = StubTextProvider("Hola")
    _use_provider(provider)
    body = {"text": "Hello", "source_lang": "en", "target_lang": "es"}

    first = await _post("/api/v1/translate", json=body)
    second = await _post("/api/v1/translate", json=body)
    other_route = await _post("/api/v1/translate-with-alternatives", json={"text": "Hello", "targetLanguage": "es"})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.headers["Retry-After"] == "60"
    payload = second.json()
    assert payload["success"] is False
    assert payload["data"]["error"] == "rate_limited"
    assert payload["data"]["context"] == {"retry_after": 60}
    assert other_route.status_code == 200
    assert len(provider.prompts) == 2


async def test_transcribe_uses_the_audio_budget(monkeypatch: pytest.MonkeyPatch) -> None:
    limiters = {("ai_transcribe", "ip"): RateLimiter(capacity=1), ("ai_text", "ip"): RateLimiter(capacity=1)}
    monkeypatch.setattr(rate_limiter_module, "_rate_limiters", limiters)
    _use_provider(StubTextProvider())
    upload = {"audio": ("clip.webm", b"webm-bytes", "audio/webm")}

    first = await _post("/api/v1/transcribe", files=upload)
    second = await _post("/api/v1/transcribe", files=upload)

    assert first.status_code == 200
    assert second.status_code == 429
    assert len(limiters[("ai_text", "ip")]) == 0


async def test_text_routes_reject_oversized_bodies() -> None:
    provider = StubTextProvider("Hola")
    _use_provider(provider)

    response = await _post(
        "/api/v1/alternatives",
        json={"text": "Hello", "context": "x" * (MAX_TEXT_REQUEST_BYTES + 100)},
    )

    assert response.status_code == 413
    payload = response.json()
    assert payload["data"]["error"] == "validation_error"
    assert payload["data"]["context"] == {"field": "body", "limit": MAX_TEXT_REQUEST_BYTES}
    assert provider.prompts == []
