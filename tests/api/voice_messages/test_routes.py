from typing import Any, Callable, Iterator, List

import pytest
from httpx import ASGITransport, AsyncClient

from core.exceptions import AuthorizationError, NotFoundError, ServiceError, ValidationError
from features.voice_messages.dependencies import get_voice_message_service
from features.voice_messages.service import FinalizeOutcome, VoiceMessageService
from main import app
from tests.helpers import FakeStorage, FakeTextService, FakeTTSProvider

pytestmark = pytest.mark.anyio


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> Iterator[None]:
    try:
        yield
    finally:
        app.dependency_overrides.clear()


class StubVoiceMessageService:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: List[dict[str, Any]] = []

    async def finalize(self, *, message_id: str, caller_id: str) -> FinalizeOutcome:
        self.calls.append({"message_id": message_id, "caller_id": caller_id})
        if self.error is not None:
            raise self.error
        return FinalizeOutcome(ok=True, message_id=message_id, recipients_processed=2, warnings=1)


async def _finalize(body: dict[str, Any], token: str | None = None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.post("/api/v1/voice-message/finalize", json=body, headers=headers)


async def test_finalize_returns_outcome(auth_token_factory: Callable[..., str]) -> None:
    stub = StubVoiceMessageService()
    app.dependency_overrides[get_voice_message_service] = lambda: stub

    response = await _finalize({"messageId": " msg-1 "}, auth_token_factory(user_id="alice"))

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["data"] == {"ok": True, "messageId": "msg-1", "recipientsProcessed": 2, "warnings": 1}
    assert stub.calls == [{"message_id": "msg-1", "caller_id": "alice"}]


async def test_finalize_requires_authorization() -> None:
    app.dependency_overrides[get_voice_message_service] = lambda: StubVoiceMessageService()

    response = await _finalize({"messageId": "msg-1"})

    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_finalize_requires_message_id(auth_token_factory: Callable[..., str]) -> None:
    stub = StubVoiceMessageService()
    app.dependency_overrides[get_voice_message_service] = lambda: stub

    response = await _finalize({}, auth_token_factory(user_id="alice"))

    assert response.status_code == 400
    assert response.json()["message"] == "Missing messageId"
    assert stub.calls == []


@pytest.mark.parametrize(
    ("error", "expected_status", "expected_message"),
    [
        (NotFoundError("Message msg-1 not found", resource="message"), 404, "Message msg-1 not found"),
        (AuthorizationError("Only the sender can finalize this voice message"), 403, "Only the sender can finalize this voice message"),
        (ValidationError("Voice message has no audio", field="audio_path"), 400, "Voice message has no audio"),
        (ServiceError("Transcription returned empty text"), 500, "Failed to finalize voice message"),
        (RuntimeError("boom"), 500, "Failed to finalize voice message"),
    ],
)
async def test_finalize_maps_service_errors(
    auth_token_factory: Callable[..., str],
    error: Exception,
    expected_status: int,
    expected_message: str,
) -> None:
    app.dependency_overrides[get_voice_message_service] = lambda: StubVoiceMessageService(error)

    response = await _finalize({"messageId": "msg-1"}, auth_token_factory(user_id="alice"))

    assert response.status_code == expected_status
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == expected_message


async def test_finalize_end_to_end_against_sqlite(
    session_factory, chat, auth_token_factory: Callable[..., str]
) -> None:
    service = VoiceMessageService(
        session_factory,
        storage=FakeStorage(objects={chat.audio_path: b"webm"}),
        text_service=FakeTextService(),
        tts_provider=FakeTTSProvider(),
    )
    app.dependency_overrides[get_voice_message_service] = lambda: service

    accepted = await _finalize({"messageId": chat.message_id}, auth_token_factory(user_id=chat.sender_id))
    rejected = await _finalize({"messageId": chat.message_id}, auth_token_factory(user_id="bruno"))

    assert accepted.status_code == 200
    assert accepted.json()["data"]["recipientsProcessed"] == 2
    assert rejected.status_code == 403
