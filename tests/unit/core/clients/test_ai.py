"""Tests for Gemini error classification and key rotation."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from core.clients.ai import GeminiKeyRotator, classify_gemini_error
from core.exceptions import ConfigurationError, ProviderError, RateLimitError

pytestmark = pytest.mark.anyio


class SdkError(Exception):
    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class FakeModels:
    def __init__(self, name: str, outcome) -> None:
        self.name = name
        self.outcome = outcome
        self.calls = 0

    async def generate_content(self, *, model, contents, config=None):
        self.calls += 1
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        if self.outcome == "hang":
            await asyncio.sleep(10)
        return SimpleNamespace(text=self.outcome, model=model)


def fake_client(name: str, outcome):
    models = FakeModels(name, outcome)
    return SimpleNamespace(aio=SimpleNamespace(models=models), models=models)


async def _no_sleep(_: float) -> None:
    return None


@pytest.mark.parametrize(
    ("exc", "retryable"),
    [
        (SdkError("invalid", code=400), False),
        (SdkError("not found", code=404), False),
        (SdkError("api key not valid", code=401), True),
        (SdkError("permission denied", code=403), True),
        (SdkError("resource exhausted", code=429), True),
        (SdkError("internal", code=500), True),
        (SdkError("The model is overloaded"), True),
        (SdkError("INVALID ARGUMENT: contents empty"), False),
        (SdkError("something odd"), False),
    ],
)
def test_classify_gemini_error(exc, retryable):
    classified = classify_gemini_error(exc)

    assert isinstance(classified, ProviderError)
    assert classified.provider == "gemini"
    assert classified.retryable is retryable
    assert classified.original_error is exc


def test_classify_maps_429_to_rate_limit():
    classified = classify_gemini_error(SdkError("resource exhausted", code=429))

    assert isinstance(classified, RateLimitError)
    assert classified.status_code == 429


def test_classify_passes_provider_errors_through():
    original = ProviderError("already classified", retryable=True)

    assert classify_gemini_error(original) is original


async def test_rotator_moves_to_next_key_on_retryable_error():
    first = fake_client("a", SdkError("quota", code=429))
    second = fake_client("b", "hola")
    rotator = GeminiKeyRotator([first, second], sleep=_no_sleep)

    response = await rotator.generate_content(model="m", contents="hello")

    assert response.text == "hola"
    assert first.models.calls == 1
    assert second.models.calls == 1


async def test_rotator_round_robins_between_calls():
    first = fake_client("a", "one")
    second = fake_client("b", "two")
    rotator = GeminiKeyRotator([first, second], sleep=_no_sleep)

    replies = [(await rotator.generate_content(model="m", contents="x")).text for _ in range(3)]

    assert replies == ["one", "two", "one"]


async def test_rotator_stops_on_terminal_error():
    first = fake_client("a", SdkError("bad request", code=400))
    second = fake_client("b", "unused")
    rotator = GeminiKeyRotator([first, second], sleep=_no_sleep)

    with pytest.raises(ProviderError) as excinfo:
        await rotator.generate_content(model="m", contents="hello")

    assert excinfo.value.status_code == 400
    assert excinfo.value.retryable is False
    assert second.models.calls == 0


async def test_rotator_raises_last_error_when_every_key_fails():
    sleeps = []

    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    clients = [fake_client(str(i), SdkError("unavailable", code=503)) for i in range(3)]
    rotator = GeminiKeyRotator(clients, max_attempts=4, backoff_seconds=0.5, sleep=record_sleep)

    with pytest.raises(ProviderError) as excinfo:
        await rotator.generate_content(model="m", contents="hello")

    assert excinfo.value.retryable is True
    assert sleeps == [0.5, 1.0]
    assert all(client.models.calls == 1 for client in clients)


async def test_rotator_times_out_slow_calls():
    rotator = GeminiKeyRotator([fake_client("slow", "hang")], timeout=0.01, sleep=_no_sleep)

    with pytest.raises(ProviderError) as excinfo:
        await rotator.generate_content(model="m", contents="hello")

    assert excinfo.value.status_code == 408
    assert excinfo.value.retryable is True


async def test_rotator_without_keys_is_a_configuration_error():
    rotator = GeminiKeyRotator([])

    with pytest.raises(ConfigurationError):
        await rotator.generate_content(model="m", contents="hello")
