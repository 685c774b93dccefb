"""Tests for the cached playback clip service."""

from __future__ import annotations

import asyncio
import os
import time
from typing import List

import pytest

from core.exceptions import ProviderError, ValidationError
from core.providers.tts_base import BaseTTSProvider, TTSRequest, TTSResult
from features.tts.service import SpeechSynthesisService, speech_cache_key

pytestmark = pytest.mark.anyio


class FakeTTSProvider(BaseTTSProvider):
    name = "fake-tts"

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: List[TTSRequest] = []

    async def generate(self, request: TTSRequest) -> TTSResult:
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return TTSResult(audio_bytes=f"mp3:{request.text}".encode(), provider=self.name, format="mp3")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _service(provider: FakeTTSProvider, **kwargs) -> SpeechSynthesisService:
    kwargs.setdefault("cache_dir", None)
    return SpeechSynthesisService(provider, **kwargs)


async def test_second_request_is_served_from_memory():
    provider = FakeTTSProvider()
    service = _service(provider)

    first = await service.synthesize("  Bonjour  ", language="fr-FR", rate=12.5)
    second = await service.synthesize("Bonjour", language="fr", rate="13")

    assert first.cache_status == "MISS"
    assert second.cache_status == "HIT"
    assert first.audio == second.audio == b"mp3:Bonjour"
    assert (first.voice, first.rate) == ("fr-FR-DeniseNeural", "+13%")
    [request] = provider.requests
    assert (request.text, request.voice, request.rate) == ("Bonjour", "fr-FR-DeniseNeural", "+13%")


async def test_voice_and_rate_are_part_of_the_key():
    provider = FakeTTSProvider()
    service = _service(provider)

    await service.synthesize("Hello")
    await service.synthesize("Hello", voice="en-GB-SoniaNeural")
    await service.synthesize("Hello", rate=-10)

    assert len(provider.requests) == 3
    assert speech_cache_key("Hello", "a", "+0%") != speech_cache_key("Hello", "b", "+0%")


async def test_concurrent_requests_share_one_synthesis():
    provider = FakeTTSProvider()
    service = _service(provider)

    clips = await asyncio.gather(*(service.synthesize("Hola", language="es") for _ in range(3)))

    assert len(provider.requests) == 1
    assert [clip.cache_status for clip in clips] == ["MISS", "HIT", "HIT"]
    assert service.in_flight_count() == 0


async def test_failed_synthesis_is_not_cached():
    provider = FakeTTSProvider(error=ProviderError("edge-tts failed", provider="edge"))
    service = _service(provider)

    with pytest.raises(ProviderError):
        await service.synthesize("Hallo", language="de")
    assert service.in_flight_count() == 0

    provider.error = None
    clip = await service.synthesize("Hallo", language="de")

    assert clip.cache_status == "MISS"
    assert len(provider.requests) == 2


async def test_memory_entries_expire():
    provider = FakeTTSProvider()
    clock = FakeClock()
    service = _service(provider, ttl_seconds=10, clock=clock)

    await service.synthesize("Ciao")
    clock.now += 11
    clip = await service.synthesize("Ciao")

    assert clip.cache_status == "MISS"
    assert len(provider.requests) == 2


async def test_least_recently_used_clip_is_evicted():
    provider = FakeTTSProvider()
    service = _service(provider, max_entries=2)

    await service.synthesize("one")
    await service.synthesize("two")
    await service.synthesize("one")
    await service.synthesize("three")

    assert (await service.synthesize("one")).cache_status == "HIT"
    assert (await service.synthesize("two")).cache_status == "MISS"
    assert [request.text for request in provider.requests] == ["one", "two", "three", "two"]


async def test_file_cache_outlives_the_service(tmp_path):
    provider = FakeTTSProvider()
    await _service(provider, cache_dir=tmp_path).synthesize("Olá", language="pt")

    clip = await _service(provider, cache_dir=tmp_path).synthesize("Olá", language="pt")

    assert clip.cache_status == "HIT"
    assert clip.audio == "mp3:Olá".encode()
    assert len(provider.requests) == 1
    assert len(list(tmp_path.glob("*.mp3"))) == 1


async def test_expired_cache_files_are_replaced(tmp_path):
    provider = FakeTTSProvider()
    await _service(provider, cache_dir=tmp_path, ttl_seconds=60).synthesize("Hej")
    [path] = tmp_path.glob("*.mp3")
    stale = time.time() - 120
    os.utime(path, (stale, stale))

    clip = await _service(provider, cache_dir=tmp_path, ttl_seconds=60).synthesize("Hej")

    assert clip.cache_status == "MISS"
    assert len(provider.requests) == 2
    assert path.stat().st_mtime > stale


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", "Missing text"),
        ("   ", "Missing text"),
        ("x" * 2001, "Text is too long (max 2000 characters)"),
    ],
)
async def test_text_is_validated(text, message):
    provider = FakeTTSProvider()

    with pytest.raises(ValidationError) as excinfo:
        await _service(provider).synthesize(text)

    assert str(excinfo.value) == message
    assert provider.requests == []
