"""Short speech clips for in-chat playback.

Clips are keyed by ``sha256(voice|rate|text)``. Lookups go to an in-memory LRU
with a TTL first, then to ``<key>.mp3`` files in the cache directory when one
is configured. Concurrent requests for the same clip share one synthesis.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from config.tts import MAX_TTS_TEXT_CHARS, TTS_CACHE_MAX_ENTRIES, TTS_CACHE_TTL_SECONDS, TTS_FILE_CACHE_DIR
from core.exceptions import ValidationError
from core.providers.factory import get_tts_provider
from core.providers.tts_base import BaseTTSProvider, TTSRequest

from .utils import normalize_rate, pick_voice

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SpeechClip:
    audio: bytes
    voice: str
    rate: str
    cache_hit: bool
    content_type: str = "audio/mpeg"

    @property
    def cache_status(self) -> str:
        return "HIT" if self.cache_hit else "MISS"


def speech_cache_key(text: str, voice: str, rate: str) -> str:
    return hashlib.sha256(f"{voice}|{rate}|{text}".encode("utf-8")).hexdigest()


class SpeechSynthesisService:
    """Synthesize, cache and de-duplicate playback clips."""

    def __init__(
        self,
        provider: Optional[BaseTTSProvider] = None,
        *,
        cache_dir: Optional[Path | str] = TTS_FILE_CACHE_DIR,
        ttl_seconds: float = TTS_CACHE_TTL_SECONDS,
        max_entries: int = TTS_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._provider = provider
        self._cache_dir = Path(cache_dir) if cache_dir else None
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._memory: "OrderedDict[str, Tuple[bytes, float]]" = OrderedDict()
        self._in_flight: Dict[str, asyncio.Task[bytes]] = {}

    @property
    def provider(self) -> BaseTTSProvider:
        if self._provider is None:
            self._provider = get_tts_provider()
        return self._provider

    async def synthesize(
        self,
        text: Optional[str],
        *,
        language: Optional[str] = None,
        voice: Optional[str] = None,
        rate: Any = None,
    ) -> SpeechClip:
        clean_text = (text or "").strip()
        if not clean_text:
            raise ValidationError("Missing text", field="text")
        if len(clean_text) > MAX_TTS_TEXT_CHARS:
            raise ValidationError(f"Text is too long (max {MAX_TTS_TEXT_CHARS} characters)", field="text")

        selected_voice = pick_voice(language, voice)
        selected_rate = normalize_rate(rate)
        key = speech_cache_key(clean_text, selected_voice, selected_rate)

        audio = self._memory_get(key)
        if audio is None and self._cache_dir is not None:
            audio = await asyncio.to_thread(self._file_get, key)
            if audio is not None:
                self._memory_set(key, audio)
        if audio is not None:
            return SpeechClip(audio, selected_voice, selected_rate, cache_hit=True)

        task = self._in_flight.get(key)
        if task is not None:
            audio = await asyncio.shield(task)
            return SpeechClip(audio, selected_voice, selected_rate, cache_hit=True)

        task = asyncio.create_task(self._render(key, clean_text, selected_voice, selected_rate))
        self._in_flight[key] = task
        task.add_done_callback(lambda done: self._forget(key, done))
        # A cancelled caller leaves the shared render running for the others
        audio = await asyncio.shield(task)
        return SpeechClip(audio, selected_voice, selected_rate, cache_hit=False)

    async def _render(self, key: str, text: str, voice: str, rate: str) -> bytes:
        result = await self.provider.generate(TTSRequest(text=text, voice=voice, rate=rate))
        logger.debug("Synthesized %d bytes with %s at %s", len(result.audio_bytes), voice, rate)
        self._memory_set(key, result.audio_bytes)
        if self._cache_dir is not None:
            await asyncio.to_thread(self._file_set, key, result.audio_bytes)
        return result.audio_bytes

    def _forget(self, key: str, task: asyncio.Task[bytes]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def _memory_get(self, key: str) -> Optional[bytes]:
        entry = self._memory.get(key)
        if entry is None:
            return None
        audio, expires_at = entry
        if expires_at <= self._clock():
            del self._memory[key]
            return None
        self._memory.move_to_end(key)
        return audio

    def _memory_set(self, key: str, audio: bytes) -> None:
        now = self._clock()
        for expired in [name for name, (_, expires_at) in self._memory.items() if expires_at <= now]:
            del self._memory[expired]
        self._memory[key] = (audio, now + self._ttl)
        self._memory.move_to_end(key)
        while len(self._memory) > self._max_entries:
            self._memory.popitem(last=False)

    def _file_path(self, key: str) -> Path:
        assert self._cache_dir is not None
        return self._cache_dir / f"{key}.mp3"

    def _file_get(self, key: str) -> Optional[bytes]:
        path = self._file_path(key)
        try:
            if time.time() - path.stat().st_mtime > self._ttl:
                path.unlink(missing_ok=True)
                return None
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("TTS file cache read failed for %s: %s", path, exc)
            return None

    def _file_set(self, key: str, audio: bytes) -> None:
        path = self._file_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(audio)
        except OSError as exc:
            logger.warning("TTS file cache write failed for %s: %s", path, exc)


__all__ = ["SpeechClip", "SpeechSynthesisService", "speech_cache_key"]
