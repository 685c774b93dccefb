"""Audio transcription requests delivered through the durable request queue."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from config.audio import DEFAULT_AUDIO_MIME_TYPE
from config.queue import EXTERNAL_CALL_TIMEOUT_SECONDS, MAX_PERSISTED_AUDIO_BYTES
from core.exceptions import ProviderError
from core.queue.engine import DurableRequestQueue
from core.queue.http_requests import unwrap_envelope
from core.queue.models import Durability
from core.queue.retry import is_retryable_status
from core.queue.store import ResilientQueueStore, SqlQueueStore

logger = logging.getLogger(__name__)

PROVIDER_NAME = "transcription"


@dataclass(slots=True)
class TranscriptionJob:
    audio: bytes
    mime_type: str = DEFAULT_AUDIO_MIME_TYPE
    language: Optional[str] = None
    filename: str = "recording.webm"


@dataclass(slots=True)
class TranscriptionResult:
    text: str
    language: Optional[str] = None


class TranscriptionJobCodec:
    kind = "transcription_job"

    def encode(self, payload: TranscriptionJob) -> bytes:
        return json.dumps(
            {
                "audio": base64.b64encode(payload.audio).decode("ascii"),
                "mime_type": payload.mime_type,
                "language": payload.language,
                "filename": payload.filename,
            }
        ).encode("utf-8")

    def decode(self, data: bytes) -> TranscriptionJob:
        raw = json.loads(data.decode("utf-8"))
        return TranscriptionJob(
            audio=base64.b64decode(raw["audio"]),
            mime_type=raw.get("mime_type") or DEFAULT_AUDIO_MIME_TYPE,
            language=raw.get("language"),
            filename=raw.get("filename") or "recording.webm",
        )


class TranscriptionExecutor:
    """Upload the audio as multipart form data and parse ``{text, language}``."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._transport = transport

    async def __call__(self, job: TranscriptionJob) -> TranscriptionResult:
        files = {"audio": (job.filename, job.audio, job.mime_type)}
        data: Dict[str, str] = {}
        if job.language:
            data["language"] = job.language

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, files=files, data=data, headers=self._headers)
        except httpx.TimeoutException as exc:
            raise ProviderError("Transcription request timed out", provider=PROVIDER_NAME, original_error=exc, retryable=True) from exc
        except httpx.RequestError as exc:
            raise ProviderError(
                f"Network error during transcription: {exc}",
                provider=PROVIDER_NAME,
                original_error=exc,
                retryable=True,
            ) from exc

        if response.status_code >= 400:
            raise ProviderError(
                f"Transcription failed with status {response.status_code}",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
                retryable=is_retryable_status(response.status_code),
            )

        try:
            payload: Any = unwrap_envelope(response.json())
        except ValueError as exc:
            raise ProviderError(
                "Invalid JSON response",
                provider=PROVIDER_NAME,
                original_error=exc,
                status_code=response.status_code,
                retryable=False,
            ) from exc

        if not isinstance(payload, Mapping) or not isinstance(payload.get("text"), str):
            raise ProviderError("Transcription response missing text", provider=PROVIDER_NAME, retryable=False)
        language = payload.get("language")
        return TranscriptionResult(text=payload["text"], language=language if isinstance(language, str) else None)


def build_transcription_queue(
    url: str,
    *,
    name: str = "transcriptions",
    executor: Optional[TranscriptionExecutor] = None,
    durable_store: Optional[SqlQueueStore] = None,
    **queue_kwargs: Any,
) -> DurableRequestQueue[TranscriptionJob, TranscriptionResult]:
    codec = TranscriptionJobCodec()
    return DurableRequestQueue(
        name,
        executor or TranscriptionExecutor(url),
        codec=codec,
        store=ResilientQueueStore(name, codec, durable_store),
        **queue_kwargs,
    )


def transcription_durability(audio_size: int, persist: Optional[bool] = None) -> Durability:
    """Pick where a transcription unit lives while it waits for a retry.

    An explicit ``persist`` wins; otherwise recordings up to
    ``MAX_PERSISTED_AUDIO_BYTES`` are persisted and larger ones stay in memory.
    """

    if persist is None:
        persist = audio_size <= MAX_PERSISTED_AUDIO_BYTES
    return Durability.PERSISTENT if persist else Durability.EPHEMERAL


async def transcribe_with_retry(
    queue: DurableRequestQueue[TranscriptionJob, TranscriptionResult],
    audio: bytes,
    *,
    mime_type: str = DEFAULT_AUDIO_MIME_TYPE,
    language: Optional[str] = None,
    persist: Optional[bool] = None,
    source: Optional[str] = None,
) -> TranscriptionResult:
    """Transcribe ``audio``, retrying through ``queue`` on transient failures."""

    job = TranscriptionJob(audio=audio, mime_type=mime_type, language=language)
    return await queue.run(
        job,
        durability=transcription_durability(len(audio), persist),
        source=source or "transcription",
    )


__all__ = [
    "TranscriptionExecutor",
    "TranscriptionJob",
    "TranscriptionJobCodec",
    "TranscriptionResult",
    "build_transcription_queue",
    "transcribe_with_retry",
    "transcription_durability",
]
