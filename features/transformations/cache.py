"""Per-message cache of translations and proficiency-scaled texts.

Lookups hit ``message_translations`` / ``message_scaled_texts`` first. A miss
issues one call through the durable request queue; the first successful
result is stored and every later caller (or racing writer) reads the stored
row back, so each ``(message, target)`` pair has exactly one canonical text.

Outcome statuses::

    skipped  bypass flag set, or the viewer is the sender
    cached   a stored record already existed
    created  the call succeeded immediately and the record was stored
    pending  the call is queued for retry (or already in flight); await
             ``outcome.resolve()`` for the canonical text
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Set

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.exceptions import DatabaseError, ProviderError, ValidationError
from core.queue import Durability, DurableRequestQueue, QueuedUnit, ResilientQueueStore, SqlQueueStore
from features.chat.repositories import TransformationRepository
from features.transformations.service import TextTransformationService
from infrastructure.db import is_unique_violation, session_scope

logger = logging.getLogger(__name__)

QUEUE_NAME = "transformations"


class TransformationKind(str, Enum):
    TRANSLATION = "translation"
    SCALING = "scaling"


class CacheStatus(str, Enum):
    SKIPPED = "skipped"
    CACHED = "cached"
    CREATED = "created"
    PENDING = "pending"


@dataclass(slots=True)
class TransformationRequest:
    """A viewer asking for a derived version of one message."""

    kind: TransformationKind
    message_id: str
    source_text: str
    target_language: str
    source_language: Optional[str] = None
    target_proficiency: Optional[str] = None
    sender_id: Optional[str] = None
    viewer_id: Optional[str] = None
    bypass: bool = False

    @property
    def key(self) -> str:
        return cache_key(self.kind, self.message_id, self.target_language, self.target_proficiency)

    @property
    def should_skip(self) -> bool:
        if self.bypass:
            return True
        return self.viewer_id is not None and self.viewer_id == self.sender_id


@dataclass(slots=True)
class TransformationJob:
    """Queue payload; everything needed to redo the call and store its result."""

    kind: str
    message_id: str
    text: str
    target_language: str
    source_language: Optional[str] = None
    target_proficiency: Optional[str] = None

    @property
    def key(self) -> str:
        return cache_key(TransformationKind(self.kind), self.message_id, self.target_language, self.target_proficiency)


@dataclass(slots=True)
class TransformationOutcome:
    status: CacheStatus
    text: Optional[str] = None
    future: Optional[asyncio.Future] = field(default=None, repr=False)

    async def resolve(self) -> Optional[str]:
        """Return the canonical text, waiting on pending work when needed."""

        if self.future is None:
            return self.text
        return await self.future


def cache_key(
    kind: TransformationKind,
    message_id: str,
    target_language: str,
    target_proficiency: Optional[str] = None,
) -> str:
    if kind is TransformationKind.SCALING:
        return f"{kind.value}:{message_id}:{target_language}:{target_proficiency}"
    return f"{kind.value}:{message_id}:{target_language}"


def extract_text(job: TransformationJob, result: Any) -> str:
    """Pull the derived text out of a transformation response."""

    payload: Mapping[str, Any] = result if isinstance(result, Mapping) else {}
    if job.kind == TransformationKind.TRANSLATION.value:
        text = payload.get("translated_text")
        if not isinstance(text, str) or not text.strip():
            raise ProviderError("Translation returned empty text", provider="transformations", retryable=False)
        return text.strip()

    text = payload.get("scaledText")
    if isinstance(text, str) and text.strip():
        return text.strip()
    return job.text


class TransformationJobCodec:
    kind = "transformation_job"

    def encode(self, payload: TransformationJob) -> bytes:
        return json.dumps(asdict(payload), ensure_ascii=False).encode("utf-8")

    def decode(self, data: bytes) -> TransformationJob:
        raw = json.loads(data.decode("utf-8"))
        return TransformationJob(
            kind=TransformationKind(raw["kind"]).value,
            message_id=raw["message_id"],
            text=raw["text"],
            target_language=raw["target_language"],
            source_language=raw.get("source_language"),
            target_proficiency=raw.get("target_proficiency"),
        )


class TransformationExecutor:
    """Run a ``TransformationJob`` against the in-process transformation service."""

    def __init__(self, service: TextTransformationService) -> None:
        self._service = service

    async def __call__(self, job: TransformationJob) -> Dict[str, Any]:
        if job.kind == TransformationKind.TRANSLATION.value:
            return await self._service.translate(job.text, job.source_language, job.target_language)
        return await self._service.scale(job.text, job.target_proficiency, job.target_language)


class TransformationCache:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        queue: DurableRequestQueue[TransformationJob, Any],
    ) -> None:
        self._session_factory = session_factory
        self._queue = queue
        self._inflight: Dict[str, asyncio.Future] = {}
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker,
        service: TextTransformationService,
        *,
        durable_store: Optional[SqlQueueStore] = None,
        **queue_kwargs: Any,
    ) -> "TransformationCache":
        """Wire a cache to its own queue; recovered units persist through the cache."""

        codec = TransformationJobCodec()
        holder: Dict[str, TransformationCache] = {}

        async def _on_recovered(unit: QueuedUnit[TransformationJob], result: Any) -> None:
            await holder["cache"].store_recovered(unit, result)

        queue: DurableRequestQueue[TransformationJob, Any] = DurableRequestQueue(
            QUEUE_NAME,
            TransformationExecutor(service),
            codec=codec,
            store=ResilientQueueStore(QUEUE_NAME, codec, durable_store),
            on_recovered_result=_on_recovered,
            **queue_kwargs,
        )
        cache = cls(session_factory, queue)
        holder["cache"] = cache
        return cache

    @property
    def queue(self) -> DurableRequestQueue[TransformationJob, Any]:
        return self._queue

    def inflight_count(self) -> int:
        return len(self._inflight)

    async def get_or_create(self, request: TransformationRequest) -> TransformationOutcome:
        if request.should_skip:
            return TransformationOutcome(CacheStatus.SKIPPED)

        if request.kind is TransformationKind.SCALING and not request.target_proficiency:
            raise ValidationError("Scaling requires a target proficiency", field="target_proficiency")

        job = TransformationJob(
            kind=request.kind.value,
            message_id=request.message_id,
            text=request.source_text,
            target_language=request.target_language,
            source_language=request.source_language,
            target_proficiency=request.target_proficiency,
        )

        stored = await self._lookup(job)
        if stored is not None:
            return TransformationOutcome(CacheStatus.CACHED, text=stored)

        key = job.key
        shared = self._inflight.get(key)
        if shared is not None:
            return TransformationOutcome(CacheStatus.PENDING, future=shared)

        loop = asyncio.get_running_loop()
        shared = loop.create_future()
        self._inflight[key] = shared
        try:
            queued = await self._queue.submit(
                job,
                durability=Durability.PERSISTENT,
                source=f"transformation:{job.kind}",
                dedupe_key=key,
            )
            if queued.done():
                text = await self._store(job, extract_text(job, queued.result()))
                self._settle(key, shared, result=text)
                return TransformationOutcome(CacheStatus.CREATED, text=text)
        except Exception as exc:
            self._settle(key, shared, error=exc)
            raise

        logger.info("Transformation %s queued for retry", key)
        task = asyncio.create_task(self._complete(key, job, queued, shared), name=f"transformation-{key}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return TransformationOutcome(CacheStatus.PENDING, future=shared)

    async def _complete(
        self,
        key: str,
        job: TransformationJob,
        queued: asyncio.Future,
        shared: asyncio.Future,
    ) -> None:
        try:
            result = await queued
            text = await self._store(job, extract_text(job, result))
        except Exception as exc:
            logger.warning("Transformation %s abandoned: %s", key, exc)
            self._settle(key, shared, error=exc)
            return
        self._settle(key, shared, result=text)

    def _settle(
        self,
        key: str,
        shared: asyncio.Future,
        *,
        result: Optional[str] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if self._inflight.get(key) is shared:
            del self._inflight[key]
        if shared.done():
            return
        if error is None:
            shared.set_result(result)
            return
        shared.set_exception(error)
        # Marks the error retrieved when nobody else is waiting; waiters still receive it
        shared.exception()

    async def store_recovered(self, unit: QueuedUnit[TransformationJob], result: Any) -> None:
        """Persist the result of a unit recovered from an earlier process."""

        job = unit.payload
        text = await self._store(job, extract_text(job, result))
        logger.info("Stored recovered transformation %s (%d chars)", job.key, len(text))

    async def _lookup(self, job: TransformationJob) -> Optional[str]:
        async with session_scope(self._session_factory) as session:
            repository = TransformationRepository(session)
            if job.kind == TransformationKind.TRANSLATION.value:
                record = await repository.get_translation(
                    message_id=job.message_id,
                    target_language=job.target_language,
                )
                return record.translated_text if record else None
            scaled = await repository.get_scaled_text(
                message_id=job.message_id,
                target_language=job.target_language,
                target_proficiency=job.target_proficiency or "",
            )
            return scaled.scaled_text if scaled else None

    async def _store(self, job: TransformationJob, text: str) -> str:
        """Insert the record, or return the one a concurrent writer stored first."""

        try:
            async with session_scope(self._session_factory) as session:
                repository = TransformationRepository(session)
                if job.kind == TransformationKind.TRANSLATION.value:
                    await repository.insert_translation(
                        message_id=job.message_id,
                        target_language=job.target_language,
                        translated_text=text,
                    )
                else:
                    await repository.insert_scaled_text(
                        message_id=job.message_id,
                        target_language=job.target_language,
                        target_proficiency=job.target_proficiency or "",
                        scaled_text=text,
                    )
            return text
        except DatabaseError as exc:
            if not is_unique_violation(exc):
                raise
            existing = await self._lookup(job)
            if existing is None:
                raise
            logger.info("Transformation %s already stored by another writer; using stored text", job.key)
            return existing


__all__ = [
    "CacheStatus",
    "TransformationCache",
    "TransformationExecutor",
    "TransformationJob",
    "TransformationJobCodec",
    "TransformationKind",
    "TransformationOutcome",
    "TransformationRequest",
    "cache_key",
    "extract_text",
]
