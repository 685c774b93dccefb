"""Storage for queued units.

``ResilientQueueStore`` keeps the working set in memory and writes persistent
units through to ``SqlQueueStore``, a local SQLite file. When the durable
store is disabled or fails it falls back to memory-only operation for the rest
of the process and logs the degradation once.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Generic, List, Optional, Sequence

from sqlalchemy import Float, Integer, LargeBinary, String, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from core.exceptions import DatabaseError
from core.queue.models import Durability, P, PayloadCodec, QueuedUnit
from core.utils.config_helpers import build_sqlite_url
from infrastructure.db.sessions import session_scope

logger = logging.getLogger(__name__)

_STORE_ERRORS = (DatabaseError, SQLAlchemyError, OSError)


class QueueStoreBase(DeclarativeBase):
    """Declarative base for the local queue database (separate from the chat schema)."""


class QueuedUnitRecord(QueueStoreBase):
    """Persisted form of a ``QueuedUnit``."""

    __tablename__ = "queued_units"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    queue_name: Mapped[str] = mapped_column(String(100), index=True)
    payload_kind: Mapped[str] = mapped_column(String(50))
    payload: Mapped[bytes] = mapped_column(LargeBinary)
    attempt_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[float] = mapped_column(Float)
    last_attempt_at: Mapped[float] = mapped_column(Float)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    dedupe_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class SqlQueueStore:
    """Durable local store keyed by unit id, shared by every queue in the process."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def path(self) -> Path:
        return self._path

    async def _factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_async_engine(build_sqlite_url(self._path))
            try:
                async with engine.begin() as connection:
                    await connection.run_sync(QueueStoreBase.metadata.create_all)
            except SQLAlchemyError:
                await engine.dispose()
                raise
            self._engine = engine
            self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        return self._session_factory

    async def save(self, queue_name: str, kind: str, unit: QueuedUnit, encoded: bytes) -> None:
        factory = await self._factory()
        async with session_scope(factory) as session:
            await session.merge(
                QueuedUnitRecord(
                    id=unit.id,
                    queue_name=queue_name,
                    payload_kind=kind,
                    payload=encoded,
                    attempt_count=unit.attempt_count,
                    created_at=unit.created_at,
                    last_attempt_at=unit.last_attempt_at,
                    source=unit.source,
                    dedupe_key=unit.dedupe_key,
                )
            )

    async def delete(self, unit_id: str) -> None:
        factory = await self._factory()
        async with session_scope(factory) as session:
            await session.execute(delete(QueuedUnitRecord).where(QueuedUnitRecord.id == unit_id))

    async def load(self, queue_name: str) -> Sequence[QueuedUnitRecord]:
        factory = await self._factory()
        async with session_scope(factory) as session:
            result = await session.execute(
                select(QueuedUnitRecord)
                .where(QueuedUnitRecord.queue_name == queue_name)
                .order_by(QueuedUnitRecord.created_at)
            )
            return list(result.scalars().all())

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None


class ResilientQueueStore(Generic[P]):
    """In-memory working set with optional write-through durability."""

    def __init__(
        self,
        queue_name: str,
        codec: Optional[PayloadCodec[P]] = None,
        durable: Optional[SqlQueueStore] = None,
    ) -> None:
        self._queue_name = queue_name
        self._codec = codec
        self._durable = durable if codec is not None else None
        self._units: Dict[str, QueuedUnit[P]] = {}
        self._degraded_reason: Optional[str] = None
        if self._durable is None:
            reason = "durable store disabled" if codec is not None else "no payload codec configured"
            self._degrade(reason)

    @property
    def degraded(self) -> bool:
        return self._degraded_reason is not None

    @property
    def degraded_reason(self) -> Optional[str]:
        return self._degraded_reason

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def get(self, unit_id: str) -> Optional[QueuedUnit[P]]:
        return self._units.get(unit_id)

    def units(self) -> List[QueuedUnit[P]]:
        """Snapshot of queued units in enqueue order."""

        return list(self._units.values())

    def _degrade(self, reason: str, exc: BaseException | None = None) -> None:
        if self._degraded_reason is not None:
            return
        self._degraded_reason = reason
        logger.warning(
            "Request queue '%s' is running memory-only (%s); queued work will not survive a restart",
            self._queue_name,
            reason,
            exc_info=exc is not None,
        )

    def _durable_available(self) -> bool:
        return self._durable is not None and self._degraded_reason is None

    async def recover(self) -> List[QueuedUnit[P]]:
        """Load units persisted by an earlier process into the working set."""

        if not self._durable_available():
            return []
        assert self._durable is not None and self._codec is not None

        try:
            records = await self._durable.load(self._queue_name)
        except _STORE_ERRORS as exc:
            self._degrade(f"recovery failed: {exc}", exc)
            return []

        recovered: List[QueuedUnit[P]] = []
        for record in records:
            if record.payload_kind != self._codec.kind:
                logger.warning(
                    "Dropping queued unit %s with unexpected payload kind %s",
                    record.id,
                    record.payload_kind,
                )
                await self._delete_durable(record.id)
                continue
            try:
                payload = self._codec.decode(record.payload)
            except (ValueError, TypeError, KeyError) as exc:
                logger.warning("Dropping undecodable queued unit %s: %s", record.id, exc)
                await self._delete_durable(record.id)
                continue
            unit = QueuedUnit(
                payload=payload,
                durability=Durability.PERSISTENT,
                id=record.id,
                attempt_count=record.attempt_count,
                created_at=record.created_at,
                last_attempt_at=record.last_attempt_at,
                source=record.source,
                dedupe_key=record.dedupe_key,
            )
            self._units[unit.id] = unit
            recovered.append(unit)
        return recovered

    async def save(self, unit: QueuedUnit[P]) -> None:
        self._units[unit.id] = unit
        if not unit.is_persistent or not self._durable_available():
            return
        assert self._durable is not None and self._codec is not None

        try:
            encoded = self._codec.encode(unit.payload)
        except (ValueError, TypeError) as exc:
            logger.warning("Queued unit %s cannot be serialised; keeping it in memory only: %s", unit.id, exc)
            return
        try:
            await self._durable.save(self._queue_name, self._codec.kind, unit, encoded)
        except _STORE_ERRORS as exc:
            self._degrade(f"write failed: {exc}", exc)

    async def remove(self, unit_id: str) -> Optional[QueuedUnit[P]]:
        unit = self._units.pop(unit_id, None)
        if unit is not None and unit.is_persistent:
            await self._delete_durable(unit_id)
        return unit

    async def _delete_durable(self, unit_id: str) -> None:
        if not self._durable_available():
            return
        assert self._durable is not None
        try:
            await self._durable.delete(unit_id)
        except _STORE_ERRORS as exc:
            self._degrade(f"delete failed: {exc}", exc)


@lru_cache(maxsize=1)
def get_durable_queue_store() -> Optional[SqlQueueStore]:
    """Return the process-wide durable store, or ``None`` when it is disabled."""

    from config.queue import QUEUE_STORE_PATH

    if not QUEUE_STORE_PATH:
        return None
    return SqlQueueStore(QUEUE_STORE_PATH)


__all__ = ["QueuedUnitRecord", "ResilientQueueStore", "SqlQueueStore", "get_durable_queue_store"]
