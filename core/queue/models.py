"""Data types shared by the durable request queue."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, Protocol, TypeVar
from uuid import uuid4

P = TypeVar("P")
R = TypeVar("R")


class Durability(str, Enum):
    """Whether a queued unit survives a process restart."""

    PERSISTENT = "persistent"
    EPHEMERAL = "ephemeral"


@dataclass(slots=True)
class QueuedUnit(Generic[P]):
    """One pending piece of outbound work owned by the queue."""

    payload: P
    durability: Durability = Durability.PERSISTENT
    id: str = field(default_factory=lambda: uuid4().hex)
    attempt_count: int = 0
    created_at: float = field(default_factory=time.time)
    last_attempt_at: float = 0.0
    source: Optional[str] = None
    dedupe_key: Optional[str] = None

    @property
    def is_persistent(self) -> bool:
        return self.durability is Durability.PERSISTENT


class PayloadCodec(Protocol[P]):
    """Serialises payloads of persistent units for the durable store."""

    kind: str

    def encode(self, payload: P) -> bytes:
        ...

    def decode(self, data: bytes) -> P:
        ...


Executor = Callable[[P], Awaitable[R]]
RecoveredResultHandler = Callable[[QueuedUnit[P], R], Awaitable[None]]


__all__ = [
    "Durability",
    "Executor",
    "P",
    "PayloadCodec",
    "QueuedUnit",
    "R",
    "RecoveredResultHandler",
]
