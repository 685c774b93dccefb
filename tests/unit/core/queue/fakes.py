"""Executors, codecs and clocks for queue tests."""

from __future__ import annotations

import json
from typing import Any, List

from core.exceptions import ProviderError


def retryable_error() -> ProviderError:
    return ProviderError("Service unavailable", provider="test", status_code=503)


def terminal_error() -> ProviderError:
    return ProviderError("Bad request", provider="test", status_code=400)


class ScriptedExecutor:
    """Replays ``outcomes`` in order; exceptions are raised, anything else returned."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[Any] = []

    async def __call__(self, payload: Any) -> Any:
        self.calls.append(payload)
        outcome = self.outcomes.pop(0) if self.outcomes else f"done:{payload}"
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TextCodec:
    kind = "text"

    def encode(self, payload: str) -> bytes:
        return json.dumps({"text": payload}).encode("utf-8")

    def decode(self, data: bytes) -> str:
        return json.loads(data.decode("utf-8"))["text"]
