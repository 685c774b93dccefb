"""Durable request queue engine.

One engine, generic over the payload type and an ``executor`` coroutine,
backs every retrying call site (JSON requests, audio transcription, text
transformations). ``submit`` attempts the call once on the caller's stack;
retryable failures become queued units retried by a single periodic scan.

Lifecycle of a unit::

    submit -> attempt 1 fails (retryable) -> saved with attempt_count=1
    scan   -> due? re-attempt -> success: removed, future resolved
                              -> terminal error: removed, future rejected
                              -> retryable: attempt_count += 1
                                 -> reached max_attempts: removed, QueueExhaustedError
                                 -> else saved for the next scan

The scan runs every ``retry_interval`` seconds while units exist, and again
whenever ``notify_online`` reports regained connectivity.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Callable, Dict, Generic, List, Optional

from config.queue import MAX_ATTEMPTS, RETRY_INTERVAL_SECONDS
from core.exceptions import QueueExhaustedError
from core.queue.models import Durability, Executor, P, PayloadCodec, QueuedUnit, R, RecoveredResultHandler
from core.queue.retry import is_retryable_error
from core.queue.store import ResilientQueueStore

logger = logging.getLogger(__name__)

EXHAUSTED_MESSAGE = "Request failed after maximum retry attempts"


def _always_online() -> bool:
    return True


class DurableRequestQueue(Generic[P, R]):
    """Submit-once, retry-later delivery of outbound work."""

    def __init__(
        self,
        name: str,
        executor: Executor[P, R],
        *,
        codec: Optional[PayloadCodec[P]] = None,
        store: Optional[ResilientQueueStore[P]] = None,
        max_attempts: int = MAX_ATTEMPTS,
        retry_interval: float = RETRY_INTERVAL_SECONDS,
        call_timeout: Optional[float] = None,
        is_online: Callable[[], bool] = _always_online,
        clock: Callable[[], float] = time.time,
        on_recovered_result: Optional[RecoveredResultHandler[P, R]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.name = name
        self._executor = executor
        self._store: ResilientQueueStore[P] = store or ResilientQueueStore(name, codec)
        self._max_attempts = max_attempts
        self._retry_interval = retry_interval
        self._call_timeout = call_timeout
        self._is_online = is_online
        self._clock = clock
        self._on_recovered_result = on_recovered_result

        self._futures: Dict[str, asyncio.Future] = {}
        self._unit_by_key: Dict[str, str] = {}
        self._timer: Optional[asyncio.Task] = None
        self._processing = False
        self._started = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    @property
    def store(self) -> ResilientQueueStore[P]:
        return self._store

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def pending_count(self) -> int:
        return len(self._store)

    async def start(self) -> int:
        """Recover units left by an earlier process; start retrying if any exist."""

        if self._started:
            return 0
        self._started = True
        recovered = await self._store.recover()
        for unit in recovered:
            if unit.dedupe_key:
                self._unit_by_key[unit.dedupe_key] = unit.id
        if recovered:
            logger.info("Request queue '%s' recovered %d pending unit(s)", self.name, len(recovered))
            self._ensure_timer()
        return len(recovered)

    async def stop(self) -> None:
        """Cancel the retry timer. Persistent units stay in the durable store."""

        timer = self._timer
        self._timer = None
        if timer is not None and not timer.done():
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        self._started = False

    # ------------------------------------------------------------------
    # submission
    # ------------------------------------------------------------------
    async def submit(
        self,
        payload: P,
        *,
        durability: Durability = Durability.PERSISTENT,
        source: Optional[str] = None,
        dedupe_key: Optional[str] = None,
    ) -> asyncio.Future:
        """Attempt ``payload`` once and return a future for its eventual result.

        Success resolves the future immediately without touching the queue. A
        terminal failure is raised. A retryable failure queues the unit and the
        returned future settles when a later attempt succeeds or gives up.
        """

        loop = asyncio.get_running_loop()

        if dedupe_key is not None:
            existing = self._future_for_key(dedupe_key)
            if existing is not None:
                logger.debug("Request queue '%s' reusing pending unit for %s", self.name, dedupe_key)
                return existing

        attempted_at = self._clock()
        try:
            result = await self._execute(payload)
        except Exception as exc:
            if not is_retryable_error(exc):
                raise
            return await self._enqueue(payload, durability, source, dedupe_key, attempted_at, exc)

        future = loop.create_future()
        future.set_result(result)
        return future

    async def run(
        self,
        payload: P,
        *,
        durability: Durability = Durability.PERSISTENT,
        source: Optional[str] = None,
        dedupe_key: Optional[str] = None,
    ) -> R:
        """Submit and wait for the final outcome."""

        future = await self.submit(payload, durability=durability, source=source, dedupe_key=dedupe_key)
        return await future

    def _future_for_key(self, dedupe_key: str) -> Optional[asyncio.Future]:
        unit_id = self._unit_by_key.get(dedupe_key)
        if unit_id is None or unit_id not in self._store:
            return None
        future = self._futures.get(unit_id)
        if future is None:
            # Recovered after a restart: attach a future for this caller
            future = asyncio.get_running_loop().create_future()
            self._futures[unit_id] = future
        return future

    async def _enqueue(
        self,
        payload: P,
        durability: Durability,
        source: Optional[str],
        dedupe_key: Optional[str],
        attempted_at: float,
        error: Exception,
    ) -> asyncio.Future:
        if self._max_attempts <= 1:
            raise QueueExhaustedError(EXHAUSTED_MESSAGE, attempts=1, last_error=error) from error

        unit: QueuedUnit[P] = QueuedUnit(
            payload=payload,
            durability=durability,
            attempt_count=1,
            created_at=attempted_at,
            last_attempt_at=attempted_at,
            source=source,
            dedupe_key=dedupe_key,
        )
        future = asyncio.get_running_loop().create_future()
        self._futures[unit.id] = future
        if dedupe_key is not None:
            self._unit_by_key[dedupe_key] = unit.id
        await self._store.save(unit)
        logger.warning(
            "Request queue '%s' queued unit %s (source=%s) for retry: %s",
            self.name,
            unit.id,
            source,
            error,
        )
        self._ensure_timer()
        return future

    async def _execute(self, payload: P) -> R:
        if self._call_timeout is None:
            return await self._executor(payload)
        return await asyncio.wait_for(self._executor(payload), timeout=self._call_timeout)

    # ------------------------------------------------------------------
    # retry scan
    # ------------------------------------------------------------------
    async def notify_online(self) -> None:
        """Connectivity regained: retry due units right away."""

        if len(self._store):
            logger.info("Request queue '%s' back online; processing pending units", self.name)
            await self.process_now()

    async def process_now(self) -> None:
        """Scan queued units once. Overlapping calls return immediately."""

        if self._processing:
            return
        if not self._is_online():
            logger.debug("Request queue '%s' skipping scan while offline", self.name)
            return

        self._processing = True
        try:
            now = self._clock()
            for unit in self._store.units():
                if unit.id not in self._store:
                    continue
                if unit.attempt_count >= self._max_attempts:
                    await self._give_up(unit, None)
                    continue
                if now - unit.last_attempt_at < self._retry_interval:
                    continue
                await self._retry(unit)
        finally:
            self._processing = False

    async def _retry(self, unit: QueuedUnit[P]) -> None:
        attempted_at = self._clock()
        try:
            result = await self._execute(unit.payload)
        except Exception as exc:
            if not is_retryable_error(exc):
                logger.warning(
                    "Request queue '%s' dropping unit %s after terminal error: %s", self.name, unit.id, exc
                )
                await self._store.remove(unit.id)
                self._settle(unit, error=exc)
                return

            unit.attempt_count += 1
            unit.last_attempt_at = attempted_at
            if unit.attempt_count >= self._max_attempts:
                await self._give_up(unit, exc)
                return
            logger.info(
                "Request queue '%s' unit %s failed attempt %d/%d: %s",
                self.name,
                unit.id,
                unit.attempt_count,
                self._max_attempts,
                exc,
            )
            await self._store.save(unit)
            return

        await self._store.remove(unit.id)
        logger.info(
            "Request queue '%s' unit %s succeeded on attempt %d", self.name, unit.id, unit.attempt_count + 1
        )
        await self._deliver(unit, result)

    async def _give_up(self, unit: QueuedUnit[P], last_error: Optional[Exception]) -> None:
        await self._store.remove(unit.id)
        logger.error(
            "Request queue '%s' unit %s (source=%s) failed after %d attempts",
            self.name,
            unit.id,
            unit.source,
            unit.attempt_count,
        )
        self._settle(
            unit,
            error=QueueExhaustedError(EXHAUSTED_MESSAGE, attempts=unit.attempt_count, last_error=last_error),
        )

    async def _deliver(self, unit: QueuedUnit[P], result: R) -> None:
        future = self._futures.get(unit.id)
        if future is not None:
            self._settle(unit, result=result)
            return

        self._forget(unit)
        if self._on_recovered_result is None:
            logger.info("Request queue '%s' recovered unit %s completed with no listener", self.name, unit.id)
            return
        try:
            outcome = self._on_recovered_result(unit, result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Request queue '%s' recovered-result handler failed for unit %s", self.name, unit.id)

    def _settle(self, unit: QueuedUnit[P], *, result: object = None, error: Optional[BaseException] = None) -> None:
        future = self._futures.get(unit.id)
        self._forget(unit)
        if future is None or future.done():
            if error is not None and future is None:
                logger.warning("Request queue '%s' abandoned unit %s with no listener: %s", self.name, unit.id, error)
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _forget(self, unit: QueuedUnit[P]) -> None:
        self._futures.pop(unit.id, None)
        if unit.dedupe_key and self._unit_by_key.get(unit.dedupe_key) == unit.id:
            del self._unit_by_key[unit.dedupe_key]

    # ------------------------------------------------------------------
    # timer
    # ------------------------------------------------------------------
    def _ensure_timer(self) -> None:
        if self._timer is None or self._timer.done():
            self._timer = asyncio.create_task(self._run_timer(), name=f"request-queue-{self.name}")

    async def _run_timer(self) -> None:
        try:
            while len(self._store):
                await asyncio.sleep(self._retry_interval)
                await self.process_now()
        finally:
            if self._timer is asyncio.current_task():
                self._timer = None
            logger.debug("Request queue '%s' retry timer stopped", self.name)

    def pending_units(self) -> List[QueuedUnit[P]]:
        return self._store.units()


__all__ = ["DurableRequestQueue", "EXHAUSTED_MESSAGE"]
