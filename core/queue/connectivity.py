"""Network connectivity monitoring for the retry queues.

A cheap TCP connect to a well-known endpoint decides online/offline. Each
offline -> online transition triggers the registered callbacks, normally
``DurableRequestQueue.notify_online``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from config.queue import (
    CONNECTIVITY_CHECK_HOST,
    CONNECTIVITY_CHECK_INTERVAL_SECONDS,
    CONNECTIVITY_CHECK_PORT,
)

logger = logging.getLogger(__name__)

OnlineCallback = Callable[[], Awaitable[None]]
ReachabilityCheck = Callable[[], Awaitable[bool]]


class ConnectivityMonitor:
    """Track whether outbound network calls are currently possible."""

    def __init__(
        self,
        host: str = CONNECTIVITY_CHECK_HOST,
        port: int = CONNECTIVITY_CHECK_PORT,
        *,
        interval: float = CONNECTIVITY_CHECK_INTERVAL_SECONDS,
        check_timeout: float = 3.0,
        is_reachable: Optional[ReachabilityCheck] = None,
    ) -> None:
        self._host = host
        self._port = port
        self._interval = interval
        self._check_timeout = check_timeout
        self._is_reachable = is_reachable or self._tcp_check
        self._online = True
        self._callbacks: List[OnlineCallback] = []
        self._task: Optional[asyncio.Task] = None

    def is_online(self) -> bool:
        return self._online

    def subscribe(self, callback: OnlineCallback) -> None:
        self._callbacks.append(callback)

    async def _tcp_check(self) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._check_timeout,
            )
        except (OSError, asyncio.TimeoutError):
            return False
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return True

    async def check(self) -> bool:
        """Check once and fire callbacks on an offline -> online transition."""

        online = await self._is_reachable()
        await self.set_online(online)
        return online

    async def set_online(self, online: bool) -> None:
        was_online = self._online
        self._online = online
        if online == was_online:
            return
        if not online:
            logger.warning("Network connectivity lost; queued requests will wait")
            return

        logger.info("Network connectivity regained")
        results = await asyncio.gather(*(callback() for callback in self._callbacks), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error("Connectivity callback failed: %s", result, exc_info=result)

    async def _run(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="connectivity-monitor")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


__all__ = ["ConnectivityMonitor"]
