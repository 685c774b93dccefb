"""Dependency helpers for the transformations feature."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from config.queue import EXTERNAL_CALL_TIMEOUT_SECONDS
from core.queue import ConnectivityMonitor, get_durable_queue_store
from infrastructure.db import get_session_dependency, require_main_session_factory

from .cache import TransformationCache
from .service import TextTransformationService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_connectivity_monitor() -> ConnectivityMonitor:
    """Return the process-wide connectivity monitor shared by every queue."""

    return ConnectivityMonitor()


@lru_cache(maxsize=1)
def _transformation_service_singleton() -> TextTransformationService:
    return TextTransformationService()


def get_transformation_service() -> TextTransformationService:
    """Return a cached instance of :class:`TextTransformationService`."""

    return _transformation_service_singleton()


@lru_cache(maxsize=1)
def _transformation_cache_singleton() -> TransformationCache:
    logger.debug("Initialising transformation cache")
    return TransformationCache.build(
        require_main_session_factory(),
        get_transformation_service(),
        durable_store=get_durable_queue_store(),
        call_timeout=EXTERNAL_CALL_TIMEOUT_SECONDS * 2,
        is_online=get_connectivity_monitor().is_online,
    )


def get_transformation_cache() -> TransformationCache:
    return _transformation_cache_singleton()


async def get_chat_session() -> AsyncIterator[AsyncSession]:
    """Yield an AsyncSession connected to the main database."""

    dependency = get_session_dependency(require_main_session_factory())
    async for session in dependency():
        yield session


__all__ = [
    "get_chat_session",
    "get_connectivity_monitor",
    "get_transformation_cache",
    "get_transformation_service",
]
