"""Retry classification for outbound calls."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from core.exceptions import ProviderError, ServiceError

RETRYABLE_STATUS_CODES = frozenset({408, 425, 429})


def is_retryable_status(status: Optional[int]) -> bool:
    """A missing status means the request never got a response (network failure)."""

    if status is None:
        return True
    return status >= 500 or status in RETRYABLE_STATUS_CODES


def is_retryable_error(exc: BaseException) -> bool:
    """Decide whether ``exc`` from an outbound call should be retried later.

    Order of precedence:
        1. Timeouts and transport failures are retryable.
        2. An explicit ``retryable`` attribute (see ``ProviderError``) wins.
        3. A ``status_code`` (or an httpx response) is classified by status.
        4. Non-provider service errors and malformed-data errors are terminal.
        5. Anything else is treated like a network failure and retried.
    """

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TransportError, ConnectionError)):
        return True

    retryable = getattr(exc, "retryable", None)
    if retryable is not None:
        return bool(retryable)

    status = getattr(exc, "status_code", None)
    if status is None and isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
    if isinstance(status, int):
        return is_retryable_status(status)

    if isinstance(exc, ServiceError) and not isinstance(exc, ProviderError):
        return False
    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return False
    return True


__all__ = ["RETRYABLE_STATUS_CODES", "is_retryable_error", "is_retryable_status"]
