"""Rate limiting and request size guards for the AI endpoints."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request
from jose import JWTError, jwt

from config import rate_limits as limits
from core.auth import parse_authorization_header
from core.exceptions import PayloadTooLargeError, TooManyRequestsError

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS_MESSAGE = "Too many requests. Please retry later."


@dataclass(slots=True)
class _Bucket:
    tokens: float
    refilled_at: float


class RateLimiter:
    """Token bucket per key: ``capacity`` requests refilled evenly over ``time_window``."""

    def __init__(
        self,
        capacity: int,
        time_window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.capacity = capacity
        self.time_window = time_window
        self._clock = clock
        self._buckets: Dict[str, _Bucket] = {}

    def acquire(self, key: str) -> int:
        """Take a token for ``key``.

        Returns ``0`` when the request is allowed, otherwise the number of
        whole seconds until a token is available again.
        """

        now = self._clock()
        self._sweep(now)

        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = _Bucket(tokens=float(self.capacity), refilled_at=now)
        elif self.time_window > 0:
            elapsed = max(0.0, now - bucket.refilled_at)
            bucket.tokens = min(float(self.capacity), bucket.tokens + elapsed * self.capacity / self.time_window)
            bucket.refilled_at = now

        if bucket.tokens >= 1:
            bucket.tokens -= 1
            return 0

        if self.capacity <= 0 or self.time_window <= 0:
            return max(1, math.ceil(self.time_window) or 60)
        return max(1, math.ceil((1 - bucket.tokens) * self.time_window / self.capacity))

    def _sweep(self, now: float) -> None:
        if len(self._buckets) < limits.STALE_BUCKET_SWEEP_THRESHOLD:
            return
        stale = [key for key, bucket in self._buckets.items() if now - bucket.refilled_at > limits.STALE_BUCKET_SECONDS]
        for key in stale:
            del self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)


_rate_limiters: Dict[Tuple[str, str], RateLimiter] = {}


def get_rate_limiter(preset: str, scope: str) -> RateLimiter:
    """Return the shared limiter for ``preset`` and caller ``scope`` (``ip`` or ``user``)."""

    key = (preset, scope)
    limiter = _rate_limiters.get(key)
    if limiter is None:
        limiter = RateLimiter(
            capacity=limits.RATE_LIMIT_PRESETS[preset][scope],
            time_window=limits.RATE_LIMIT_WINDOW_SECONDS,
        )
        _rate_limiters[key] = limiter
    return limiter


def reset_rate_limiters() -> None:
    _rate_limiters.clear()


def client_ip(request: Request) -> str:
    forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = (request.headers.get(header) or "").strip()
        if value:
            return value
    return request.client.host if request.client else "unknown"


def _caller_id(request: Request) -> Optional[str]:
    """``sub`` of the bearer token, unverified; it only keys the per-user bucket."""

    token = parse_authorization_header(request.headers.get("authorization"))
    if not token:
        return None
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None


class ApiGuard:
    """FastAPI dependency: body size limit first, then per-IP and per-user budgets."""

    def __init__(self, route_key: str, preset: str = "ai_text", max_body_bytes: int = limits.MAX_TEXT_REQUEST_BYTES) -> None:
        self.route_key = route_key
        self.preset = preset
        self.max_body_bytes = max_body_bytes

    async def __call__(self, request: Request) -> None:
        self._enforce_content_length(request)
        if not limits.RATE_LIMITS_ENABLED:
            return

        ip = client_ip(request)
        retry_after = get_rate_limiter(self.preset, "ip").acquire(f"{self.route_key}:{ip}")
        if not retry_after:
            user_id = _caller_id(request)
            if user_id:
                retry_after = get_rate_limiter(self.preset, "user").acquire(f"{self.route_key}:{user_id}")

        if retry_after:
            logger.warning("Rate limit exceeded on %s for %s (retry in %ss)", self.route_key, ip, retry_after)
            raise TooManyRequestsError(TOO_MANY_REQUESTS_MESSAGE, retry_after=retry_after)

    def _enforce_content_length(self, request: Request) -> None:
        try:
            length = int(request.headers.get("content-length") or 0)
        except ValueError:
            return
        if length > self.max_body_bytes:
            raise PayloadTooLargeError(
                f"Payload too large. Maximum request size is {self.max_body_bytes} bytes.",
                field="body",
                limit=self.max_body_bytes,
            )


__all__ = [
    "ApiGuard",
    "RateLimiter",
    "TOO_MANY_REQUESTS_MESSAGE",
    "client_ip",
    "get_rate_limiter",
    "reset_rate_limiters",
]
