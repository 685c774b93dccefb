"""Initialise Gemini clients and rotate requests across the configured API keys."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from google import genai

from config.api_keys import GEMINI_API_KEYS
from config.queue import EXTERNAL_CALL_TIMEOUT_SECONDS
from config.text import KEY_ROTATION_BACKOFF_SECONDS, KEY_ROTATION_MAX_ATTEMPTS
from core.exceptions import ConfigurationError, ProviderError, RateLimitError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "gemini"

_NON_RETRYABLE_STATUSES = {400, 404}
_RETRYABLE_MESSAGE_MARKERS = (
    "rate",
    "overload",
    "timeout",
    "temporar",
    "unavailable",
    "network",
    "gateway",
    "429",
    "503",
)
_TERMINAL_MESSAGE_MARKERS = ("invalid argument", "bad request")


@lru_cache(maxsize=1)
def get_gemini_clients() -> List[Any]:
    """Return one ``genai.Client`` per configured API key."""

    return [genai.Client(api_key=key) for key in GEMINI_API_KEYS]


def _extract_status(exc: BaseException) -> Optional[int]:
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_gemini_error(exc: BaseException) -> ProviderError:
    """Wrap a Gemini SDK failure in a ``ProviderError`` with a retry verdict.

    401/403 count as retryable because the next key may be valid.
    """

    if isinstance(exc, ProviderError):
        return exc

    status = _extract_status(exc)
    message = str(exc) or exc.__class__.__name__
    original = exc if isinstance(exc, Exception) else None
    if status == 429:
        return RateLimitError(f"Gemini rate limit hit: {message}", provider=PROVIDER_NAME, original_error=original)

    if status in _NON_RETRYABLE_STATUSES:
        retryable = False
    elif status in (401, 403, 408) or (status is not None and status >= 500):
        retryable = True
    else:
        lowered = message.lower()
        if any(marker in lowered for marker in _TERMINAL_MESSAGE_MARKERS):
            retryable = False
        else:
            retryable = any(marker in lowered for marker in _RETRYABLE_MESSAGE_MARKERS)

    return ProviderError(
        f"Gemini request failed: {message}",
        provider=PROVIDER_NAME,
        original_error=original,
        status_code=status,
        retryable=retryable,
    )


class GeminiKeyRotator:
    """Round-robin Gemini calls over API keys with a short linear back-off.

    Each call tries at most ``min(max_attempts, len(clients))`` keys; every
    attempt is bounded by ``timeout`` and a timeout counts as retryable.
    """

    def __init__(
        self,
        clients: Optional[Sequence[Any]] = None,
        *,
        max_attempts: int = KEY_ROTATION_MAX_ATTEMPTS,
        backoff_seconds: float = KEY_ROTATION_BACKOFF_SECONDS,
        timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clients = list(clients) if clients is not None else get_gemini_clients()
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._timeout = timeout
        self._sleep = sleep
        self._next_index = 0

    @property
    def key_count(self) -> int:
        return len(self._clients)

    def _next_client(self) -> Any:
        client = self._clients[self._next_index % len(self._clients)]
        self._next_index = (self._next_index + 1) % len(self._clients)
        return client

    async def generate_content(self, *, model: str, contents: Any, config: Any = None) -> Any:
        if not self._clients:
            raise ConfigurationError("Gemini API keys are not configured", key="GEMINI_API_KEYS")

        attempts = min(self._max_attempts, len(self._clients))
        last_error: Optional[ProviderError] = None
        for attempt in range(attempts):
            client = self._next_client()
            try:
                return await asyncio.wait_for(
                    client.aio.models.generate_content(model=model, contents=contents, config=config),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as exc:
                last_error = ProviderError(
                    "Gemini request timed out",
                    provider=PROVIDER_NAME,
                    original_error=exc,
                    status_code=408,
                    retryable=True,
                )
            except Exception as exc:
                last_error = classify_gemini_error(exc)
                if not last_error.retryable:
                    logger.warning("Gemini request failed (attempt %d, terminal): %s", attempt + 1, exc)
                    raise last_error from exc

            logger.warning(
                "Gemini request failed (attempt %d/%d, retryable): %s", attempt + 1, attempts, last_error
            )
            if attempt < attempts - 1:
                await self._sleep(self._backoff_seconds * (attempt + 1))

        assert last_error is not None
        raise last_error


@lru_cache(maxsize=1)
def get_gemini_rotator() -> GeminiKeyRotator:
    return GeminiKeyRotator()


__all__ = [
    "GeminiKeyRotator",
    "classify_gemini_error",
    "get_gemini_clients",
    "get_gemini_rotator",
]
