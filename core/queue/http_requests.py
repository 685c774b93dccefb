"""JSON POST requests delivered through the durable request queue."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

from config.queue import EXTERNAL_CALL_TIMEOUT_SECONDS
from core.exceptions import ProviderError
from core.queue.engine import DurableRequestQueue
from core.queue.models import Durability, RecoveredResultHandler
from core.queue.retry import is_retryable_status
from core.queue.store import ResilientQueueStore, SqlQueueStore

logger = logging.getLogger(__name__)

PROVIDER_NAME = "http"


@dataclass(slots=True)
class JsonRequest:
    """A JSON body to POST to ``url``.

    ``context`` holds caller metadata that must survive a restart alongside
    the request (for example the cache key the response belongs to).
    """

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)


class JsonRequestCodec:
    kind = "json_request"

    def encode(self, payload: JsonRequest) -> bytes:
        return json.dumps(asdict(payload), ensure_ascii=False).encode("utf-8")

    def decode(self, data: bytes) -> JsonRequest:
        raw = json.loads(data.decode("utf-8"))
        return JsonRequest(
            url=raw["url"],
            body=raw.get("body") or {},
            headers=raw.get("headers") or {},
            context=raw.get("context") or {},
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(data, Mapping):
        for key in ("error", "message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, Mapping) and isinstance(value.get("message"), str):
                return value["message"]
    return f"HTTP {response.status_code}"


def unwrap_envelope(data: Any) -> Any:
    """Return ``data['data']`` for API envelope responses, else ``data`` unchanged."""

    if isinstance(data, Mapping) and {"code", "success", "data"} <= set(data.keys()):
        return data["data"]
    return data


class JsonRequestExecutor:
    """POST a ``JsonRequest`` and classify failures for the queue."""

    def __init__(
        self,
        *,
        timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
        default_headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._default_headers = dict(default_headers or {})
        self._transport = transport

    async def __call__(self, request: JsonRequest) -> Any:
        headers = {"Content-Type": "application/json", **self._default_headers, **request.headers}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(request.url, json=request.body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderError(
                f"Request to {request.url} timed out",
                provider=PROVIDER_NAME,
                original_error=exc,
                retryable=True,
            ) from exc
        except httpx.RequestError as exc:
            raise ProviderError(
                f"Network error calling {request.url}: {exc}",
                provider=PROVIDER_NAME,
                original_error=exc,
                retryable=True,
            ) from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.debug("POST %s failed with %s: %s", request.url, response.status_code, message)
            raise ProviderError(
                message,
                provider=PROVIDER_NAME,
                status_code=response.status_code,
                retryable=is_retryable_status(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                "Invalid JSON response",
                provider=PROVIDER_NAME,
                original_error=exc,
                status_code=response.status_code,
                retryable=False,
            ) from exc
        return unwrap_envelope(data)


def build_json_request_queue(
    *,
    name: str = "json-requests",
    executor: Optional[JsonRequestExecutor] = None,
    durable_store: Optional[SqlQueueStore] = None,
    on_recovered_result: Optional[RecoveredResultHandler] = None,
    **queue_kwargs: Any,
) -> DurableRequestQueue[JsonRequest, Any]:
    codec = JsonRequestCodec()
    return DurableRequestQueue(
        name,
        executor or JsonRequestExecutor(),
        codec=codec,
        store=ResilientQueueStore(name, codec, durable_store),
        on_recovered_result=on_recovered_result,
        **queue_kwargs,
    )


async def post_json_with_retry(
    queue: DurableRequestQueue[JsonRequest, Any],
    url: str,
    body: Dict[str, Any],
    *,
    headers: Optional[Dict[str, str]] = None,
    context: Optional[Dict[str, Any]] = None,
    source: Optional[str] = None,
    persist: bool = True,
    dedupe_key: Optional[str] = None,
) -> Any:
    """POST ``body`` to ``url`` and wait for the (possibly retried) response."""

    request = JsonRequest(url=url, body=body, headers=dict(headers or {}), context=dict(context or {}))
    return await queue.run(
        request,
        durability=Durability.PERSISTENT if persist else Durability.EPHEMERAL,
        source=source,
        dedupe_key=dedupe_key,
    )


__all__ = [
    "JsonRequest",
    "JsonRequestCodec",
    "JsonRequestExecutor",
    "build_json_request_queue",
    "post_json_with_retry",
    "unwrap_envelope",
]
