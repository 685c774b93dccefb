"""HTTP request logging middleware."""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Mapping

from fastapi import FastAPI, Request

_PAYLOAD_PREVIEW_LIMIT = 2048
_QUIET_PATHS = ("/health",)
_SENSITIVE_PAYLOAD_KEYS = {
    "access_token",
    "api_key",
    "authorization",
    "password",
    "refresh_token",
    "secret",
    "token",
}


def _format_client_address(client: tuple[str, int] | None) -> str:
    if not client:
        return "unknown"
    host, port = client
    return f"{host}:{port}" if port is not None else host


def _redact_payload(value: Any, *, depth: int = 6) -> Any:
    if depth <= 0:
        return "<max depth reached>"
    if isinstance(value, Mapping):
        return {
            key: "***" if str(key).lower() in _SENSITIVE_PAYLOAD_KEYS else _redact_payload(item, depth=depth - 1)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_redact_payload(item, depth=depth - 1) for item in value]
    return value


def render_payload_preview(body: bytes, content_type: str | None = None) -> str:
    """Return a redacted, length-limited preview of a request body for debug logs.

    Only JSON bodies are rendered; audio uploads and other binary payloads are
    summarised by size.
    """

    if not body:
        return "<empty>"
    if not content_type or "json" not in content_type:
        return f"<{content_type or 'unknown'} {len(body)} bytes>"
    try:
        rendered = json.dumps(_redact_payload(json.loads(body)), ensure_ascii=False, separators=(",", ":"))
    except ValueError:
        return f"<invalid json {len(body)} bytes>"
    if len(rendered) > _PAYLOAD_PREVIEW_LIMIT:
        return f"{rendered[:_PAYLOAD_PREVIEW_LIMIT]}... ({len(body)} bytes)"
    return rendered


def register_http_request_logging(app: FastAPI, *, logger_name: str = "core.http") -> None:
    """Attach middleware that logs every HTTP request with its status and latency."""

    if getattr(app.state, "_http_request_logging_installed", False):  # pragma: no cover - idempotence
        return

    logger = logging.getLogger(logger_name)

    @app.middleware("http")
    async def _log_request(request: Request, call_next):  # type: ignore[override]
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        client = request.client
        client_addr = _format_client_address((client.host, client.port) if client else None)
        if logger.isEnabledFor(logging.DEBUG):
            body = await request.body()
            logger.debug(
                "HTTP %s %s payload %s",
                request.method,
                path,
                render_payload_preview(body, request.headers.get("content-type")),
            )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "HTTP %s %s from %s -> %s (%.1f ms)",
            request.method,
            path,
            client_addr,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.state._http_request_logging_installed = True


__all__ = ["register_http_request_logging", "render_payload_preview"]
