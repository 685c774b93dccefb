"""Map typed service errors onto HTTP status codes and error envelopes.

Error envelopes carry ``{"error": <kind>, "message": ..., "context": {...}}``
in ``data``; ``context`` is omitted when the exception has nothing to add.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple, Type

from fastapi.responses import JSONResponse
from starlette import status

from core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    PayloadTooLargeError,
    ProviderError,
    QueueExhaustedError,
    ServiceError,
    TooManyRequestsError,
    ValidationError,
)
from core.pydantic_schemas import error_response

# First match wins, so subclasses precede their bases
_ERROR_KINDS: List[Tuple[Type[ServiceError], str, int]] = [
    (PayloadTooLargeError, "validation_error", status.HTTP_413_CONTENT_TOO_LARGE),
    (ValidationError, "validation_error", status.HTTP_400_BAD_REQUEST),
    (NotFoundError, "not_found", status.HTTP_404_NOT_FOUND),
    (AuthorizationError, "forbidden", status.HTTP_403_FORBIDDEN),
    (TooManyRequestsError, "rate_limited", status.HTTP_429_TOO_MANY_REQUESTS),
    (ProviderError, "provider_error", status.HTTP_502_BAD_GATEWAY),
    (QueueExhaustedError, "queue_exhausted", status.HTTP_502_BAD_GATEWAY),
    (ConfigurationError, "configuration_error", status.HTTP_500_INTERNAL_SERVER_ERROR),
    (DatabaseError, "database_error", status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def _classify(exc: ServiceError) -> Tuple[str, int]:
    for error_type, kind, code in _ERROR_KINDS:
        if isinstance(exc, error_type):
            return kind, code
    return "service_error", status.HTTP_500_INTERNAL_SERVER_ERROR


def _context(exc: ServiceError) -> Dict[str, Any]:
    if isinstance(exc, ProviderError):
        values = {"provider": exc.provider, "status_code": exc.status_code, "retryable": exc.retryable}
    elif isinstance(exc, QueueExhaustedError):
        values = {"attempts": exc.attempts}
    elif isinstance(exc, TooManyRequestsError):
        values = {"retry_after": exc.retry_after}
    else:
        values = {
            "field": getattr(exc, "field", None),
            "limit": getattr(exc, "limit", None),
            "resource": getattr(exc, "resource", None),
            "key": getattr(exc, "key", None),
        }
    return {key: value for key, value in values.items() if value is not None}


def status_code_for(exc: ServiceError) -> int:
    return _classify(exc)[1]


def error_payload(exc: ServiceError) -> Dict[str, Any]:
    """Return the ``data`` block of an error envelope for ``exc``."""

    payload: Dict[str, Any] = {"error": _classify(exc)[0], "message": str(exc)}
    context = _context(exc)
    if context:
        payload["context"] = context
    return payload


def error_response_for(exc: ServiceError, message: str | None = None) -> JSONResponse:
    """Envelope response for ``exc``; ``message`` replaces the summary line only."""

    response = error_response(status_code_for(exc), message or str(exc), error_payload(exc))
    if isinstance(exc, TooManyRequestsError):
        response.headers["Retry-After"] = str(exc.retry_after)
    return response


__all__ = ["error_payload", "error_response_for", "status_code_for"]
