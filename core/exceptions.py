"""Custom exception hierarchy for the chat personalization backend.

Exception Handling Flow:
    1. Service layer raises typed exception
    2. Route (or the FastAPI handler in main.py) catches it
    3. Handler converts it to the structured API envelope
    4. Client receives error envelope with code, message, and context

``ProviderError`` carries the retry classification consumed by the durable
request queue: ``retryable`` wins when set, otherwise ``status_code`` decides.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service layer errors."""


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class PayloadTooLargeError(ValidationError):
    """Raised when an input exceeds its configured size limit."""

    def __init__(self, message: str, field: str | None = None, limit: int | None = None):
        super().__init__(message, field)
        self.limit = limit


class NotFoundError(ServiceError):
    """Raised when a requested resource cannot be located."""

    def __init__(self, message: str, resource: str | None = None):
        self.message = message
        self.resource = resource
        super().__init__(self.message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated caller may not act on a resource."""

    def __init__(self, message: str, resource: str | None = None):
        self.message = message
        self.resource = resource
        super().__init__(self.message)


class ProviderError(ServiceError):
    """Raised when an external provider (AI API, HTTP service) fails."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
        *,
        status_code: int | None = None,
        retryable: bool | None = None,
    ):
        self.message = message
        self.provider = provider
        self.original_error = original_error
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(self.message)


class RateLimitError(ProviderError):
    """Raised when a provider rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        retry_after: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, provider, original_error=original_error, status_code=429, retryable=True)
        self.retry_after = retry_after


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, key: str | None = None):
        self.message = message
        self.key = key
        super().__init__(self.message)


class DatabaseError(ServiceError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: str | None = None):
        self.message = message
        self.operation = operation
        super().__init__(self.message)


class QueueExhaustedError(ServiceError):
    """Raised on a queued unit's future once every retry attempt failed."""

    def __init__(self, message: str, attempts: int, last_error: Exception | None = None):
        self.message = message
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(self.message)


class TooManyRequestsError(ServiceError):
    """Raised when a caller exceeds its request budget for a route."""

    def __init__(self, message: str, retry_after: int = 60):
        self.message = message
        self.retry_after = retry_after
        super().__init__(self.message)
