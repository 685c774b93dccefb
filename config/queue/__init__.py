"""Durable request queue configuration."""

from .defaults import (
    CONNECTIVITY_CHECK_HOST,
    CONNECTIVITY_CHECK_INTERVAL_SECONDS,
    CONNECTIVITY_CHECK_PORT,
    EXTERNAL_CALL_TIMEOUT_SECONDS,
    MAX_ATTEMPTS,
    MAX_PERSISTED_AUDIO_BYTES,
    QUEUE_STORE_PATH,
    RETRY_INTERVAL_SECONDS,
)

__all__ = [
    "CONNECTIVITY_CHECK_HOST",
    "CONNECTIVITY_CHECK_INTERVAL_SECONDS",
    "CONNECTIVITY_CHECK_PORT",
    "EXTERNAL_CALL_TIMEOUT_SECONDS",
    "MAX_ATTEMPTS",
    "MAX_PERSISTED_AUDIO_BYTES",
    "QUEUE_STORE_PATH",
    "RETRY_INTERVAL_SECONDS",
]
