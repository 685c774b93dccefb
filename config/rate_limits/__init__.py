"""Rate limiting configuration."""

from .defaults import (
    MAX_AUDIO_REQUEST_BYTES,
    MAX_TEXT_REQUEST_BYTES,
    RATE_LIMITS_ENABLED,
    RATE_LIMIT_PRESETS,
    RATE_LIMIT_WINDOW_SECONDS,
    STALE_BUCKET_SECONDS,
    STALE_BUCKET_SWEEP_THRESHOLD,
)

__all__ = [
    "MAX_AUDIO_REQUEST_BYTES",
    "MAX_TEXT_REQUEST_BYTES",
    "RATE_LIMITS_ENABLED",
    "RATE_LIMIT_PRESETS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "STALE_BUCKET_SECONDS",
    "STALE_BUCKET_SWEEP_THRESHOLD",
]
