"""Retry queue defaults.

The retry interval doubles as the minimum age of a unit's last attempt before
the scan re-attempts it.
"""

from __future__ import annotations

import os

MAX_ATTEMPTS = int(os.getenv("REQUEST_QUEUE_MAX_ATTEMPTS", "4"))
RETRY_INTERVAL_SECONDS = float(os.getenv("REQUEST_QUEUE_RETRY_INTERVAL_SECONDS", "60"))

# Empty string disables the durable store; units then live in memory only.
QUEUE_STORE_PATH = os.getenv("REQUEST_QUEUE_STORE_PATH", "./storage/request_queue.sqlite3")

EXTERNAL_CALL_TIMEOUT_SECONDS = float(os.getenv("EXTERNAL_CALL_TIMEOUT_SECONDS", "30"))

# Larger recordings are retried from memory only and never written to the store
MAX_PERSISTED_AUDIO_BYTES = int(os.getenv("REQUEST_QUEUE_MAX_PERSISTED_AUDIO_BYTES", str(1024 * 1024)))

CONNECTIVITY_CHECK_HOST = os.getenv("CONNECTIVITY_CHECK_HOST", "1.1.1.1")
CONNECTIVITY_CHECK_PORT = int(os.getenv("CONNECTIVITY_CHECK_PORT", "443"))
CONNECTIVITY_CHECK_INTERVAL_SECONDS = float(os.getenv("CONNECTIVITY_CHECK_INTERVAL_SECONDS", "15"))

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
