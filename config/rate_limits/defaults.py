"""Request budgets and body size limits for the AI endpoints."""

from __future__ import annotations

import os
from typing import Dict

from core.utils.env import is_truthy

RATE_LIMITS_ENABLED = is_truthy(os.getenv("API_RATE_LIMITS_ENABLED", "true"))
RATE_LIMIT_WINDOW_SECONDS = float(os.getenv("API_RATE_LIMIT_WINDOW_SECONDS", "60"))

# Requests per window, keyed by preset then by caller scope
RATE_LIMIT_PRESETS: Dict[str, Dict[str, int]] = {
    "ai_text": {"ip": 20, "user": 40},
    "ai_transcribe": {"ip": 6, "user": 12},
}

# Idle buckets are only swept once this many keys have accumulated
STALE_BUCKET_SECONDS = 60 * 60
STALE_BUCKET_SWEEP_THRESHOLD = 2000

MAX_TEXT_REQUEST_BYTES = 32 * 1024
MAX_AUDIO_REQUEST_BYTES = 8 * 1024 * 1024

__all__ = [
    "MAX_AUDIO_REQUEST_BYTES",
    "MAX_TEXT_REQUEST_BYTES",
    "RATE_LIMITS_ENABLED",
    "RATE_LIMIT_PRESETS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "STALE_BUCKET_SECONDS",
    "STALE_BUCKET_SWEEP_THRESHOLD",
]
