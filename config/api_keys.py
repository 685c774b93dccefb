"""API key loading for external providers."""

from __future__ import annotations

import os
from typing import List

_MAX_NUMBERED_GEMINI_KEYS = 5


def _unique(values: List[str]) -> List[str]:
    keys: List[str] = []
    for value in values:
        if value and value not in keys:
            keys.append(value)
    return keys


def load_gemini_api_keys() -> List[str]:
    """Collect Gemini keys from GEMINI_API_KEYS, else GEMINI_API_KEY and GEMINI_API_KEY_1..5.

    Order is preserved and duplicates are dropped so key rotation visits each
    key once per round.
    """

    candidates: List[str] = []
    combined = os.getenv("GEMINI_API_KEYS", "")
    if combined:
        candidates.extend(part.strip() for part in combined.split(","))
        return _unique(candidates)

    candidates.append(os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", ""))
    for index in range(1, _MAX_NUMBERED_GEMINI_KEYS + 1):
        candidates.append(os.getenv(f"GEMINI_API_KEY_{index}", ""))

    return _unique(candidates)


GEMINI_API_KEYS = load_gemini_api_keys()

# Empty credentials leave the S3 client unconfigured
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "")

__all__ = [
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "GEMINI_API_KEYS",
    "load_gemini_api_keys",
]
