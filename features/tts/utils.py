"""Voice selection and speech rate helpers shared by every TTS caller."""

from __future__ import annotations

import math
from typing import Any, Optional

from config.tts import DEFAULT_VOICE, MAX_RATE_PERCENT, VOICES_BY_LANGUAGE


def _normalize_locale(value: str) -> str:
    return value.strip().lower().replace("_", "-")


def pick_voice(language: Optional[str], requested: Optional[str] = None) -> str:
    """Return the explicit voice, else the best voice for ``language``.

    Lookup order: exact locale (``pt-br``), base language (``pt``), then the
    default English voice.
    """

    if requested and requested.strip():
        return requested.strip()

    if language and language.strip():
        normalized = _normalize_locale(language)
        voice = VOICES_BY_LANGUAGE.get(normalized) or VOICES_BY_LANGUAGE.get(normalized.split("-")[0])
        if voice:
            return voice

    return DEFAULT_VOICE


def normalize_rate(value: Any) -> str:
    """Clamp a percentage speech rate to ±50 and format it as ``+N%``/``-N%``."""

    numeric = 0.0
    if isinstance(value, bool):
        numeric = 0.0
    elif isinstance(value, (int, float)):
        numeric = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            numeric = float(value.strip())
        except ValueError:
            numeric = 0.0
    if not math.isfinite(numeric):
        numeric = 0.0

    # Half-up rounding; Python's round() would send 2.5 to 2
    clamped = max(-MAX_RATE_PERCENT, min(MAX_RATE_PERCENT, math.floor(numeric + 0.5)))
    return f"+{clamped}%" if clamped >= 0 else f"{clamped}%"


__all__ = ["normalize_rate", "pick_voice"]
