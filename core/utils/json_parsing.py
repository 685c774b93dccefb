"""Lenient JSON parsing for language model replies."""

from __future__ import annotations

import json
from typing import Any


def try_parse_json(raw: str | None) -> Any | None:
    """Parse ``raw`` as JSON, falling back to the outermost ``{...}`` span.

    Models often wrap JSON in prose or markdown fences; the fallback slices
    from the first ``{`` to the last ``}``. Returns ``None`` when nothing
    parses.
    """

    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        start = raw.find("{")
        end = raw.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(raw[start : end + 1])
            except ValueError:
                return None
    return None


def try_parse_json_list(raw: str | None) -> list | None:
    """Like :func:`try_parse_json` for replies that should be a JSON array."""

    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        start = raw.find("[")
        end = raw.rfind("]")
        if start == -1 or end <= start:
            return None
        try:
            parsed = json.loads(raw[start : end + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, list) else None


def coerce_str(value: Any) -> str | None:
    """Return ``value`` stripped when it is a string, else ``None``."""

    if isinstance(value, str):
        return value.strip()
    return None


__all__ = ["coerce_str", "try_parse_json", "try_parse_json_list"]
