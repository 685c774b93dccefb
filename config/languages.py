"""Supported chat languages and lookup helpers."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

LANGUAGES: Tuple[Tuple[str, str], ...] = (
    ("ar", "Arabic"),
    ("de", "German"),
    ("en", "English"),
    ("es", "Spanish"),
    ("fr", "French"),
    ("hi", "Hindi"),
    ("it", "Italian"),
    ("ja", "Japanese"),
    ("ko", "Korean"),
    ("nl", "Dutch"),
    ("pl", "Polish"),
    ("pt", "Portuguese"),
    ("ru", "Russian"),
    ("sv", "Swedish"),
    ("tr", "Turkish"),
    ("zh", "Chinese"),
)

LANGUAGE_NAMES: Dict[str, str] = dict(LANGUAGES)
LANGUAGE_CODES_BY_NAME: Dict[str, str] = {name.lower(): code for code, name in LANGUAGES}

PROFICIENCY_LEVELS = ("beginner", "intermediate", "advanced")

LEVEL_DESCRIPTIONS: Dict[str, str] = {
    "beginner": (
        "A1-A2 level: Use very simple vocabulary, short sentences, basic grammar, common everyday "
        "words. Avoid idioms, complex structures, and advanced vocabulary."
    ),
    "intermediate": (
        "B1-B2 level: Use moderately complex vocabulary, varied sentence structures, some idiomatic "
        "expressions. Balance between simplicity and natural expression."
    ),
    "advanced": (
        "C1-C2 level: Use sophisticated vocabulary, complex sentence structures, idiomatic "
        "expressions, nuanced language. Maintain natural, fluent expression."
    ),
}


def get_language_name(code: Optional[str]) -> Optional[str]:
    """Return the display name for ``code``; unknown codes are returned unchanged."""

    if code is None:
        return None
    return LANGUAGE_NAMES.get(code, code)


def normalize_language(value: Optional[str]) -> Optional[str]:
    """Map a language code or English language name to a supported code."""

    if not value:
        return None
    normalized = value.strip().lower()
    if normalized in LANGUAGE_NAMES:
        return normalized
    return LANGUAGE_CODES_BY_NAME.get(normalized)


__all__ = [
    "LANGUAGES",
    "LANGUAGE_NAMES",
    "LEVEL_DESCRIPTIONS",
    "PROFICIENCY_LEVELS",
    "get_language_name",
    "normalize_language",
]
