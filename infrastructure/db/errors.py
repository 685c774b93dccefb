"""Classification helpers for database driver errors."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_MARKERS = ("duplicate key", "unique constraint", "uniqueviolation")


def _iter_causes(exc: BaseException):
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_unique_violation(exc: BaseException) -> bool:
    """Return True when ``exc`` (or anything in its cause chain) is a uniqueness conflict.

    Recognises asyncpg/psycopg SQLSTATE 23505, the PostgreSQL ``duplicate key``
    message and SQLite's ``UNIQUE constraint failed``.
    """

    for candidate in _iter_causes(exc):
        if isinstance(candidate, IntegrityError):
            orig = candidate.orig
            code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
            if code == UNIQUE_VIOLATION_SQLSTATE:
                return True
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "code", None)
        if code == UNIQUE_VIOLATION_SQLSTATE:
            return True
        message = str(candidate).lower()
        if any(marker in message for marker in _UNIQUE_MARKERS):
            return True
    return False


__all__ = ["UNIQUE_VIOLATION_SQLSTATE", "is_unique_violation"]
