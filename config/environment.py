"""Runtime environment and database flavour, resolved once at import."""

from __future__ import annotations

import os
from typing import Literal

from core.utils.env import get_node_env

DatabaseType = Literal["postgresql", "sqlite"]

_KNOWN_ENVIRONMENTS = ("development", "production", "test", "local")


def _environment() -> str:
    value = get_node_env()
    return value if value in _KNOWN_ENVIRONMENTS else "development"


def get_database_type() -> DatabaseType:
    """``DB_TYPE=sqlite`` selects SQLite (local runs, tests); anything else is Postgres."""

    return "sqlite" if os.getenv("DB_TYPE", "").strip().lower() == "sqlite" else "postgresql"


ENVIRONMENT = _environment()
DATABASE_TYPE: DatabaseType = get_database_type()
IS_SQLITE = DATABASE_TYPE == "sqlite"

__all__ = ["DATABASE_TYPE", "DatabaseType", "ENVIRONMENT", "IS_SQLITE", "get_database_type"]
