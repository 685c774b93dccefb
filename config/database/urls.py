"""Chat database URL.

``MAIN_DB_URL`` wins when set. Otherwise ``DB_TYPE=sqlite`` uses
``SQLITE_DB_PATH`` and everything else builds a Supabase Postgres URL from
``SUPABASE_DB_HOST`` / ``SUPABASE_DB_PASS`` (plus optional user, port, name
and ``MAIN_DB_SCHEMA``). An empty URL means "not configured".
"""

from __future__ import annotations

import os

from config.environment import IS_SQLITE
from core.utils.config_helpers import build_postgres_url, build_sqlite_url

SUPABASE_DB_HOST = os.getenv("SUPABASE_HOST") or os.getenv("SUPABASE_DB_HOST", "")
SUPABASE_DB_PASS = os.getenv("SUPABASE_DB_PASSWORD") or os.getenv("SUPABASE_DB_PASS", "")
SQLITE_DB_PATH = os.getenv("SQLITE_DB_PATH", "./storage/chat.sqlite3")


def resolve_main_db_url() -> str:
    override = os.getenv("MAIN_DB_URL")
    if override:
        return override
    if IS_SQLITE:
        return build_sqlite_url(SQLITE_DB_PATH)
    if not (SUPABASE_DB_HOST and SUPABASE_DB_PASS):
        return ""
    return build_postgres_url(
        os.getenv("SUPABASE_DB_USER", "postgres"),
        SUPABASE_DB_PASS,
        SUPABASE_DB_HOST,
        os.getenv("SUPABASE_DB_NAME", "postgres"),
        port=int(os.getenv("SUPABASE_DB_PORT", "5432")),
        schema=os.getenv("MAIN_DB_SCHEMA") or None,
    )


MAIN_DB_URL = resolve_main_db_url()

__all__ = ["MAIN_DB_URL", "SQLITE_DB_PATH", "resolve_main_db_url"]
