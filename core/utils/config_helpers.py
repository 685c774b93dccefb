"""Connection string builders for the chat database and the queue store."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote_plus


def build_postgres_url(
    user: str,
    password: str | None,
    host: str,
    database: str,
    *,
    port: int = 5432,
    schema: str | None = None,
) -> str:
    """Return an asyncpg URL; ``schema`` becomes the connection's search_path."""

    credentials = f"{user}:{quote_plus(password)}" if password else user
    address = host if ":" in host else f"{host}:{port}"
    url = f"postgresql+asyncpg://{credentials}@{address}/{database}"
    if schema:
        url += f"?options=-csearch_path%3D{schema}"
    return url


def build_sqlite_url(path: str | Path) -> str:
    """Return an aiosqlite URL for a local database file."""

    return f"sqlite+aiosqlite:///{Path(path).expanduser()}"
