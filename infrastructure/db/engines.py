"""Database engine management utilities.

Supports PostgreSQL (asyncpg) for deployed environments and SQLite
(aiosqlite) for local development and tests. The driver is detected from the
URL prefix.
"""

from __future__ import annotations

import logging
import re
from typing import AsyncIterator, Callable, Optional
from urllib.parse import parse_qs, unquote, urlparse, urlunparse

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.database.defaults import COMMAND_TIMEOUT
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AsyncSessionFactory = async_sessionmaker[AsyncSession]
SessionDependency = Callable[[], AsyncIterator[AsyncSession]]

# Lazy-loaded engine - initialized to None
main_engine: Optional[AsyncEngine] = None


def _extract_search_path_from_url(url: str) -> tuple[str, str | None]:
    """Extract search_path from PostgreSQL URL options and return clean URL.

    asyncpg doesn't accept 'options' as a URL parameter - it must be passed
    via connect_args['server_settings']['search_path'].
    """
    parsed = urlparse(url)
    if not parsed.query:
        return url, None

    query_params = parse_qs(parsed.query)
    options = query_params.get("options", [])

    schema = None
    if options:
        options_str = unquote(options[0])
        match = re.search(r"-csearch_path[=](\w+)", options_str)
        if match:
            schema = match.group(1)

    remaining_params = {k: v for k, v in query_params.items() if k != "options"}
    new_query = "&".join(f"{k}={v[0]}" for k, v in remaining_params.items())

    clean_url = urlunparse(parsed._replace(query=new_query))
    return clean_url, schema


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_recycle: int = 900,
    url_key: str = "DB_URL",
) -> AsyncEngine:
    """Create an async SQLAlchemy engine for PostgreSQL or SQLite."""

    if not url:
        raise ConfigurationError("Database connection URL is required", key=url_key)

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=echo,
            connect_args={"timeout": 30},
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    clean_url, schema = _extract_search_path_from_url(url)
    connect_args: dict = {"command_timeout": COMMAND_TIMEOUT}
    if schema:
        connect_args["server_settings"] = {"search_path": schema}
        logger.debug("PostgreSQL search_path set to: %s", schema)

    return create_async_engine(
        clean_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        connect_args=connect_args,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Return an ``async_sessionmaker`` bound to ``engine``."""

    return async_sessionmaker(engine, expire_on_commit=False)


async def dispose_all_engines() -> None:
    """Dispose the initialized main engine.

    Useful for scripts/tests to avoid event-loop shutdown warnings.
    """
    global main_engine

    if main_engine is None:
        return
    try:
        await main_engine.dispose()
    except Exception:  # pragma: no cover - best-effort cleanup
        logger.warning("Failed to dispose main engine", exc_info=True)
    finally:
        main_engine = None


__all__ = [
    "AsyncSessionFactory",
    "SessionDependency",
    "create_database_engine",
    "dispose_all_engines",
    "get_session_factory",
    "main_engine",
]
