"""Session management utilities."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import ConfigurationError, DatabaseError
from infrastructure.db import engines

logger = logging.getLogger(__name__)

# Lazy-loaded session factory - initialized to None
main_session_factory: Optional[async_sessionmaker] = None


@asynccontextmanager
async def session_scope(factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise DatabaseError("Database operation failed", operation="transaction") from exc
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def get_session_dependency(factory: async_sessionmaker) -> Callable[[], AsyncIterator[AsyncSession]]:
    """Return a FastAPI dependency that yields a database session per request."""

    async def _get_session() -> AsyncIterator[AsyncSession]:
        async with session_scope(factory) as session:
            yield session

    return _get_session


def require_main_session_factory() -> async_sessionmaker:
    """Return the main chat session factory or raise a configuration error."""
    global main_session_factory

    if main_session_factory is None:
        from config.database.defaults import ECHO, MAX_OVERFLOW, POOL_RECYCLE, POOL_SIZE
        from config.database.urls import MAIN_DB_URL

        if not MAIN_DB_URL:
            raise ConfigurationError(
                "MAIN_DB_URL is not configured; set it before requesting sessions",
                key="MAIN_DB_URL",
            )

        engine = engines.create_database_engine(
            MAIN_DB_URL,
            echo=ECHO,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_recycle=POOL_RECYCLE,
            url_key="MAIN_DB_URL",
        )
        engines.main_engine = engine
        main_session_factory = engines.get_session_factory(engine)

    return main_session_factory


def reset_main_session_factory() -> None:
    """Forget the cached factory so the next request rebuilds it."""
    global main_session_factory
    main_session_factory = None


__all__ = [
    "get_session_dependency",
    "main_session_factory",
    "require_main_session_factory",
    "reset_main_session_factory",
    "session_scope",
]
