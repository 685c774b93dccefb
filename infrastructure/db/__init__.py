"""Database infrastructure helpers."""

from __future__ import annotations

from .base import Base, metadata, prepare_database
from .engines import (
    AsyncSessionFactory,
    SessionDependency,
    create_database_engine,
    dispose_all_engines,
    get_session_factory,
)
from .errors import is_unique_violation
from .sessions import (
    get_session_dependency,
    require_main_session_factory,
    reset_main_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "metadata",
    "prepare_database",
    "AsyncSessionFactory",
    "SessionDependency",
    "create_database_engine",
    "dispose_all_engines",
    "get_session_factory",
    "is_unique_violation",
    "session_scope",
    "get_session_dependency",
    "require_main_session_factory",
    "reset_main_session_factory",
]
