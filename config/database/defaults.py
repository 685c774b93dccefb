"""Engine and pool settings for the chat database."""

from __future__ import annotations

import os

from core.utils.env import is_truthy

POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "900"))
# asyncpg only; SQLite ignores it
COMMAND_TIMEOUT = int(os.getenv("DB_COMMAND_TIMEOUT", "10"))
ECHO = is_truthy(os.getenv("DB_ECHO"))
# Create missing tables on start-up (local runs against SQLite)
AUTO_CREATE_TABLES = is_truthy(os.getenv("AUTO_CREATE_TABLES"))

__all__ = ["AUTO_CREATE_TABLES", "COMMAND_TIMEOUT", "ECHO", "MAX_OVERFLOW", "POOL_RECYCLE", "POOL_SIZE"]
