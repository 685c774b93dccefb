"""Test configuration helpers."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator

import pytest
from jose import jwt

# Explicitly opt-in to the async plugins we rely on. Some execution environments
# disable plugin auto-discovery via ``PYTEST_DISABLE_PLUGIN_AUTOLOAD`` which
# prevents ``pytest-asyncio`` and AnyIO's plugin from being loaded even if the
# packages are installed.
pytest_plugins = ("anyio", "pytest_asyncio")

# Ensure the repository root is importable so that ``import core`` and the other
# absolute imports used throughout the codebase succeed from any working directory.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("MY_AUTH_TOKEN", "test-secret")
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("DB_TYPE", "sqlite")
# Queue tests opt into a durable store explicitly via tmp_path
os.environ.setdefault("REQUEST_QUEUE_STORE_PATH", "")

from tests.helpers import ChatFixture, seed_chat  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Default AnyIO backend used when tests do not override the fixture."""

    return "asyncio"


@pytest.fixture(autouse=True)
def reset_rate_limiters() -> Iterator[None]:
    """Start every test with empty request budgets."""

    from features.transformations.rate_limiter import reset_rate_limiters as _reset

    _reset()
    yield
    _reset()


@pytest.fixture(scope="session")
def auth_token_secret() -> str:
    """Return the JWT secret configured for tests."""

    return os.environ["MY_AUTH_TOKEN"]


@pytest.fixture()
def auth_token_factory(auth_token_secret: str) -> Callable[..., str]:
    """Factory producing signed JWTs for authenticated requests."""

    def _factory(
        *,
        user_id: str = "user-1",
        email: str = "user@example.com",
        expires_delta: timedelta | None = timedelta(hours=1),
        extra_claims: Dict[str, Any] | None = None,
    ) -> str:
        payload: Dict[str, Any] = {"sub": user_id, "email": email}
        if extra_claims:
            payload.update(extra_claims)
        if expires_delta is not None:
            payload["exp"] = datetime.now(timezone.utc) + expires_delta
        return jwt.encode(payload, auth_token_secret, algorithm="HS256")

    return _factory


@pytest.fixture()
async def session_factory(tmp_path: Path):
    """Session factory bound to a fresh SQLite database with the chat schema."""

    from core.utils.config_helpers import build_sqlite_url
    from infrastructure.db import create_database_engine, get_session_factory, prepare_database

    import features.chat.db_models  # noqa: F401  (registers the tables)

    engine = create_database_engine(build_sqlite_url(tmp_path / "chat.sqlite3"))
    await prepare_database(engine)
    try:
        yield get_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture()
async def chat(session_factory) -> ChatFixture:
    """A three-person conversation with a voice message sent by ``alice``."""

    return await seed_chat(session_factory)
