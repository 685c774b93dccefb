"""Bearer-token authentication for chat users.

Clients send their Supabase access token (HS256). The chat user id is the
``sub`` claim; tokens minted by older clients carry it as ``id`` instead.
``create_auth_token`` mints compatible tokens for scripts and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Annotated, Any, Dict, TypedDict

from fastapi import Header
from jose import ExpiredSignatureError, JWTError, jwt
from starlette import status

from core.utils.env import get_env

ALGORITHM = "HS256"


class AuthContext(TypedDict, total=False):
    user_id: str
    email: str | None
    token: str
    payload: Dict[str, Any]


@dataclass(slots=True)
class AuthenticationError(Exception):
    """Rejected credentials; ``reason`` is a stable machine-readable code."""

    message: str
    reason: str
    code: int = status.HTTP_401_UNAUTHORIZED

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class _TokenSettings:
    secret: str
    audience: str | None


@lru_cache(maxsize=1)
def _settings() -> _TokenSettings:
    secret = get_env("SUPABASE_JWT_SECRET") or get_env("MY_AUTH_TOKEN")
    if not secret:
        raise AuthenticationError("Authentication secret is not configured", reason="configuration")
    return _TokenSettings(secret=secret, audience=get_env("JWT_AUDIENCE") or None)


def create_auth_token(
    user_id: str,
    email: str | None = None,
    expires_delta: timedelta = timedelta(days=90),
) -> str:
    settings = _settings()
    claims: Dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    if settings.audience:
        claims["aud"] = settings.audience
    return jwt.encode(claims, settings.secret, algorithm=ALGORITHM)


def parse_authorization_header(value: str | None) -> str | None:
    """Return the token from ``Bearer <token>`` or a bare ``<token>``."""

    parts = (value or "").split()
    if not parts:
        return None
    if parts[0].lower() == "bearer":
        return parts[1] if len(parts) == 2 else None
    return parts[0] if len(parts) == 1 else None


def _decode(token: str) -> Dict[str, Any]:
    settings = _settings()
    try:
        return jwt.decode(
            token,
            settings.secret,
            algorithms=[ALGORITHM],
            audience=settings.audience,
            options={"verify_aud": settings.audience is not None},
        )
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Authentication token has expired", reason="token_expired") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid authentication token", reason="token_invalid") from exc


def authenticate_bearer_token(*, authorization: str | None = None) -> AuthContext:
    token = parse_authorization_header(authorization)
    if not token:
        raise AuthenticationError("Missing authentication token", reason="token_missing")

    claims = _decode(token)
    user_id = str(claims.get("sub") or claims.get("id") or "").strip()
    if not user_id:
        raise AuthenticationError("Authentication token missing user id", reason="token_invalid")

    return {
        "user_id": user_id,
        "email": claims.get("email"),
        "token": token,
        "payload": claims,
    }


def require_auth_context(
    authorization: Annotated[str | None, Header(alias="Authorization")] = None,
) -> AuthContext:
    """FastAPI dependency: the caller's chat identity, or a 401."""

    return authenticate_bearer_token(authorization=authorization)


__all__ = [
    "AuthContext",
    "AuthenticationError",
    "authenticate_bearer_token",
    "create_auth_token",
    "parse_authorization_header",
    "require_auth_context",
]
