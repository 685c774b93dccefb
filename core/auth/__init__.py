"""Caller identity for the HTTP routes."""

from .jwt import (
    AuthContext,
    AuthenticationError,
    authenticate_bearer_token,
    create_auth_token,
    parse_authorization_header,
    require_auth_context,
)

__all__ = [
    "AuthContext",
    "AuthenticationError",
    "authenticate_bearer_token",
    "create_auth_token",
    "parse_authorization_header",
    "require_auth_context",
]
