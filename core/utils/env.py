"""Environment variable access shared by config, logging and auth."""

from __future__ import annotations

import os

from core.exceptions import ConfigurationError

__all__ = ["get_env", "get_node_env", "is_production", "is_truthy"]

_TRUTHY = {"1", "true", "yes", "on"}


def get_env(key: str, default: str | None = None, *, required: bool = False) -> str | None:
    value = os.getenv(key, default)
    if required and value is None:
        raise ConfigurationError(f"Required environment variable {key} not set", key=key)
    return value


def is_truthy(value: str | None) -> bool:
    """Interpret flag-style environment values such as ``1`` or ``yes``."""

    return (value or "").strip().lower() in _TRUTHY


def get_node_env() -> str:
    return (get_env("NODE_ENV", default="local") or "local").strip().lower()


def is_production() -> bool:
    return get_node_env() == "production"
