"""Database configuration exports."""

from . import defaults, urls
from .defaults import *  # noqa: F401,F403
from .urls import *  # noqa: F401,F403

__all__ = [
    *defaults.__all__,
    *urls.__all__,
]
