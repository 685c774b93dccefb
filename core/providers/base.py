"""Base provider interfaces for text transformation.

Services work against these contracts; concrete providers are resolved in
``core.providers.factory``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class BaseTextProvider(ABC):
    """Base interface for single-shot text generation providers."""

    name: str = "text"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        """Return the model's reply to ``prompt`` as plain text."""

    async def transform(self, text: str, instructions: str, **kwargs: Any) -> str:
        """Apply ``instructions`` to ``text`` and return the result."""

        prompt = f"{instructions}\n\nText: {text}"
        return await self.generate(prompt, **kwargs)


__all__ = ["BaseTextProvider"]
