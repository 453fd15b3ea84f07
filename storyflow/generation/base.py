"""Base content generator interface."""

from __future__ import annotations

import abc
from typing import Any, Dict, Optional

from ..models import Storyboard


class BaseContentGenerator(metaclass=abc.ABCMeta):
    """Produce a suggestion for the step after ``step`` from its accepted input."""

    @abc.abstractmethod
    async def generate(
        self, step: int, data: Dict[str, Any], storyboard: Optional[Storyboard] = None
    ) -> Dict[str, Any]:
        """Return the suggested input of step ``step + 1``.

        Implementations raise ``GenerationAdapterError`` on failure.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release held resources (no-op by default)."""
        pass


class NullContentGenerator(BaseContentGenerator):
    """Generation disabled: never suggests anything."""

    async def generate(
        self, step: int, data: Dict[str, Any], storyboard: Optional[Storyboard] = None
    ) -> Dict[str, Any]:
        return {}
