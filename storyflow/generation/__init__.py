"""Content generator factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import StoryflowConfig, load_config
from .base import BaseContentGenerator, NullContentGenerator


def get_generator(
    backend: Optional[str] = None, config: Optional[StoryflowConfig] = None
) -> BaseContentGenerator:
    """Factory function to get the configured content generator."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("STORYFLOW_GENERATION")
        or config.generation.backend
    ).lower()

    if backend == "none":
        return NullContentGenerator()
    elif backend == "agent":
        from .agent import AgentContentGenerator

        return AgentContentGenerator(model=config.generation.model)
    elif backend == "http":
        from .http import HttpContentGenerator

        if not config.generation.endpoint:
            raise ValueError("HTTP generation backend requires generation.endpoint")
        return HttpContentGenerator(
            endpoint=config.generation.endpoint, timeout=config.generation.timeout
        )
    else:
        raise ValueError(f"Unsupported generation backend: {backend}")


__all__ = ["BaseContentGenerator", "NullContentGenerator", "get_generator"]
