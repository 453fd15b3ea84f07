"""Handoff of compiled scripts to the external renderer."""

from __future__ import annotations

import abc
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import StoryflowConfig, load_config

logger = logging.getLogger(__name__)


class BaseRenderer(metaclass=abc.ABCMeta):
    """Accept a compiled script for rendering."""

    @abc.abstractmethod
    async def submit(self, workflow_id: str, script: Dict[str, Any]) -> Optional[str]:
        """Hand ``script`` off and return a reference to the render, if any."""
        raise NotImplementedError


class NullRenderer(BaseRenderer):
    """Accept every script without rendering anything."""

    async def submit(self, workflow_id: str, script: Dict[str, Any]) -> Optional[str]:
        logger.debug(f"Discarding script for workflow {workflow_id}")
        return None


class JsonFileRenderer(BaseRenderer):
    """Write each script to ``<directory>/<workflow_id>.json``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _write(self, workflow_id: str, script: Dict[str, Any]) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{workflow_id}.json"
        path.write_text(json.dumps(script, ensure_ascii=False, indent=2), encoding="utf-8")
        return path

    async def submit(self, workflow_id: str, script: Dict[str, Any]) -> Optional[str]:
        path = await asyncio.to_thread(self._write, workflow_id, script)
        logger.info(f"Wrote script for workflow {workflow_id} to {path}")
        return str(path)


def get_renderer(
    output_dir: Optional[str] = None, config: Optional[StoryflowConfig] = None
) -> BaseRenderer:
    """Return a file renderer when an output directory is configured."""
    config = config or load_config()
    output_dir = output_dir or config.render.output_dir
    if output_dir:
        return JsonFileRenderer(output_dir)
    return NullRenderer()
