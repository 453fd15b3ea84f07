"""Content generation delegated to an external HTTP service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import GenerationAdapterError
from ..models import Storyboard
from .base import BaseContentGenerator

logger = logging.getLogger(__name__)


class HttpContentGenerator(BaseContentGenerator):
    """POST ``{step, input, storyboard}`` to ``{endpoint}/steps/{n}/generate``."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def generate(
        self, step: int, data: Dict[str, Any], storyboard: Optional[Storyboard] = None
    ) -> Dict[str, Any]:
        url = f"{self.endpoint}/steps/{step}/generate"
        body = {
            "step": step,
            "input": data,
            "storyboard": storyboard.to_wire() if storyboard is not None else None,
        }
        try:
            response = await self._get_client().post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise GenerationAdapterError(step, str(exc)) from exc
        except ValueError as exc:
            raise GenerationAdapterError(step, f"invalid JSON response: {exc}") from exc
        if not isinstance(payload, dict):
            raise GenerationAdapterError(step, "response body is not a JSON object")
        logger.debug(f"Generation service answered step {step} with {len(payload)} keys")
        return payload

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
