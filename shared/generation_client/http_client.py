"""
HTTP generation client.

POSTs a GenerationRequest to `{base_url}/generate` and expects a JSON object
with a non-empty `result` string. Every failure is normalised into the
GenerationError taxonomy so callers never see raw httpx exceptions.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from shared.contracts.generation import GenerationRequest
from shared.generation_client.base import GenerationClient
from shared.generation_client.errors import MalformedResponseError, TransportError

logger = logging.getLogger(__name__)

GENERATE_PATH = "/generate"
INVALID_RESPONSE_DETAIL = "Invalid response format"


class HttpGenerationClient(GenerationClient):

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout
        )

    async def generate(self, request: GenerationRequest) -> str:
        try:
            resp = await self._client.post(GENERATE_PATH, json=request.to_payload())
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request timed out after {self._timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            logger.debug(
                "Generation endpoint returned %d: %s",
                resp.status_code,
                resp.text[:200],
            )
            raise TransportError(
                f"Request failed with status code {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(
                INVALID_RESPONSE_DETAIL, body_preview=resp.text[:200]
            ) from exc
        return extract_result(data, preview=resp.text[:200])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def extract_result(data: Any, preview: str = "") -> str:
    """Return `data["result"]` if it is a non-empty string, else raise."""
    result = data.get("result") if isinstance(data, dict) else None
    if not isinstance(result, str) or not result:
        raise MalformedResponseError(INVALID_RESPONSE_DETAIL, body_preview=preview)
    return result
