"""
Deterministic mock generation client for demos and tests.

Returns the same text for the same request, so the studio can run
end-to-end without a generation backend.
"""

from __future__ import annotations

import hashlib

from shared.contracts.generation import ContentType, GenerationRequest
from shared.generation_client.base import GenerationClient

_MOCK_PREFIX = "[MOCK] "


class MockGenerationClient(GenerationClient):

    def __init__(self) -> None:
        self._call_count = 0

    @property
    def call_count(self) -> int:
        return self._call_count

    async def generate(self, request: GenerationRequest) -> str:
        self._call_count += 1
        digest = hashlib.sha256(request.model_dump_json().encode()).hexdigest()

        if request.content_type is ContentType.POEM:
            body = (
                f"Of {request.prompt.strip()} I softly sing,\n"
                f"a verse that hash {digest[:8]} would bring."
            )
        else:
            body = (
                f"Once upon a time, {request.prompt.strip()}. "
                f"(story {digest[:8]}, temperature {request.temperature:g})"
            )
        return f"{_MOCK_PREFIX}{body}"
