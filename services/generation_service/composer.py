"""
Turns a GenerationRequest into an LLM call and back into plain text.

Stories and poems get different instructions; the user's sampling
parameters are passed through unchanged.
"""

from __future__ import annotations

import logging

from shared.contracts.generation import ContentType, GenerationRequest
from shared.llm_adapter import LLMProvider, LLMRequest, LLMResponse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a creative writer. Reply with the requested piece only, "
    "without a title, preamble or closing remarks."
)

STORY_PROMPT = """Write a short story inspired by the following theme.
Keep it self-contained, with a clear beginning, middle and end.

Theme: {prompt}
"""

POEM_PROMPT = """Write a poem inspired by the following theme.
Use short lines and vivid imagery. Separate stanzas with a blank line.

Theme: {prompt}
"""

_TEMPLATES = {
    ContentType.STORY: STORY_PROMPT,
    ContentType.POEM: POEM_PROMPT,
}


def build_llm_request(request: GenerationRequest) -> LLMRequest:
    template = _TEMPLATES[request.content_type]
    return LLMRequest(
        prompt=template.format(prompt=request.prompt.strip()),
        system=SYSTEM_PROMPT,
        temperature=request.temperature,
        top_k=request.top_k,
        top_p=request.top_p,
        max_tokens=request.max_new_tokens,
    )


async def compose(llm: LLMProvider, request: GenerationRequest) -> str:
    """Generate a story or poem for `request`. Raises ValueError on empty output."""
    response: LLMResponse = await llm.generate(build_llm_request(request))
    text = response.content.strip()
    if not text:
        raise ValueError(f"Model {response.model} returned an empty completion")

    logger.info(
        "Composed %d chars of %s (%d completion tokens)",
        len(text),
        request.content_type.value,
        response.completion_tokens,
    )
    return text
