"""
OpenAI-compatible LLM provider.

Works with any API that speaks the OpenAI Chat Completions protocol:
  - OpenAI      (base_url=https://api.openai.com/v1)
  - Groq        (base_url=https://api.groq.com/openai/v1)
  - OpenRouter  (base_url=https://openrouter.ai/api/v1)
  - local       (vLLM / Ollama / LM Studio, via LLM_BASE_URL)

top_k is not part of the Chat Completions schema; it is sent in the request
body extras, which servers that don't know it ignore.
"""

from __future__ import annotations

import os
from typing import Any

from shared.llm_adapter.base import LLMProvider
from shared.llm_adapter.models import LLMRequest, LLMResponse

_BASE_URLS: dict[str, str] = {
    "openai":     "https://api.openai.com/v1",
    "groq":       "https://api.groq.com/openai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "local":      "http://localhost:11434/v1",
}

_DEFAULT_MODELS: dict[str, str] = {
    "openai":     "gpt-4o-mini",
    "groq":       "llama-3.3-70b-versatile",
    "openrouter": "meta-llama/llama-3.3-70b-instruct:free",
    "local":      "llama3.2",
}


class OpenAIProvider(LLMProvider):
    """
    OpenAI Chat Completions adapter.

    Reads from env:
      LLM_API_KEY   -- API key (also checked as OPENAI_API_KEY)
      LLM_BASE_URL  -- override the provider's base URL
      LLM_MODEL     -- override the default model for the provider
      LLM_REQUEST_TIMEOUT -- seconds, default 120
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        provider_name: str = "openai",
    ) -> None:
        self._provider_name = provider_name

        self._api_key = (
            api_key
            or os.environ.get("LLM_API_KEY", "")
            or os.environ.get("OPENAI_API_KEY", "")
        )
        # Local servers usually accept any key
        if not self._api_key and provider_name == "local":
            self._api_key = "local-placeholder-key"
        elif not self._api_key:
            raise ValueError(
                f"An API key is required for provider '{provider_name}'. "
                "Set LLM_API_KEY (or OPENAI_API_KEY) in your environment."
            )

        self._base_url = (
            base_url
            or os.environ.get("LLM_BASE_URL", "")
            or _BASE_URLS.get(provider_name, _BASE_URLS["openai"])
        )

        self._model = (
            model
            or os.environ.get("LLM_MODEL", "")
            or _DEFAULT_MODELS.get(provider_name, "gpt-4o-mini")
        )

        try:
            from openai import AsyncOpenAI
        except ImportError as exc:
            raise ImportError(
                "openai package is required. Install it with: pip install openai"
            ) from exc

        timeout = float(os.environ.get("LLM_REQUEST_TIMEOUT", "120"))
        self._client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=timeout,
        )

    async def generate(self, request: LLMRequest) -> LLMResponse:
        messages = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        sampling: dict[str, Any] = {}
        if request.top_p is not None:
            sampling["top_p"] = request.top_p
        if request.top_k is not None:
            sampling["extra_body"] = {"top_k": request.top_k}

        response = await self._client.chat.completions.create(
            model=request.model or self._model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            messages=messages,
            **sampling,
        )

        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            total_tokens=usage.total_tokens if usage else 0,
        )
