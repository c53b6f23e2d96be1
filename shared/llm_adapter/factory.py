"""
Provider factory -- single entry point for the generation backend.

Reads LLM_PROVIDER from env (default: 'mock') and returns a singleton
provider for the chosen backend.

Supported providers:

  mock        Built-in deterministic mock, no API key needed (default)
  openai      OpenAI API  -- needs OPENAI_API_KEY or LLM_API_KEY
  groq        Groq API    -- needs LLM_API_KEY
  openrouter  OpenRouter  -- needs LLM_API_KEY
  local       Any OpenAI-compatible local server (no key required)

Model can be overridden globally with the LLM_MODEL env var.
"""

from __future__ import annotations

import logging
import os

from shared.llm_adapter.base import LLMProvider
from shared.llm_adapter.mock_provider import MockProvider

logger = logging.getLogger(__name__)

_OPENAI_COMPATIBLE = {"openai", "groq", "openrouter", "local"}

_PROVIDERS: dict[str, type] = {
    "mock": MockProvider,
}

_instance: LLMProvider | None = None


def _register_openai_compatible(name: str) -> None:
    """Lazy-register any OpenAI-compatible provider."""
    from shared.llm_adapter.openai_provider import OpenAIProvider

    def _factory() -> OpenAIProvider:
        return OpenAIProvider(provider_name=name)

    _PROVIDERS[name] = _factory


def get_llm_provider(provider_name: str | None = None) -> LLMProvider:
    """
    Return a singleton provider for the configured backend.

    Args:
        provider_name: Override for LLM_PROVIDER env var.
    """
    global _instance
    if _instance is not None:
        return _instance

    name = (provider_name or os.environ.get("LLM_PROVIDER", "mock")).lower()

    if name in _OPENAI_COMPATIBLE and name not in _PROVIDERS:
        _register_openai_compatible(name)

    provider_cls = _PROVIDERS.get(name)
    if provider_cls is None:
        raise ValueError(
            f"Unknown LLM provider '{name}'. "
            f"Available: mock, openai, groq, openrouter, local"
        )

    _instance = provider_cls()
    logger.info(
        "LLM provider initialized: %s (model=%s)",
        name,
        os.environ.get("LLM_MODEL", "provider-default"),
    )
    return _instance


def reset_provider() -> None:
    """Reset the singleton (for testing)."""
    global _instance
    _instance = None
