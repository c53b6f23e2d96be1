"""
Client factory -- builds the GenerationClient the studio talks to.

Supported kinds:

  http   HttpGenerationClient against `{base_url}/generate` (default)
  mock   MockGenerationClient, deterministic, no network
"""

from __future__ import annotations

import logging

from shared.generation_client.base import GenerationClient
from shared.generation_client.http_client import HttpGenerationClient
from shared.generation_client.mock_client import MockGenerationClient

logger = logging.getLogger(__name__)

_CLIENT_KINDS = ("http", "mock")


def build_generation_client(
    kind: str,
    base_url: str,
    timeout: float = 60.0,
) -> GenerationClient:
    name = kind.lower()
    if name == "http":
        client: GenerationClient = HttpGenerationClient(base_url, timeout=timeout)
    elif name == "mock":
        client = MockGenerationClient()
    else:
        raise ValueError(
            f"Unknown generation client '{kind}'. "
            f"Available: {', '.join(_CLIENT_KINDS)}"
        )

    logger.info(
        "Generation client initialized: %s (base_url=%s, timeout=%ss)",
        name,
        base_url if name == "http" else "-",
        timeout,
    )
    return client
