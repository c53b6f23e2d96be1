from shared.generation_client.base import GenerationClient
from shared.generation_client.errors import (
    GenerationError,
    MalformedResponseError,
    TransportError,
)
from shared.generation_client.factory import build_generation_client
from shared.generation_client.http_client import HttpGenerationClient
from shared.generation_client.mock_client import MockGenerationClient

__all__ = [
    "GenerationClient",
    "GenerationError",
    "HttpGenerationClient",
    "MalformedResponseError",
    "MockGenerationClient",
    "TransportError",
    "build_generation_client",
]
