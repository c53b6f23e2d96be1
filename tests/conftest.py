import json

import httpx
import pytest

from services.studio_service.parameters import ParameterModel
from shared.generation_client import HttpGenerationClient
from shared.llm_adapter import reset_provider

BASE_URL = "http://generation.test"


class RecordingBackend:
    """MockTransport handler that records every JSON body it receives."""

    def __init__(self, responder):
        self._responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        return self._responder(request)


@pytest.fixture(autouse=True)
def _fresh_llm_provider():
    reset_provider()
    yield
    reset_provider()


@pytest.fixture
def parameters():
    """Default parameters with the prompt used throughout the docs."""
    return ParameterModel(prompt="A rainy day in Tokyo")


@pytest.fixture
def http_backend():
    """
    Factory: http_backend(responder) -> (HttpGenerationClient, RecordingBackend).

    `responder` receives the httpx.Request and returns an httpx.Response
    or raises an httpx exception.
    """

    def _make(responder):
        backend = RecordingBackend(responder)
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(backend), base_url=BASE_URL
        )
        return HttpGenerationClient(BASE_URL, timeout=5.0, http_client=http_client), backend

    return _make
