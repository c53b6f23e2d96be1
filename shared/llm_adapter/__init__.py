from shared.llm_adapter.base import LLMProvider
from shared.llm_adapter.factory import get_llm_provider, reset_provider
from shared.llm_adapter.models import LLMRequest, LLMResponse
from shared.llm_adapter.mock_provider import MockProvider

__all__ = [
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "MockProvider",
    "get_llm_provider",
    "reset_provider",
]
