"""Abstract base class that all generation clients must implement."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.contracts.generation import GenerationRequest


class GenerationClient(ABC):
    """
    Contract for the outbound call to a generation endpoint.

    Every implementation MUST:
    - Return the generated text on success
    - Raise a GenerationError subclass (TransportError or
      MalformedResponseError) on any failure
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """Send one request and return the generated text."""

    async def aclose(self) -> None:
        """Release any held connections. No-op by default."""
