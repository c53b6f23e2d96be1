"""Failures raised by generation clients."""

from __future__ import annotations


class GenerationError(Exception):
    """Base class: the outbound generation call did not yield a result."""

    kind = "generation"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class TransportError(GenerationError):
    """The call could not be completed: network failure, timeout, non-2xx status."""

    kind = "transport"

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code


class MalformedResponseError(GenerationError):
    """The call completed but the body did not carry a usable `result`."""

    kind = "malformed_response"

    def __init__(self, detail: str, body_preview: str = "") -> None:
        super().__init__(detail)
        self.body_preview = body_preview
