"""
Contracts for the story/poem generation flow.

GenerationRequest is the wire payload sent to the generation backend's
/generate endpoint. GenerationSession is the immutable view of one
submission's lifecycle that the studio publishes to its front-end.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_NEW_TOKENS = 150

FAILURE_PREFIX = "Error: Failed to generate content."


class ContentType(str, Enum):
    STORY = "story"
    POEM = "poem"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class GenerationRequest(BaseModel):
    """
    Snapshot of the studio parameters at submission time.

    Frozen so that an in-flight request can never be altered by later edits.
    `content_type` travels as `type` on the wire.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str
    content_type: ContentType = Field(default=ContentType.STORY, alias="type")
    temperature: float = Field(default=0.8, ge=0.1, le=1.5)
    top_k: int = Field(default=50, ge=1, le=100)
    top_p: float = Field(default=0.95, ge=0.1, le=1.0)
    max_new_tokens: int = Field(default=MAX_NEW_TOKENS, ge=1, le=1024)

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        # sent as typed; only the blank check trims
        if not value.strip():
            raise ValueError("prompt must contain non-whitespace text")
        return value

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class GenerationResponse(BaseModel):
    result: str


class SessionStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class GenerationSession(BaseModel):
    """
    One submission's lifecycle as seen by the presentation layer.

    Invariant: result_text is set only when SUCCEEDED, error_message only
    when FAILED; IDLE and IN_FLIGHT carry neither.
    """

    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.IDLE
    result_text: str | None = None
    error_message: str | None = None
    request: GenerationRequest | None = None
    failure_kind: str | None = None

    @model_validator(mode="after")
    def check_outcome_fields(self) -> GenerationSession:
        has_result = self.result_text is not None
        has_error = self.error_message is not None
        if self.status is SessionStatus.SUCCEEDED:
            ok = has_result and not has_error
        elif self.status is SessionStatus.FAILED:
            ok = has_error and not has_result
        else:
            ok = not has_result and not has_error
        if not ok:
            raise ValueError(
                f"Session in status {self.status.value} has inconsistent "
                f"result/error fields"
            )
        if self.status is not SessionStatus.FAILED and self.failure_kind:
            raise ValueError("failure_kind is only valid on a failed session")
        return self

    @property
    def is_in_flight(self) -> bool:
        return self.status is SessionStatus.IN_FLIGHT

    @classmethod
    def idle(cls) -> GenerationSession:
        return cls()

    @classmethod
    def in_flight(cls, request: GenerationRequest) -> GenerationSession:
        return cls(status=SessionStatus.IN_FLIGHT, request=request)

    @classmethod
    def succeeded(cls, request: GenerationRequest, text: str) -> GenerationSession:
        return cls(status=SessionStatus.SUCCEEDED, request=request, result_text=text)

    @classmethod
    def failed(
        cls, request: GenerationRequest, detail: str, kind: str
    ) -> GenerationSession:
        return cls(
            status=SessionStatus.FAILED,
            request=request,
            error_message=failure_message(detail),
            failure_kind=kind,
        )


def failure_message(detail: str) -> str:
    """Render the user-facing failure text shown in place of a result."""
    return f"{FAILURE_PREFIX}\n\nDetails: {detail}"
