"""Data models for the LLM adapter layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LLMRequest(BaseModel):
    prompt: str
    system: str = ""
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    top_k: int | None = Field(default=None, ge=1)
    top_p: float | None = Field(default=None, gt=0.0, le=1.0)
    max_tokens: int = Field(default=150, ge=1)
    model: str = ""


class LLMResponse(BaseModel):
    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
