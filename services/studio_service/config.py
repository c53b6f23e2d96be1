from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StudioConfig:
    api_url: str
    client_kind: str
    request_timeout_s: float
    log_level: str

    @classmethod
    def from_env(cls) -> StudioConfig:
        return cls(
            api_url=os.environ.get("STORY_API_URL", "http://localhost:8000"),
            client_kind=os.environ.get("STORY_CLIENT", "http"),
            request_timeout_s=float(os.environ.get("STORY_REQUEST_TIMEOUT", "60") or 60),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
