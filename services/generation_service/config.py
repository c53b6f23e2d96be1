from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationServiceConfig:
    llm_provider: str
    log_level: str
    cors_origins: tuple[str, ...]

    @classmethod
    def from_env(cls) -> GenerationServiceConfig:
        origins = os.environ.get("CORS_ORIGINS", "*")
        return cls(
            llm_provider=os.environ.get("LLM_PROVIDER", "mock"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )
