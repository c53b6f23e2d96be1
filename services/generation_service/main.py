"""
Generation Service -- serves POST /generate for the studio.

Validates the request (prompt, type, temperature, top_k, top_p,
max_new_tokens), asks the configured LLM provider for a story or poem and
answers `{"result": "<text>"}`. Provider failures are reported as 502.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from shared.contracts.generation import GenerationRequest, GenerationResponse
from shared.llm_adapter import get_llm_provider
from shared.logging.logger import setup_logging
from shared.observability.metrics import backend_generations, metrics_response
from services.generation_service.composer import compose
from services.generation_service.config import GenerationServiceConfig

SERVICE_NAME = "generation_service"
cfg = GenerationServiceConfig.from_env()


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger = setup_logging(SERVICE_NAME, cfg.log_level)
    get_llm_provider(cfg.llm_provider)
    logger.info("Generation Service ready (provider=%s)", cfg.llm_provider)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Story Studio - Generation Service",
    version="0.1.0",
    description="Generates short stories and poems from a theme",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cfg.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(SERVICE_NAME)


@app.get("/health")
async def health():
    return {"status": "ok", "service": SERVICE_NAME, "provider": cfg.llm_provider}


@app.get("/metrics")
async def metrics():
    return metrics_response()


@app.post("/generate", response_model=GenerationResponse)
async def generate(request: GenerationRequest) -> GenerationResponse:
    content_type = request.content_type.value
    try:
        llm = get_llm_provider(cfg.llm_provider)
        text = await compose(llm, request)
    except Exception as exc:
        backend_generations.labels(content_type=content_type, outcome="error").inc()
        logger.exception("Generation failed for %s request", content_type)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    backend_generations.labels(content_type=content_type, outcome="ok").inc()
    return GenerationResponse(result=text)
