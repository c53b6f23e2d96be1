"""
Studio Service -- the entry point for the story/poem front-end.

The front-end only renders state and forwards user actions; the studio owns
the parameters and the generation lifecycle.

1. GET   /api/parameters -- current values, valid ranges, placeholder text
2. PATCH /api/parameters -- edit values (numeric edits are clamped)
3. POST  /api/generate   -- submit; ignored while a generation is in flight
4. GET   /api/session    -- latest session (idle/in_flight/succeeded/failed)
5. WebSocket /ws         -- current session on connect, then every transition
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.contracts.generation import GenerationSession
from shared.generation_client import build_generation_client
from shared.logging.logger import setup_logging
from shared.observability.metrics import metrics_response
from services.studio_service.config import StudioConfig
from services.studio_service.controller import GenerationController
from services.studio_service.parameters import ParameterModel
from services.studio_service.ws_manager import ConnectionManager

SERVICE_NAME = "studio_service"
cfg: StudioConfig | None = None
controller: GenerationController | None = None
manager = ConnectionManager()


@asynccontextmanager
async def lifespan(application: FastAPI):
    global cfg, controller
    cfg = StudioConfig.from_env()
    logger = setup_logging(SERVICE_NAME, cfg.log_level)

    client = build_generation_client(
        cfg.client_kind, cfg.api_url, timeout=cfg.request_timeout_s
    )
    controller = GenerationController(
        ParameterModel(), client, request_timeout_s=cfg.request_timeout_s
    )
    manager.start()
    controller.add_listener(manager.publish)

    logger.info("Studio Service ready (generation endpoint %s)", cfg.api_url)
    yield

    logger.info("Shutting down")
    controller.remove_listener(manager.publish)
    await controller.aclose()
    await manager.aclose()


app = FastAPI(
    title="Story Studio - Studio Service",
    version="0.1.0",
    description="Parameter state and generation lifecycle for the story/poem front-end",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(SERVICE_NAME)


def _session_body(session: GenerationSession) -> dict[str, Any]:
    return session.model_dump(mode="json", by_alias=True)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "ws_connections": manager.connection_count,
        "session_status": controller.current_session().status.value,
    }


@app.get("/metrics")
async def metrics():
    return metrics_response()


@app.get("/api/parameters")
async def get_parameters():
    params = controller.parameters
    return {
        "values": params.values(),
        "ranges": params.ranges(),
        "placeholder": params.placeholder,
        "submittable": params.is_submittable(),
    }


@app.patch("/api/parameters")
async def update_parameters(request_body: dict[str, Any]):
    """
    Apply edits from the front-end. Accepts the wire names (`type`, `top_k`,
    ...). Out-of-range numbers are clamped; values of the wrong kind are a 400.
    """
    changes = dict(request_body)
    if "type" in changes:
        changes["content_type"] = changes.pop("type")
    try:
        controller.parameters.update(**changes)
    except (TypeError, ValueError) as exc:
        return JSONResponse(content={"error": str(exc)}, status_code=400)
    return await get_parameters()


@app.post("/api/generate")
async def generate():
    task = controller.start()
    body = {
        "accepted": task is not None,
        "session": _session_body(controller.current_session()),
    }
    if task is None:
        return body
    return JSONResponse(content=body, status_code=202)


@app.get("/api/session")
async def get_session():
    return _session_body(controller.current_session())


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket, controller.current_session)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception:
        logger.exception("WebSocket error")
        manager.disconnect(websocket)
