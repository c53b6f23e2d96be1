"""
WebSocket connection pool for studio front-ends.

Every connected browser receives each session transition as a
`{"type": "session", "session": {...}}` message. All sends go through one
outbox drained by a single task, so every socket sees transitions in the
order they happened, and the newest message it receives is the current
session.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Callable

from fastapi import WebSocket

from shared.contracts.generation import GenerationSession

logger = logging.getLogger(__name__)

SessionGetter = Callable[[], GenerationSession]


def session_message(session: GenerationSession) -> str:
    return json.dumps(
        {"type": "session", "session": session.model_dump(mode="json", by_alias=True)}
    )


class ConnectionManager:
    def __init__(self) -> None:
        self._active: list[WebSocket] = []
        # (session, joining socket or None for a broadcast)
        self._outbox: asyncio.Queue[tuple[GenerationSession, WebSocket | None]] | None = None
        self._sender: asyncio.Task[None] | None = None

    def start(self) -> None:
        """Start the sender task on the running loop."""
        self._outbox = asyncio.Queue()
        self._sender = asyncio.get_running_loop().create_task(self._drain())

    async def aclose(self) -> None:
        if self._sender is not None:
            self._sender.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sender
        self._sender = None
        self._outbox = None
        self._active.clear()

    async def connect(self, websocket: WebSocket, current_session: SessionGetter) -> None:
        """
        Accept the socket and queue the current session for it.

        The session is read after the accept, and the socket only joins the
        broadcast list when that first message is sent, so it never misses
        or reorders a transition.
        """
        if self._outbox is None:
            raise RuntimeError("ConnectionManager is not running")
        await websocket.accept()
        self._outbox.put_nowait((current_session(), websocket))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._active:
            self._active.remove(websocket)
            logger.info(
                "WebSocket disconnected. Active connections: %d", len(self._active)
            )

    def publish(self, session: GenerationSession) -> None:
        """Queue a session for every connected client. Safe to call from sync code."""
        if self._outbox is not None:
            self._outbox.put_nowait((session, None))

    async def flush(self) -> None:
        """Wait until everything queued so far has been sent."""
        if self._outbox is not None:
            await self._outbox.join()

    @property
    def connection_count(self) -> int:
        return len(self._active)

    async def _drain(self) -> None:
        outbox = self._outbox
        while True:
            session, joining = await outbox.get()
            try:
                if joining is not None:
                    self._active.append(joining)
                    logger.info(
                        "WebSocket connected. Active connections: %d", len(self._active)
                    )
                    targets = [joining]
                else:
                    targets = list(self._active)
                await self._send(targets, session_message(session))
            finally:
                outbox.task_done()

    async def _send(self, targets: list[WebSocket], message: str) -> None:
        """Send to all targets. Drops clients whose send fails."""
        results = await asyncio.gather(
            *(connection.send_text(message) for connection in targets),
            return_exceptions=True,
        )
        for connection, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.debug("Dropping WebSocket after failed send: %s", result)
                self.disconnect(connection)
