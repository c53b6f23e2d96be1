"""
Generation controller -- owns the request lifecycle of the studio.

State machine driven over GenerationSession:

  IDLE / SUCCEEDED / FAILED --submit() [submittable]--> IN_FLIGHT
  IN_FLIGHT --result present--> SUCCEEDED
  IN_FLIGHT --call error or malformed body--> FAILED

Only one call is ever outstanding: the in-flight check and the move to
IN_FLIGHT happen in one synchronous step (`begin`), before the single
suspension point. A second submit while in flight is ignored, not queued.
Failures of the outbound call never escape; they become a FAILED session
carrying a displayable message.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable

from shared.contracts.generation import GenerationRequest, GenerationSession
from shared.generation_client import (
    GenerationClient,
    GenerationError,
    MalformedResponseError,
    TransportError,
)
from shared.generation_client.http_client import INVALID_RESPONSE_DETAIL
from shared.logging.logger import extra
from shared.observability.metrics import (
    generation_latency,
    generation_results,
    generation_submissions,
)
from services.studio_service.parameters import ParameterModel

logger = logging.getLogger(__name__)

SessionListener = Callable[[GenerationSession], None]


class GenerationController:

    def __init__(
        self,
        parameters: ParameterModel,
        client: GenerationClient,
        request_timeout_s: float | None = 60.0,
    ) -> None:
        self._parameters = parameters
        self._client = client
        self._timeout = request_timeout_s
        self._session = GenerationSession.idle()
        self._submission_id = 0
        self._listeners: list[SessionListener] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def parameters(self) -> ParameterModel:
        return self._parameters

    def current_session(self) -> GenerationSession:
        return self._session

    def add_listener(self, listener: SessionListener) -> None:
        """Call `listener` with every new session after each transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def begin(self) -> GenerationRequest | None:
        """
        Accept a submission if allowed and move the session to IN_FLIGHT.

        Returns the request snapshot to send, or None when the submission
        is skipped (already in flight, or blank prompt). Must not await.
        """
        if self._session.is_in_flight:
            self._skip("in_flight")
            return None
        if not self._parameters.is_submittable():
            self._skip("not_submittable")
            return None

        request = self._parameters.snapshot()
        self._submission_id += 1
        self._publish(GenerationSession.in_flight(request))
        generation_submissions.labels(outcome="accepted").inc()
        logger.info(
            "Generation #%d accepted (%s, %d prompt chars)",
            self._submission_id,
            request.content_type.value,
            len(request.prompt),
            extra=extra(
                temperature=request.temperature,
                top_k=request.top_k,
                top_p=request.top_p,
            ),
        )
        return request

    async def submit(self) -> bool:
        """Submit and wait for settlement. Returns False if the submit was skipped."""
        request = self.begin()
        if request is None:
            return False
        await self._settle(request, self._submission_id)
        return True

    def start(self) -> asyncio.Task[None] | None:
        """Submit and settle in a background task on the running loop."""
        loop = asyncio.get_running_loop()
        request = self.begin()
        if request is None:
            return None
        self._task = loop.create_task(self._settle(request, self._submission_id))
        return self._task

    async def aclose(self) -> None:
        """Cancel any outstanding settlement and release the client."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self._client.aclose()

    async def _settle(self, request: GenerationRequest, submission_id: int) -> None:
        started = time.monotonic()
        try:
            text = await asyncio.wait_for(
                self._client.generate(request), timeout=self._timeout
            )
            if not isinstance(text, str) or not text:
                raise MalformedResponseError(INVALID_RESPONSE_DETAIL)
        except asyncio.TimeoutError:
            session = GenerationSession.failed(
                request,
                f"Request timed out after {self._timeout:g}s",
                TransportError.kind,
            )
        except GenerationError as exc:
            session = GenerationSession.failed(request, exc.detail, exc.kind)
        except asyncio.CancelledError:
            self._apply(
                submission_id,
                GenerationSession.failed(request, "Request was cancelled", "cancelled"),
                started,
            )
            raise
        except Exception as exc:
            logger.exception("Generation #%d failed unexpectedly", submission_id)
            session = GenerationSession.failed(
                request, str(exc) or exc.__class__.__name__, "unexpected"
            )
        else:
            session = GenerationSession.succeeded(request, text)

        self._apply(submission_id, session, started)

    def _apply(
        self, submission_id: int, session: GenerationSession, started: float
    ) -> None:
        elapsed = time.monotonic() - started
        generation_latency.observe(elapsed)
        generation_results.labels(
            status=session.status.value, kind=session.failure_kind or "none"
        ).inc()

        if session.failure_kind:
            logger.warning(
                "Generation #%d failed (%s) after %.2fs: %s",
                submission_id,
                session.failure_kind,
                elapsed,
                session.error_message.rsplit("Details: ", 1)[-1],
            )
        else:
            logger.info(
                "Generation #%d succeeded after %.2fs (%d chars)",
                submission_id,
                elapsed,
                len(session.result_text),
            )
        self._publish(session)

    def _skip(self, reason: str) -> None:
        generation_submissions.labels(outcome=reason).inc()
        logger.debug("Submission skipped: %s", reason)

    def _publish(self, session: GenerationSession) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener %r failed", listener)
