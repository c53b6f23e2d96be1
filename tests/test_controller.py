import asyncio

import httpx
import pytest

from services.studio_service.controller import GenerationController
from services.studio_service.parameters import ParameterModel
from shared.contracts.generation import (
    FAILURE_PREFIX,
    ContentType,
    GenerationSession,
    SessionStatus,
)
from shared.generation_client import GenerationClient, MockGenerationClient, TransportError


class GatedClient(GenerationClient):
    """Holds every call until `release` is set, then returns or raises `outcome`."""

    def __init__(self, outcome="Once upon a time..."):
        self.release = asyncio.Event()
        self.calls = []
        self.outcome = outcome
        self.closed = False

    async def generate(self, request):
        self.calls.append(request)
        await self.release.wait()
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", ["", "   ", "\n"])
async def test_blank_prompt_submit_is_a_no_op(prompt):
    client = GatedClient()
    controller = GenerationController(ParameterModel(prompt=prompt), client)
    before = controller.current_session()

    assert await controller.submit() is False
    assert controller.start() is None

    assert controller.current_session() is before
    assert before.status is SessionStatus.IDLE
    assert client.calls == []


@pytest.mark.asyncio
async def test_blank_prompt_keeps_previous_result(parameters):
    controller = GenerationController(parameters, MockGenerationClient())
    await controller.submit()
    settled = controller.current_session()

    parameters.prompt = "  "
    assert await controller.submit() is False
    assert controller.current_session() is settled
    assert settled.status is SessionStatus.SUCCEEDED


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_ignored(parameters):
    client = GatedClient()
    controller = GenerationController(parameters, client)

    task = controller.start()
    assert task is not None
    await asyncio.sleep(0)
    in_flight = controller.current_session()
    assert in_flight.status is SessionStatus.IN_FLIGHT

    assert await controller.submit() is False
    assert controller.start() is None
    assert controller.current_session() is in_flight
    assert len(client.calls) == 1

    client.release.set()
    await task
    assert controller.current_session().status is SessionStatus.SUCCEEDED
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_guard_holds_before_first_suspension(parameters):
    client = GatedClient()
    controller = GenerationController(parameters, client)

    first = controller.start()
    second = controller.start()

    assert first is not None
    assert second is None
    client.release.set()
    await first
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_success_publishes_result(parameters, http_backend):
    client, _ = http_backend(
        lambda req: httpx.Response(200, json={"result": "Once upon a time..."})
    )
    controller = GenerationController(parameters, client)

    assert await controller.submit() is True

    session = controller.current_session()
    assert session.status is SessionStatus.SUCCEEDED
    assert session.result_text == "Once upon a time..."
    assert session.error_message is None
    assert session.request == parameters.snapshot()


@pytest.mark.asyncio
async def test_response_without_result_fails(parameters, http_backend):
    client, _ = http_backend(lambda req: httpx.Response(200, json={}))
    controller = GenerationController(parameters, client)

    await controller.submit()

    session = controller.current_session()
    assert session.status is SessionStatus.FAILED
    assert session.result_text is None
    assert session.error_message.startswith(FAILURE_PREFIX)
    assert "Invalid response format" in session.error_message
    assert session.failure_kind == "malformed_response"


@pytest.mark.asyncio
async def test_transport_failure_includes_detail(parameters, http_backend):
    def refuse(req):
        raise httpx.ConnectError("Network Error", request=req)

    client, _ = http_backend(refuse)
    controller = GenerationController(parameters, client)

    assert await controller.submit() is True

    session = controller.current_session()
    assert session.status is SessionStatus.FAILED
    assert session.error_message.startswith(FAILURE_PREFIX)
    assert "Network Error" in session.error_message
    assert session.failure_kind == "transport"


@pytest.mark.asyncio
async def test_http_error_status_fails(parameters, http_backend):
    client, _ = http_backend(lambda req: httpx.Response(500, text="boom"))
    controller = GenerationController(parameters, client)

    await controller.submit()

    assert controller.current_session().error_message == (
        "Error: Failed to generate content.\n\n"
        "Details: Request failed with status code 500"
    )


@pytest.mark.asyncio
async def test_outbound_body_for_reference_scenario(http_backend):
    client, backend = http_backend(lambda req: httpx.Response(200, json={"result": "ok"}))
    params = ParameterModel(
        prompt="A rainy day in Tokyo",
        content_type=ContentType.STORY,
        temperature=0.8,
        top_k=50,
        top_p=0.95,
    )
    controller = GenerationController(params, client)

    await controller.submit()

    assert backend.requests == [
        {
            "prompt": "A rainy day in Tokyo",
            "type": "story",
            "temperature": 0.8,
            "top_k": 50,
            "top_p": 0.95,
            "max_new_tokens": 150,
        }
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("first_outcome", ["A finished story", TransportError("Network Error")])
async def test_resubmission_clears_previous_outcome(parameters, first_outcome):
    client = GatedClient(outcome=first_outcome)
    controller = GenerationController(parameters, client)
    client.release.set()
    await controller.submit()
    assert controller.current_session().status in (
        SessionStatus.SUCCEEDED,
        SessionStatus.FAILED,
    )

    client.release.clear()
    client.outcome = "A second story"
    task = controller.start()

    session = controller.current_session()
    assert session.status is SessionStatus.IN_FLIGHT
    assert session.result_text is None
    assert session.error_message is None

    client.release.set()
    await task
    assert controller.current_session().result_text == "A second story"


@pytest.mark.asyncio
async def test_edits_during_flight_do_not_leak_into_request(parameters):
    client = GatedClient()
    controller = GenerationController(parameters, client)

    task = controller.start()
    parameters.prompt = "A different theme"
    parameters.temperature = 1.4
    await asyncio.sleep(0)
    client.release.set()
    await task

    sent = client.calls[0]
    assert sent.prompt == "A rainy day in Tokyo"
    assert sent.temperature == 0.8
    assert controller.current_session().request.prompt == "A rainy day in Tokyo"


@pytest.mark.asyncio
async def test_timeout_becomes_failure(parameters):
    client = GatedClient()
    controller = GenerationController(parameters, client, request_timeout_s=0.05)

    assert await controller.submit() is True

    session = controller.current_session()
    assert session.status is SessionStatus.FAILED
    assert "Request timed out after 0.05s" in session.error_message
    assert session.failure_kind == "transport"


@pytest.mark.asyncio
async def test_unexpected_client_error_is_contained(parameters):
    client = GatedClient(outcome=RuntimeError("decoder exploded"))
    client.release.set()
    controller = GenerationController(parameters, client)

    assert await controller.submit() is True

    session = controller.current_session()
    assert session.status is SessionStatus.FAILED
    assert "decoder exploded" in session.error_message
    assert session.failure_kind == "unexpected"


@pytest.mark.asyncio
async def test_empty_text_from_client_is_malformed(parameters):
    client = GatedClient(outcome="")
    client.release.set()
    controller = GenerationController(parameters, client)

    await controller.submit()

    assert controller.current_session().failure_kind == "malformed_response"


@pytest.mark.asyncio
async def test_controller_recovers_after_failure(parameters):
    client = GatedClient(outcome=TransportError("Network Error"))
    client.release.set()
    controller = GenerationController(parameters, client)

    await controller.submit()
    assert controller.current_session().status is SessionStatus.FAILED

    client.outcome = "Back online"
    assert await controller.submit() is True
    assert controller.current_session().result_text == "Back online"


@pytest.mark.asyncio
async def test_listeners_see_every_transition(parameters):
    seen: list[GenerationSession] = []

    def broken(session):
        raise RuntimeError("listener bug")

    controller = GenerationController(parameters, MockGenerationClient())
    controller.add_listener(broken)
    controller.add_listener(seen.append)

    await controller.submit()

    assert [s.status for s in seen] == [SessionStatus.IN_FLIGHT, SessionStatus.SUCCEEDED]
    assert controller.current_session() is seen[-1]

    controller.remove_listener(seen.append)
    await controller.submit()
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_aclose_cancels_pending_generation(parameters):
    client = GatedClient()
    controller = GenerationController(parameters, client)
    controller.start()
    await asyncio.sleep(0)

    await controller.aclose()

    session = controller.current_session()
    assert session.status is SessionStatus.FAILED
    assert session.failure_kind == "cancelled"
    assert client.closed is True


@pytest.mark.asyncio
async def test_resubmit_after_cancelled_generation_settles(parameters):
    client = GatedClient(outcome="Second try")
    controller = GenerationController(parameters, client)
    first = controller.start()
    await asyncio.sleep(0)
    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first
    assert controller.current_session().failure_kind == "cancelled"

    second = controller.start()
    assert second is not None
    client.release.set()
    await second

    session = controller.current_session()
    assert session.status is SessionStatus.SUCCEEDED
    assert session.result_text == "Second try"
    assert len(client.calls) == 2


def test_start_without_event_loop_leaves_state_untouched(parameters):
    controller = GenerationController(parameters, GatedClient())

    with pytest.raises(RuntimeError):
        controller.start()

    assert controller.current_session().status is SessionStatus.IDLE
