"""
Tests for ExtensionEventLoop: registration, dispatch, poll errors and the
interaction with ShutdownCoordinator.
"""

import asyncio
import json

import httpx
import pytest

from lifecycle.extension_loop import ExtensionEventLoop
from lifecycle.shutdown_coordinator import ShutdownCoordinator
from models.enums import ExitCode, LifecycleEventType, LoopState
from models.events import LifecycleEvent
from services.lifecycle_client import LifecycleClient


def _event(event_type: str, **extra) -> LifecycleEvent:
    return LifecycleEvent.from_payload({"eventType": event_type, **extra})


class FakeLifecycleClient:
    """
    Scripted Extensions API. `events` items are returned (or raised) in
    order; once exhausted, next_event() blocks like an idle long-poll.
    """

    def __init__(self, extension_id="ext-123", events=(), poll_delay=0.0):
        self.extension_id = extension_id
        self._events = list(events)
        self.poll_delay = poll_delay
        self.register_calls = 0
        self.next_event_calls = 0

    async def register(self):
        self.register_calls += 1
        return self.extension_id

    async def next_event(self, extension_id):
        assert extension_id == self.extension_id
        self.next_event_calls += 1
        if self.poll_delay:
            await asyncio.sleep(self.poll_delay)
        if not self._events:
            await asyncio.Event().wait()
        item = self._events.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingHandler:
    def __init__(self):
        self.calls = 0

    @property
    def shutdown_priority(self) -> int:
        return 90

    async def shutdown(self) -> None:
        self.calls += 1


class ExitRecorder:
    def __init__(self):
        self.codes = []

    def __call__(self, code: int) -> None:
        self.codes.append(code)


@pytest.fixture
def exits():
    return ExitRecorder()


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def coordinator(exits, handler):
    coordinator = ShutdownCoordinator(deadline=2.0, exit_fn=exits)
    coordinator.register(handler)
    return coordinator


@pytest.mark.asyncio
async def test_registration_failure_is_fatal_and_never_polls(coordinator, handler, exits):
    requests = []

    def api(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(429, text="rate limited")

    client = LifecycleClient(
        "http://runtime.test/2020-01-01/extension",
        "secretmanager",
        transport=httpx.MockTransport(api),
    )
    event_loop = ExtensionEventLoop(client, coordinator)

    exit_code = await event_loop.run()

    assert exit_code is ExitCode.FATAL
    assert [r.url.path for r in requests] == ["/2020-01-01/extension/register"]
    assert event_loop.state is LoopState.TERMINATING
    assert coordinator.is_shut_down
    assert handler.calls == 1
    assert exits.codes == []
    await client.aclose()


@pytest.mark.asyncio
async def test_shutdown_event_terminates_loop(coordinator, handler, exits):
    client = FakeLifecycleClient(events=[
        _event("INVOKE", requestId="r-1"),
        _event("INVOKE", requestId="r-2"),
        _event("SHUTDOWN", shutdownReason="spindown"),
    ])
    event_loop = ExtensionEventLoop(client, coordinator)

    exit_code = await asyncio.wait_for(event_loop.run(), timeout=2.0)

    assert exit_code is ExitCode.OK
    assert client.register_calls == 1
    assert client.next_event_calls == 3
    assert event_loop.extension_id == "ext-123"
    assert coordinator.reason == "spindown"
    assert coordinator.is_shut_down
    assert handler.calls == 1
    assert exits.codes == []


@pytest.mark.asyncio
async def test_unknown_event_is_ignored_and_polling_continues(coordinator):
    unknown = _event("FOO")
    assert unknown.type is LifecycleEventType.UNKNOWN

    client = FakeLifecycleClient(events=[unknown, _event("SHUTDOWN")])
    event_loop = ExtensionEventLoop(client, coordinator)

    exit_code = await asyncio.wait_for(event_loop.run(), timeout=2.0)

    assert exit_code is ExitCode.OK
    assert client.next_event_calls == 2


@pytest.mark.asyncio
async def test_poll_errors_are_not_fatal(coordinator):
    client = FakeLifecycleClient(events=[
        httpx.ConnectError("connection refused"),
        json.JSONDecodeError("Expecting value", "", 0),
        None,  # non-2xx answer, already logged by the client
        _event("SHUTDOWN"),
    ])
    event_loop = ExtensionEventLoop(client, coordinator)

    exit_code = await asyncio.wait_for(event_loop.run(), timeout=2.0)

    assert exit_code is ExitCode.OK
    assert client.next_event_calls == 4


@pytest.mark.asyncio
async def test_signal_during_long_poll_stops_without_another_poll(coordinator, handler, exits):
    client = FakeLifecycleClient(events=[])
    event_loop = ExtensionEventLoop(client, coordinator)

    run_task = asyncio.create_task(event_loop.run())
    for _ in range(100):
        if client.next_event_calls:
            break
        await asyncio.sleep(0.01)
    assert event_loop.state is LoopState.POLLING

    coordinator.initiate_shutdown("SIGTERM")
    exit_code = await asyncio.wait_for(run_task, timeout=2.0)

    assert exit_code is ExitCode.OK
    assert client.next_event_calls == 1
    assert coordinator.reason == "SIGTERM"
    assert coordinator.is_shut_down
    assert handler.calls == 1
    assert exits.codes == []


@pytest.mark.asyncio
async def test_dispatch_error_is_fatal_but_cleanup_runs(coordinator, handler, monkeypatch):
    client = FakeLifecycleClient(events=[_event("INVOKE")])
    event_loop = ExtensionEventLoop(client, coordinator)

    def broken_dispatch(event):
        raise RuntimeError("dispatch exploded")

    monkeypatch.setattr(event_loop, "_dispatch", broken_dispatch)

    exit_code = await asyncio.wait_for(event_loop.run(), timeout=2.0)

    assert exit_code is ExitCode.FATAL
    assert coordinator.reason == "fatal error"
    assert coordinator.is_shut_down
    assert handler.calls == 1
