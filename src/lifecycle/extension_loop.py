"""
Extension event loop
--------------------

Owns the extension's lifetime:

    STARTING     start the lookup server, install signal handlers
    REGISTERED   register with the Extensions API (failure is fatal)
    POLLING      long-poll /event/next (raced against shutdown initiation)
    DISPATCHING  INVOKE → log, SHUTDOWN → initiate shutdown, unknown → log
    TERMINATING  always mark shutdown complete, whatever the exit path

Poll-side failures (transport errors, non-2xx answers, undecodable bodies)
are logged and polling continues. Anything raised while starting up or
dispatching is fatal (exit status 1).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

from models.enums import ExitCode, LifecycleEventType, LoopState
from models.events import LifecycleEvent
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from lifecycle.lookup_server_wrapper import LookupServerWrapper
    from lifecycle.shutdown_coordinator import ShutdownCoordinator
    from services.lifecycle_client import LifecycleClient

log = get_logger().for_category(LogCategory.EXTENSION)


class RegistrationError(Exception):
    """The Extensions API did not hand out an extension identifier."""


class ExtensionEventLoop:
    """
    Register → poll → dispatch until SHUTDOWN or a signal.

    Example:
        event_loop = ExtensionEventLoop(client, coordinator, lookup_server)
        exit_code = await event_loop.run()
    """

    def __init__(
        self,
        client: "LifecycleClient",
        coordinator: "ShutdownCoordinator",
        lookup_server: Optional["LookupServerWrapper"] = None,
    ):
        self.client = client
        self.coordinator = coordinator
        self.lookup_server = lookup_server
        self.state = LoopState.STARTING
        self.extension_id: Optional[str] = None

    def _set_state(self, state: LoopState) -> None:
        if state is not self.state:
            log.debug(f"Event loop: {self.state.name} → {state.name}")
            self.state = state

    async def run(self) -> ExitCode:
        """
        Run until shutdown.

        Returns:
            ExitCode.OK after a graceful shutdown, ExitCode.FATAL otherwise.
            The deadline path never returns: the coordinator exits the process.
        """
        exit_code = ExitCode.OK
        try:
            if self.lookup_server is not None:
                await self.lookup_server.start()
            self.coordinator.setup_signal_handlers(asyncio.get_running_loop())

            self.extension_id = await self.client.register()
            if not self.extension_id:
                raise RegistrationError("Extensions API registration failed")
            self._set_state(LoopState.REGISTERED)
            log.info("Registered with Extensions API", extension_id=self.extension_id)

            await self._poll_until_shutdown(self.extension_id)
        except Exception as e:
            log.error(f"Fatal error: {e}", exc_info=True)
            exit_code = ExitCode.FATAL
        finally:
            self._set_state(LoopState.TERMINATING)
            await self.coordinator.complete(
                "event loop exited" if exit_code is ExitCode.OK else "fatal error"
            )

        log.info("Shutdown complete", exit_code=int(exit_code))
        return exit_code

    async def _poll_until_shutdown(self, extension_id: str) -> None:
        while not self.coordinator.is_shutting_down:
            self._set_state(LoopState.POLLING)
            try:
                event = await self._next_event_or_shutdown(extension_id)
            except Exception as e:
                if self.coordinator.is_shutting_down:
                    break
                log.error(f"Error in event loop: {e}", error_type=type(e).__name__)
                continue

            if event is None:
                continue

            self._set_state(LoopState.DISPATCHING)
            if self._dispatch(event):
                break

    async def _next_event_or_shutdown(self, extension_id: str) -> Optional[LifecycleEvent]:
        """
        Long-poll for the next event unless shutdown is initiated first.

        Returns None when the poll was abandoned for shutdown or the API
        answered non-2xx.
        """
        poll = asyncio.ensure_future(self.client.next_event(extension_id))
        draining = asyncio.ensure_future(self.coordinator.wait_for_draining())
        try:
            done, _ = await asyncio.wait(
                {poll, draining}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (poll, draining):
                if not task.done():
                    task.cancel()

        if poll in done:
            return poll.result()

        log.debug("Shutdown initiated while polling; abandoning /event/next")
        return None

    def _dispatch(self, event: LifecycleEvent) -> bool:
        """
        Handle one event.

        Returns:
            True when the loop must stop
        """
        if event.type is LifecycleEventType.SHUTDOWN:
            log.info("extension SHUTDOWN", reason=event.shutdown_reason)
            self.coordinator.initiate_shutdown(event.shutdown_reason)
            return True

        if event.type is LifecycleEventType.INVOKE:
            log.info("extension INVOKE", request_id=event.payload.get("requestId", "-"))
            return False

        log.error("Unknown event type", event_type=event.raw_type or "<missing>")
        return False
