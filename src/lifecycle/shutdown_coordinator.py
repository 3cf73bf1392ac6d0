"""
Shutdown coordinator that owns the process shutdown state.

Shutdown is initiated by SIGINT/SIGTERM or by a SHUTDOWN lifecycle event and
runs in two phases:
1. DRAINING: registered handlers run in priority order (the lookup server
   stops accepting connections) while a deadline task is armed.
2. STOPPED: the event loop has exited and every handler finished.

If STOPPED is not reached before the deadline the process is terminated with
exit status 2, skipping any remaining cleanup.
"""

import asyncio
import os
import signal
from typing import Any, Callable, List, Optional

from models.enums import ExitCode, ShutdownStage
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown against a fixed deadline.

    Only the coordinator mutates the shutdown stage; the event loop and the
    lookup server read it through `stage`, `is_shutting_down` and
    `is_shut_down`.

    Example:
        coordinator = ShutdownCoordinator(deadline=1.0)
        coordinator.register(LookupServerShutdownHandler(lookup_server))
        coordinator.setup_signal_handlers(asyncio.get_running_loop())

        coordinator.initiate_shutdown("SIGTERM")   # idempotent
        await coordinator.complete()               # marks STOPPED
    """

    def __init__(self, deadline: float = 1.0, exit_fn: Callable[[int], Any] = os._exit):
        """
        Initialize shutdown coordinator.

        Args:
            deadline: Seconds allowed between initiation and STOPPED
            exit_fn: Called with ExitCode.SHUTDOWN_TIMEOUT when the deadline
                expires (default os._exit, which skips interpreter cleanup)
        """
        self._handlers: List = []
        self._deadline = deadline
        self._exit = exit_fn
        self._stage = ShutdownStage.RUNNING
        self._reason: Optional[str] = None
        self._draining = asyncio.Event()
        self._stopped = asyncio.Event()
        self._handlers_task: Optional[asyncio.Task] = None
        self._deadline_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # State (read-only for everyone else)
    # ------------------------------------------------------------------

    @property
    def stage(self) -> ShutdownStage:
        return self._stage

    @property
    def is_shutting_down(self) -> bool:
        return self._stage is not ShutdownStage.RUNNING

    @property
    def is_shut_down(self) -> bool:
        return self._stage is ShutdownStage.STOPPED

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def deadline(self) -> float:
        return self._deadline

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Route SIGINT and SIGTERM to initiate_shutdown().

        Args:
            loop: Running asyncio event loop
        """
        def signal_handler(sig: signal.Signals) -> None:
            log.info(f"Signal {sig.name} received → initiating shutdown")
            self.initiate_shutdown(sig.name)

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def initiate_shutdown(self, reason: str = "requested") -> bool:
        """
        Enter DRAINING: start the handler sequence and arm the deadline.

        Safe to call from signal handlers and from the event loop, any number
        of times; only the first call has an effect.

        Returns:
            True if this call initiated shutdown, False if it was already under way
        """
        if self._stage is not ShutdownStage.RUNNING:
            log.debug("Shutdown already in progress", ignored_reason=reason)
            return False

        self._stage = ShutdownStage.DRAINING
        self._reason = reason
        self._draining.set()
        log.info("Shutting down...", reason=reason)

        self._deadline_task = asyncio.create_task(
            self._enforce_deadline(), name="ShutdownDeadline"
        )
        self._handlers_task = asyncio.create_task(
            self._run_handlers(), name="ShutdownHandlers"
        )
        return True

    async def wait_for_draining(self) -> None:
        """Block until shutdown has been initiated."""
        await self._draining.wait()

    async def complete(self, reason: str = "event loop exited") -> None:
        """
        Finish shutdown and mark STOPPED.

        Initiates shutdown first if nothing has yet (fatal exit paths), then
        waits for the handler sequence. Reaching STOPPED disarms the deadline.
        """
        if self._stage is ShutdownStage.STOPPED:
            return

        self.initiate_shutdown(reason)

        if self._handlers_task is None:
            raise RuntimeError("Shutdown initiated without a handler sequence")
        await self._handlers_task

        self._stage = ShutdownStage.STOPPED
        self._stopped.set()
        log.debug("Shutdown state: STOPPED")

        if self._deadline_task is not None:
            await self._deadline_task

    async def _run_handlers(self) -> None:
        """Run handlers in descending priority; a failing handler does not stop the rest."""
        sorted_handlers = sorted(
            self._handlers, key=lambda h: h.shutdown_priority, reverse=True
        )

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__
            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})...")
                await handler.shutdown()
                log.debug(f"✓ {handler_name} shutdown complete")
            except asyncio.CancelledError:
                log.debug(f"{handler_name} shutdown was cancelled")
                raise
            except Exception as e:
                log.error(f"Error shutting down {handler_name}: {e}", exc_info=True)

    async def _enforce_deadline(self) -> None:
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=self._deadline)
        except asyncio.TimeoutError:
            log.error(
                "Shutdown timeout exceeded...",
                deadline_ms=int(self._deadline * 1000),
                reason=self._reason,
            )
            self._exit(int(ExitCode.SHUTDOWN_TIMEOUT))
        else:
            log.debug("Shutdown finished within deadline")
