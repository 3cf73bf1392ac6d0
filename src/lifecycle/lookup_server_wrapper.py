from __future__ import annotations
import asyncio
import contextlib
import socket
import uvicorn
from fastapi import FastAPI
from typing import Iterator, Optional
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)


class _CoordinatedServer(uvicorn.Server):
    """uvicorn.Server that leaves SIGINT/SIGTERM to the ShutdownCoordinator."""

    def install_signal_handlers(self) -> None:
        # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        # uvicorn >= 0.29
        yield


class LookupServerWrapper:
    """
    Runs the lookup service (FastAPI on uvicorn) as a background asyncio task
    without uvicorn's signal handlers interfering with the shutdown pipeline.

    Behaviour:
      - start() launches uvicorn.Server.serve() as a background task and
        returns once the listening socket is bound.
      - stop() closes the listener so no new connections are accepted, lets
        in-flight requests finish and waits for the serve task to end. It has
        no timeout of its own: the shutdown deadline bounds it.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "127.0.0.1",
        port: int = 3000,
    ):
        self.app = app
        self.host = host
        self.port = port
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None

    # ----------------------------------------------------------------------
    # INTERNAL
    # ----------------------------------------------------------------------
    def _create_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level="warning",
            access_log=False,
            lifespan="off",
            server_header=False,
        )
        return _CoordinatedServer(config)

    def _bind_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            # SO_REUSEADDR: rebinding right after a previous instance left the port in TIME_WAIT
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------
    async def start(self, *, wait_started_timeout: float = 5.0) -> None:
        """
        Start uvicorn in the background and wait until it is listening.

        Raises:
            RuntimeError: already running, or uvicorn exited/timed out before binding
        """
        if self.is_running:
            raise RuntimeError("Lookup server already started")

        # Bind here so "address in use" surfaces as OSError to the caller
        # instead of uvicorn's sys.exit(1) inside the serve task
        sock = self._bind_socket()
        self._server = self._create_server()

        log.info(f"Launching lookup server on http://{self.host}:{self.port}")

        self._serve_task = asyncio.create_task(
            self._server.serve(sockets=[sock]), name="LookupServerServe"
        )

        loop = asyncio.get_running_loop()
        deadline = loop.time() + wait_started_timeout
        while loop.time() < deadline:
            if getattr(self._server, "started", False):
                log.info(f"Server running on port {self.port}")
                return
            if self._serve_task.done():
                break
            await asyncio.sleep(0.02)

        # uvicorn gave up (port in use, bad host) or never reported startup
        await self._discard_serve_task()
        sock.close()
        raise RuntimeError(f"Lookup server failed to start on {self.host}:{self.port}")

    async def stop(self) -> None:
        """
        Stop accepting new connections and wait for in-flight requests.
        """
        if self._server is None or self._serve_task is None:
            log.warn("Lookup server stop() called but server was not running")
            return

        log.info("Stopping lookup server...")

        # serve() notices should_exit on its next tick, closes the listening
        # sockets and waits for open connections to finish
        self._server.should_exit = True

        try:
            await self._serve_task
        except asyncio.CancelledError:
            log.debug("Lookup server serve task cancelled")
            raise
        finally:
            self._server = None
            self._serve_task = None

        log.info("Lookup server stopped and port released")

    async def _discard_serve_task(self) -> None:
        task = self._serve_task
        self._server = None
        self._serve_task = None
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            log.debug("Lookup server serve task cancelled")
        except Exception as e:
            log.error(f"Lookup server serve task failed: {e}")

    # ----------------------------------------------------------------------
    # PROPERTIES
    # ----------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """Return whether a uvicorn serve task is active."""
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._serve_task

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server
