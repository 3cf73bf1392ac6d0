from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from lifecycle.lookup_server_wrapper import LookupServerWrapper

log = get_logger().for_category(LogCategory.SHUTDOWN)

class LookupServerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for the lookup server (FastAPI + Uvicorn).

    Stops accepting new connections and lets in-flight secret lookups drain.

    Priority: 90 (shutdown first)
    """

    def __init__(self, lookup_server: "LookupServerWrapper"):
        """
        Args:
            lookup_server: LookupServerWrapper instance serving /secret/{name}
        """
        self.lookup_server = lookup_server

    @property
    def shutdown_priority(self) -> int:
        return 90

    async def shutdown(self) -> None:
        if not self.lookup_server.is_running:
            log.debug("Lookup server not running")
            return

        await self.lookup_server.stop()
