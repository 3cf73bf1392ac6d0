from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from services.lifecycle_client import LifecycleClient

log = get_logger().for_category(LogCategory.SHUTDOWN)

class LifecycleClientShutdownHandler(IShutdownHandler):
    """
    Closes the Extensions API HTTP connection pool.

    Priority: 10 (after the lookup server)
    """

    def __init__(self, client: "LifecycleClient"):
        self.client = client

    @property
    def shutdown_priority(self) -> int:
        return 10

    async def shutdown(self) -> None:
        log.debug("Closing Extensions API client")
        await self.client.aclose()
