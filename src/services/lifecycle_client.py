"""
Lifecycle client - Lambda Extensions API calls

Two operations:
- register(): declare interest in INVOKE and SHUTDOWN, obtain the extension id
- next_event(): blocking long-poll for the next lifecycle event

No retries. A non-success HTTP status is logged with its body and reported as
None; transport failures (httpx.HTTPError) and undecodable bodies propagate to
the caller.
"""

from __future__ import annotations

from typing import Optional

import httpx

from models.events import LifecycleEvent
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.LIFECYCLE)

EXTENSION_NAME_HEADER = "Lambda-Extension-Name"
EXTENSION_ID_HEADER = "Lambda-Extension-Identifier"
SUBSCRIBED_EVENTS = ["INVOKE", "SHUTDOWN"]


class LifecycleClient:
    """
    Thin async client over the Extensions API.

    Example:
        client = LifecycleClient("http://127.0.0.1:9001/2020-01-01/extension", "secretmanager")
        extension_id = await client.register()
        event = await client.next_event(extension_id)
    """

    def __init__(
        self,
        base_url: str,
        extension_name: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Extensions API root, e.g. http://host:port/2020-01-01/extension
            extension_name: Value for the Lambda-Extension-Name header; must
                match the executable name under /opt/extensions
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.extension_name = extension_name
        # timeout=None: /event/next is held open by the host until an event exists
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=None,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def register(self) -> Optional[str]:
        """
        Register for INVOKE and SHUTDOWN.

        Returns:
            Extension identifier, or None when the API answered non-2xx
        """
        response = await self._client.post(
            "/register",
            headers={EXTENSION_NAME_HEADER: self.extension_name},
            json={"events": SUBSCRIBED_EVENTS},
        )

        if response.is_success:
            extension_id = response.headers.get(EXTENSION_ID_HEADER)
            if not extension_id:
                log.error("Registration succeeded without an extension identifier header")
            return extension_id or None

        log.error("Registration failed", status=response.status_code, body=response.text)
        return None

    async def next_event(self, extension_id: str) -> Optional[LifecycleEvent]:
        """
        Long-poll for the next lifecycle event.

        Returns:
            Parsed event, or None when the API answered non-2xx
        """
        response = await self._client.get(
            "/event/next",
            headers={EXTENSION_ID_HEADER: extension_id},
        )

        if response.is_success:
            return LifecycleEvent.from_payload(response.json())

        log.error("Next event request failed", status=response.status_code, body=response.text)
        return None

    async def aclose(self) -> None:
        await self._client.aclose()
