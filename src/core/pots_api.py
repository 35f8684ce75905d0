"""HTTP client for the pots, friends and activities endpoints."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from src.core.config import get_settings

logger = logging.getLogger(__name__)


class PotsAPIClient:
    """Async client for the resources loaded when a session starts.

    Every fetch raises on transport errors and on non-2xx responses
    (``httpx.HTTPStatusError``), so a caller can tell which resource failed.

    Examples:
        async with PotsAPIClient("http://localhost:3001") as api:
            pots = await api.fetch_all_pots()
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API base URL; defaults to settings.api_base_url.
            timeout: Request timeout in seconds; defaults to settings.api_timeout_seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the underlying async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _get_list(self, path: str) -> list[dict[str, Any]]:
        response = await self.client.get(path)
        response.raise_for_status()
        return response.json()

    async def fetch_all_pots(self) -> list[dict[str, Any]]:
        """Fetch every pot (not scoped to a user)."""
        return await self._get_list("/api/pots")

    async def fetch_friends(self, address: str) -> list[dict[str, Any]]:
        """Fetch the friends of a wallet address."""
        return await self._get_list(f"/api/friends/{quote(address, safe='')}")

    async def fetch_activities(self, address: str) -> list[dict[str, Any]]:
        """Fetch the activity feed of a wallet address."""
        return await self._get_list(f"/api/activities/user/{quote(address, safe='')}")

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("PotsAPIClient closed")

    async def __aenter__(self) -> "PotsAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
