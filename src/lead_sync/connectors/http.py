"""
Shared HTTP transport for the Amplemarket and Instantly clients.

Wraps ``httpx.AsyncClient`` with:
- Lazy client creation and async context management
- Retry on rate limiting (429, honouring Retry-After)
- Retry with linear backoff on connection errors

Non-success responses are returned to the caller untouched; deciding
whether a status is fatal belongs to the paginator and the writer.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from lead_sync.config import HttpConfig
from lead_sync.errors import TransportError
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)

# Upper bound on a server-requested Retry-After wait
MAX_RETRY_AFTER_SECONDS = 60.0


class ApiClient:
    """
    Base REST client.

    Example:
        async with ApiClient("https://api.example.com", headers={...}) as client:
            response = await client.get("/items", {"limit": 10})
    """

    name = "API"

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        http: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_delay: float = 1.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API root, paths are appended to it
            headers: Default request headers (authentication)
            http: Timeout and retry settings
            transport: Optional httpx transport (used by tests)
            retry_delay: Base delay between connection retries
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {"Accept": "application/json", **(headers or {})}
        self.http = http or HttpConfig()
        self.transport = transport
        self.retry_delay = retry_delay

        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                transport=self.transport,
                timeout=httpx.Timeout(
                    connect=10.0,
                    read=self.http.timeout_seconds,
                    write=30.0,
                    pool=10.0,
                ),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _retry_after(self, response: httpx.Response, attempt: int) -> float:
        header = response.headers.get("Retry-After")
        try:
            delay = float(header) if header else self.retry_delay * (attempt + 1)
        except ValueError:
            delay = self.retry_delay * (attempt + 1)
        return min(max(delay, 0.0), MAX_RETRY_AFTER_SECONDS)

    async def request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make an API request with retry on rate limiting and connection errors.

        Raises:
            TransportError: If the request could not be completed
        """
        client = await self._get_client()
        max_retries = self.http.max_retries

        for attempt in range(max_retries):
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TransportError as e:
                if attempt < max_retries - 1:
                    logger.debug(
                        "%s %s %s failed (%s), retrying", self.name, method, path, e
                    )
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                    continue
                raise TransportError(f"{self.name} connection error: {e}")

            if response.status_code == 429 and attempt < max_retries - 1:
                delay = self._retry_after(response, attempt)
                logger.warning(
                    "%s rate limited on %s, retrying in %.1fs", self.name, path, delay
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise TransportError(f"{self.name}: max retries exceeded")

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", path, json=json, params=params)
