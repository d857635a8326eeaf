"""
Amplemarket REST API Client.

Source side of the sync: lead lists and their leads, both paged with a
``page_after`` cursor and authenticated with a bearer token.
"""

from __future__ import annotations

from typing import Any

import httpx

from lead_sync.config import HttpConfig, Settings, SourceApiConfig
from lead_sync.connectors.http import ApiClient
from lead_sync.core.paginator import PageRequest, PaginatedFetcher, PaginationStyle


class AmplemarketClient(ApiClient):
    """
    Amplemarket API client.

    Example:
        async with AmplemarketClient(api_token="...") as amplemarket:
            lists = await amplemarket.list_lead_lists()
            leads = await amplemarket.list_leads(lists[0]["id"])
    """

    name = "Amplemarket"

    def __init__(
        self,
        api_token: str,
        config: SourceApiConfig | None = None,
        http: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or SourceApiConfig()
        super().__init__(
            self.config.base_url,
            headers={"Authorization": f"Bearer {api_token}"},
            http=http,
            transport=transport,
        )
        self.fetcher = PaginatedFetcher(self.get)

    def lead_lists_request(self) -> PageRequest:
        return PageRequest(
            collection="Amplemarket lead lists",
            path="/lead-lists",
            style=PaginationStyle.CURSOR,
            page_size=self.config.page_size,
            envelope_keys=("items", "lead_lists"),
        )

    def leads_request(self, list_id: str) -> PageRequest:
        return PageRequest(
            collection="Amplemarket leads",
            path=f"/lead-lists/{list_id}/leads",
            style=PaginationStyle.CURSOR,
            page_size=self.config.page_size,
            envelope_keys=("items", "leads"),
        )

    async def list_lead_lists(self) -> list[dict[str, Any]]:
        """Fetch every lead list visible to the token."""
        return await self.fetcher.fetch_all(self.lead_lists_request())

    async def list_leads(self, list_id: str) -> list[dict[str, Any]]:
        """Fetch every lead of one list."""
        return await self.fetcher.fetch_all(self.leads_request(list_id))


def create_amplemarket_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AmplemarketClient:
    """Create an AmplemarketClient from settings."""
    return AmplemarketClient(
        api_token=settings.amplemarket_api_token.get_secret_value(),
        config=settings.source,
        http=settings.http,
        transport=transport,
    )
