"""
Instantly REST API Client.

Destination side of the sync:
- Campaign listing via the v2 API (``skip``/``limit`` paging, bearer key)
- Lead import via the v1 ``lead/add`` endpoint (``api_key`` query param)
"""

from __future__ import annotations

from typing import Any

import httpx

from lead_sync.config import DestinationApiConfig, HttpConfig, Settings
from lead_sync.connectors.http import ApiClient
from lead_sync.core.paginator import PageRequest, PaginatedFetcher, PaginationStyle


class InstantlyClient(ApiClient):
    """
    Instantly API client.

    Example:
        async with InstantlyClient(api_key="...") as instantly:
            campaigns = await instantly.list_campaigns()
            response = await instantly.add_leads(campaigns[0]["id"], leads)
    """

    name = "Instantly"

    def __init__(
        self,
        api_key: str,
        v1_api_key: str | None = None,
        config: DestinationApiConfig | None = None,
        http: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or DestinationApiConfig()
        self.v1_api_key = v1_api_key or api_key
        super().__init__(
            self.config.base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            http=http,
            transport=transport,
        )
        self.fetcher = PaginatedFetcher(self.get)

    def campaigns_request(self) -> PageRequest:
        return PageRequest(
            collection="Instantly campaigns",
            path="/api/v2/campaigns",
            style=PaginationStyle.OFFSET,
            page_size=self.config.page_size,
            envelope_keys=("items",),
        )

    async def list_campaigns(self) -> list[dict[str, Any]]:
        """Fetch every campaign in the workspace."""
        return await self.fetcher.fetch_all(self.campaigns_request())

    async def add_leads(
        self,
        campaign_id: str,
        leads: list[dict[str, Any]],
        skip_if_in_workspace: bool = True,
    ) -> httpx.Response:
        """Import one chunk of leads into a campaign."""
        return await self.post(
            "/api/v1/lead/add",
            json={
                "campaign_id": campaign_id,
                "leads": leads,
                "skip_if_in_workspace": skip_if_in_workspace,
            },
            params={"api_key": self.v1_api_key},
        )


def create_instantly_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> InstantlyClient:
    """Create an InstantlyClient from settings."""
    return InstantlyClient(
        api_key=settings.instantly_api_key.get_secret_value(),
        v1_api_key=settings.instantly_v1_api_key.get_secret_value(),
        config=settings.destination,
        http=settings.http,
        transport=transport,
    )
