"""Shared fixtures for Lead Sync tests."""

from pathlib import Path
from typing import Any

import httpx
import pytest
from pydantic import SecretStr

from lead_sync.config import Settings


class FakeSource:
    """In-memory stand-in for the Amplemarket client."""

    def __init__(
        self,
        lists: list[dict[str, Any]],
        leads: dict[str, list[dict[str, Any]]] | None = None,
        failing: dict[str, Exception] | None = None,
    ) -> None:
        self.lists = lists
        self.leads = leads or {}
        self.failing = failing or {}
        self.leads_calls: list[str] = []

    async def list_lead_lists(self) -> list[dict[str, Any]]:
        return self.lists

    async def list_leads(self, list_id: str) -> list[dict[str, Any]]:
        self.leads_calls.append(list_id)
        if list_id in self.failing:
            raise self.failing[list_id]
        return self.leads.get(list_id, [])


class FakeDestination:
    """In-memory stand-in for the Instantly client recording every import call."""

    def __init__(
        self,
        campaigns: list[dict[str, Any]],
        statuses: list[int] | None = None,
    ) -> None:
        self.campaigns = campaigns
        self.statuses = list(statuses or [])
        self.calls: list[dict[str, Any]] = []

    async def list_campaigns(self) -> list[dict[str, Any]]:
        return self.campaigns

    async def add_leads(
        self,
        campaign_id: str,
        leads: list[dict[str, Any]],
        skip_if_in_workspace: bool = True,
    ) -> httpx.Response:
        self.calls.append(
            {
                "campaign_id": campaign_id,
                "leads": leads,
                "skip_if_in_workspace": skip_if_in_workspace,
            }
        )
        status = self.statuses.pop(0) if self.statuses else 200
        if status >= 400:
            return httpx.Response(status, text="upstream rejected")
        return httpx.Response(status, json={"status": "success", "leads_uploaded": len(leads)})


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with credentials and a temporary state file."""
    return Settings(
        amplemarket_api_token=SecretStr("am-token"),
        instantly_api_key=SecretStr("inst-key"),
        sync={"state_file": tmp_path / "state.json"},
    )


def make_lead(index: int, email: str | None = "lead{}@example.com") -> dict[str, Any]:
    """A minimal Amplemarket lead."""
    lead: dict[str, Any] = {"id": f"lead-{index}", "first_name": f"Lead{index}"}
    if email:
        lead["email"] = email.format(index)
    return lead
