"""
Connection Probe - Checks both APIs with a single small page each.

Used by the ``check`` command and the ``/debug`` endpoint to diagnose
credentials and response shapes without running a sync. API failures are
reported in the result, never raised.
"""

from __future__ import annotations

from typing import Any

import httpx

from lead_sync.connectors.amplemarket import AmplemarketClient
from lead_sync.connectors.instantly import InstantlyClient
from lead_sync.core.paginator import PageRequest, extract_items
from lead_sync.errors import LeadSyncError, SchemaMismatch, truncate_body

PROBE_PAGE_SIZE = 10


def _decode(response: httpx.Response) -> tuple[Any, str | None]:
    if not response.is_success:
        return None, f"API returned {response.status_code}"
    try:
        return response.json(), None
    except ValueError:
        return None, "Response is not JSON"


def _failure(error: str, response: httpx.Response | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"success": False, "error": error}
    if response is not None:
        result["response"] = truncate_body(response.text)
    return result


def _items(data: Any, request: PageRequest) -> list[Any] | None:
    try:
        return extract_items(data, request.envelope_keys, request.collection)
    except SchemaMismatch:
        return None


async def probe_amplemarket(client: AmplemarketClient) -> dict[str, Any]:
    """Fetch the first page of lead lists and describe the response."""
    request = client.lead_lists_request()
    try:
        response = await client.get(request.path, {"page_size": PROBE_PAGE_SIZE})
    except LeadSyncError as e:
        return _failure(str(e))

    data, error = _decode(response)
    if error:
        return _failure(error, response)

    items = _items(data, request)
    return {
        "success": True,
        "hasItems": bool(items),
        "itemsCount": len(items or []),
        "firstItem": items[0] if items else None,
        "pageAfter": data.get("page_after") if isinstance(data, dict) else None,
        "responseStructure": {
            "hasItems": items is not None,
            "isArray": isinstance(data, list),
            "keys": list(data.keys()) if isinstance(data, dict) else [],
        },
    }


async def probe_instantly(client: InstantlyClient) -> dict[str, Any]:
    """Fetch the first page of campaigns and describe the response."""
    request = client.campaigns_request()
    try:
        response = await client.get(
            request.path, {"skip": 0, "limit": PROBE_PAGE_SIZE}
        )
    except LeadSyncError as e:
        return _failure(str(e))

    data, error = _decode(response)
    if error:
        return _failure(error, response)

    items = _items(data, request)
    first = items[0] if items else None
    return {
        "success": True,
        "campaignsCount": len(items or []),
        "firstCampaign": first,
        "responseType": "array" if isinstance(data, list) else type(data).__name__,
        "sampleCampaignName": first.get("name") if isinstance(first, dict) else None,
    }


async def probe(
    amplemarket: AmplemarketClient | None = None,
    instantly: InstantlyClient | None = None,
) -> dict[str, Any]:
    """Probe whichever clients are given."""
    result: dict[str, Any] = {}
    if amplemarket is not None:
        result["amplemarket"] = await probe_amplemarket(amplemarket)
    if instantly is not None:
        result["instantly"] = await probe_instantly(instantly)
    return result
