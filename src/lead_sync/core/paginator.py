"""
Paginated Fetcher - Drains a paginated collection endpoint.

Amplemarket pages with an opaque ``page_after`` cursor while Instantly
pages with ``skip``/``limit``. Both are walked here into one in-memory
list. A failed page aborts the whole fetch; no partial results are returned.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx

from lead_sync.errors import FetchFailure, SchemaMismatch
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)

# Issues a GET for a path with query params and returns the raw response
PageGetter = Callable[[str, dict[str, Any]], Awaitable[httpx.Response]]


class PaginationStyle(str, Enum):
    """Supported pagination protocols."""

    CURSOR = "cursor"
    OFFSET = "offset"


@dataclass
class PageRequest:
    """Describes one paginated collection."""

    collection: str
    path: str
    style: PaginationStyle
    page_size: int = 100
    params: dict[str, Any] = field(default_factory=dict)
    envelope_keys: tuple[str, ...] = ("items",)
    cursor_key: str = "page_after"


def extract_items(
    payload: Any,
    envelope_keys: tuple[str, ...],
    collection: str,
    body: str = "",
) -> list[Any]:
    """
    Pull the item list out of a response payload.

    Recognized shapes are a bare JSON array or an object holding a list
    under one of ``envelope_keys``.

    Raises:
        SchemaMismatch: If the payload matches neither shape
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in envelope_keys:
            items = payload.get(key)
            if isinstance(items, list):
                return items
    raise SchemaMismatch(collection, body or json.dumps(payload, default=str))


def next_cursor(payload: Any, cursor_key: str) -> str | None:
    """Cursor for the following page, or None on the last page."""
    if isinstance(payload, dict):
        cursor = payload.get(cursor_key)
        if cursor:
            return str(cursor)
    return None


class PaginatedFetcher:
    """
    Walks every page of a collection sequentially.

    Example:
        fetcher = PaginatedFetcher(client.get)
        lists = await fetcher.fetch_all(
            PageRequest("Amplemarket lead lists", "/lead-lists", PaginationStyle.CURSOR)
        )
    """

    def __init__(self, get_page: PageGetter) -> None:
        self.get_page = get_page

    async def fetch_all(self, request: PageRequest) -> list[Any]:
        """
        Fetch every item of the collection described by ``request``.

        Raises:
            FetchFailure: On any non-success response
            SchemaMismatch: On an unrecognized response envelope
        """
        if request.style == PaginationStyle.CURSOR:
            return await self._fetch_cursor(request)
        return await self._fetch_offset(request)

    async def fetch_page(
        self,
        request: PageRequest,
        params: dict[str, Any],
    ) -> tuple[list[Any], Any]:
        """Fetch a single page and return its items with the decoded payload."""
        response = await self.get_page(request.path, {**request.params, **params})
        body = response.text

        if not response.is_success:
            raise FetchFailure(request.collection, response.status_code, body)

        try:
            payload = response.json()
        except ValueError:
            raise SchemaMismatch(request.collection, body)

        items = extract_items(payload, request.envelope_keys, request.collection, body)
        return items, payload

    async def _fetch_cursor(self, request: PageRequest) -> list[Any]:
        items: list[Any] = []
        cursor: str | None = None
        pages = 0

        while True:
            params: dict[str, Any] = {"page_size": request.page_size}
            if cursor:
                params[request.cursor_key] = cursor

            page, payload = await self.fetch_page(request, params)
            items.extend(page)
            pages += 1

            cursor = next_cursor(payload, request.cursor_key)
            if not cursor:
                break

        logger.debug(
            "Fetched %d %s across %d page(s)", len(items), request.collection, pages
        )
        return items

    async def _fetch_offset(self, request: PageRequest) -> list[Any]:
        items: list[Any] = []
        skip = 0
        pages = 0

        while True:
            page, _ = await self.fetch_page(
                request, {"skip": skip, "limit": request.page_size}
            )
            items.extend(page)
            pages += 1

            # A short or empty page is the last one
            if len(page) < request.page_size:
                break
            skip += len(page)

        logger.debug(
            "Fetched %d %s across %d page(s)", len(items), request.collection, pages
        )
        return items
