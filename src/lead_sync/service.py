"""
Sync service - builds clients, tracker and engine from settings.

Shared by the CLI and the HTTP entrypoint so both run exactly the same
wiring.
"""

from __future__ import annotations

from typing import Any

import httpx

from lead_sync.config import Settings
from lead_sync.connectors.amplemarket import create_amplemarket_client
from lead_sync.connectors.instantly import create_instantly_client
from lead_sync.core.engine import ProgressCallback, RunReport, SyncEngine
from lead_sync.core.state import JsonFileStore
from lead_sync.core.tracker import IdempotencyTracker
from lead_sync.probe import probe


def build_tracker(settings: Settings) -> IdempotencyTracker:
    """Tracker backed by the state file, or a no-op when tracking is off."""
    if not settings.sync.track_processed:
        return IdempotencyTracker()
    return IdempotencyTracker(
        JsonFileStore(settings.sync.state_file),
        retention_days=settings.sync.retention_days,
    )


async def run_sync(
    settings: Settings,
    on_progress: ProgressCallback | None = None,
    tracker: IdempotencyTracker | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RunReport:
    """
    Run one sync with clients created from settings.

    Raises:
        FetchFailure: If the list or campaign collection cannot be read
    """
    if tracker is None:
        tracker = build_tracker(settings)

    async with (
        create_amplemarket_client(settings, transport) as amplemarket,
        create_instantly_client(settings, transport) as instantly,
    ):
        engine = SyncEngine(settings, amplemarket, instantly, tracker)
        return await engine.run(on_progress=on_progress)


async def run_probe(
    settings: Settings,
    action: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """
    Probe the APIs.

    Args:
        action: "test-amplemarket", "test-instantly" or None for both
    """
    async with (
        create_amplemarket_client(settings, transport) as amplemarket,
        create_instantly_client(settings, transport) as instantly,
    ):
        return await probe(
            amplemarket if action in (None, "test-amplemarket") else None,
            instantly if action in (None, "test-instantly") else None,
        )
