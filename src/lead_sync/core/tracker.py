"""
Idempotency Tracker - Remembers which lead lists were already synced.

A list is marked only after its leads were written without error. The
check and the mark are separate store calls, so two concurrent runs can
both pass the check and send the same list twice; Instantly's
``skip_if_in_workspace`` flag keeps that from creating duplicate leads.
"""

from __future__ import annotations

from datetime import datetime, timezone

from lead_sync.core.state import KeyValueStore

SECONDS_PER_DAY = 86400
DEFAULT_RETENTION_DAYS = 30


class IdempotencyTracker:
    """
    Check-and-set record of processed lead lists.

    With no store configured the tracker never skips and never records.
    """

    KEY_PREFIX = "list_"

    def __init__(
        self,
        store: KeyValueStore | None = None,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self.store = store
        self.ttl_seconds = retention_days * SECONDS_PER_DAY

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def key_for(self, unit_id: str) -> str:
        return f"{self.KEY_PREFIX}{unit_id}"

    def processed_at(self, unit_id: str) -> str | None:
        """Timestamp of the previous successful sync, if still retained."""
        if self.store is None:
            return None
        return self.store.get(self.key_for(unit_id))

    def has_processed(self, unit_id: str) -> bool:
        return self.processed_at(unit_id) is not None

    def mark_processed(self, unit_id: str, when: datetime | None = None) -> None:
        if self.store is None:
            return
        when = when or datetime.now(timezone.utc)
        self.store.put(self.key_for(unit_id), when.isoformat(), self.ttl_seconds)
