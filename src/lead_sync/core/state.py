"""
State Stores - Key-value persistence with per-key expiry.

Backs the idempotency tracker. The JSON file store keeps every entry with
its expiry time so that processed lists become eligible again once their
retention window has passed.
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol

from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal store interface used by the idempotency tracker."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None: ...


@dataclass
class StoredValue:
    """A stored value with its absolute expiry (epoch seconds)."""

    value: str
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class MemoryStore:
    """In-process store, mainly for tests and one-off runs."""

    def __init__(self) -> None:
        self._data: dict[str, StoredValue] = {}

    def get(self, key: str) -> str | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.is_expired(time.time()):
            del self._data[key]
            return None
        return entry.value

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds else None
        self._data[key] = StoredValue(value=value, expires_at=expires_at)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def items(self) -> dict[str, StoredValue]:
        now = time.time()
        return {k: v for k, v in self._data.items() if not v.is_expired(now)}


class JsonFileStore:
    """
    Key-value store persisted to a JSON file.

    Entries are loaded lazily, expired entries are dropped on load, and
    every write replaces the file atomically.

    Example:
        store = JsonFileStore(Path(".lead-sync-state.json"))
        store.put("list_42", "2024-01-01T00:00:00+00:00", ttl_seconds=86400)
        store.get("list_42")
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._data: dict[str, StoredValue] | None = None

    def _load(self) -> dict[str, StoredValue]:
        if self._data is not None:
            return self._data

        self._data = {}
        if not self.path.exists():
            return self._data

        try:
            raw = json.loads(self.path.read_text())
        except (OSError, ValueError) as e:
            logger.warning("Could not load state file %s: %s", self.path, e)
            return self._data

        entries = raw.get("entries", {}) if isinstance(raw, dict) else None
        if not isinstance(entries, dict):
            logger.warning("Could not load state file %s: unexpected layout", self.path)
            return self._data

        now = time.time()
        for key, entry in entries.items():
            if not isinstance(entry, dict):
                logger.warning("Dropping malformed state entry %r in %s", key, self.path)
                continue
            expires_at = entry.get("expires_at")
            stored = StoredValue(
                value=str(entry.get("value", "")),
                expires_at=float(expires_at) if isinstance(expires_at, (int, float)) else None,
            )
            if not stored.is_expired(now):
                self._data[key] = stored
        return self._data

    def save(self) -> None:
        """Write current entries to disk."""
        data = self._load()
        payload = {
            "version": 1,
            "entries": {key: asdict(entry) for key, entry in data.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2))
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> str | None:
        entry = self._load().get(key)
        if entry is None or entry.is_expired(time.time()):
            return None
        return entry.value

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds else None
        self._load()[key] = StoredValue(value=value, expires_at=expires_at)
        self.save()

    def delete(self, key: str) -> bool:
        removed = self._load().pop(key, None) is not None
        if removed:
            self.save()
        return removed

    def clear(self) -> None:
        """Drop every entry and remove the state file."""
        self._data = {}
        if self.path.exists():
            self.path.unlink()

    def items(self) -> dict[str, StoredValue]:
        now = time.time()
        return {k: v for k, v in self._load().items() if not v.is_expired(now)}
