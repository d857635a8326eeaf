"""Tests for state stores and the idempotency tracker."""

import json
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from lead_sync.core.state import JsonFileStore, MemoryStore
from lead_sync.core.tracker import IdempotencyTracker


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_put_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        JsonFileStore(path).put("list_1", "2024-01-01T00:00:00+00:00", ttl_seconds=60)

        assert JsonFileStore(path).get("list_1") == "2024-01-01T00:00:00+00:00"

    def test_missing_key(self, tmp_path: Path) -> None:
        assert JsonFileStore(tmp_path / "state.json").get("list_1") is None

    def test_expired_entries_are_dropped(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({
            "version": 1,
            "entries": {
                "list_old": {"value": "then", "expires_at": time.time() - 10},
                "list_new": {"value": "now", "expires_at": time.time() + 3600},
            },
        }))

        store = JsonFileStore(path)
        assert store.get("list_old") is None
        assert store.get("list_new") == "now"
        assert list(store.items()) == ["list_new"]

    def test_corrupted_file_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")

        store = JsonFileStore(path)
        assert store.get("list_1") is None
        store.put("list_1", "x")
        assert JsonFileStore(path).get("list_1") == "x"

    @pytest.mark.parametrize("content", ["[]", "null", '"text"', '{"entries": []}'])
    def test_unexpected_layout_starts_empty(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "state.json"
        path.write_text(content)

        store = JsonFileStore(path)
        assert store.get("list_1") is None
        assert store.items() == {}

    def test_malformed_entries_are_dropped(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text(json.dumps({
            "version": 1,
            "entries": {
                "list_bad": "not an entry",
                "list_odd_expiry": {"value": "kept", "expires_at": "soon"},
                "list_good": {"value": "ok", "expires_at": time.time() + 3600},
            },
        }))

        store = JsonFileStore(path)
        assert store.get("list_bad") is None
        assert store.get("list_odd_expiry") == "kept"
        assert store.get("list_good") == "ok"

    def test_unreadable_path_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.mkdir()

        assert JsonFileStore(path).get("list_1") is None

    def test_delete_and_clear(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        store = JsonFileStore(path)
        store.put("list_1", "a")
        store.put("list_2", "b")

        assert store.delete("list_1") is True
        assert store.delete("list_1") is False
        assert JsonFileStore(path).get("list_2") == "b"

        store.clear()
        assert not path.exists()
        assert store.get("list_2") is None


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_ttl_expiry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        store = MemoryStore()
        store.put("k", "v", ttl_seconds=10)
        assert store.get("k") == "v"

        later = time.time() + 11
        monkeypatch.setattr("lead_sync.core.state.time.time", lambda: later)
        assert store.get("k") is None


class TestIdempotencyTracker:
    """Tests for IdempotencyTracker."""

    def test_without_store_never_skips(self) -> None:
        tracker = IdempotencyTracker()
        tracker.mark_processed("1")

        assert tracker.enabled is False
        assert tracker.has_processed("1") is False

    def test_mark_then_check(self) -> None:
        store = MemoryStore()
        tracker = IdempotencyTracker(store)
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)

        assert tracker.has_processed("42") is False
        tracker.mark_processed("42", when)

        assert tracker.has_processed("42") is True
        assert tracker.processed_at("42") == when.isoformat()
        assert store.get("list_42") == when.isoformat()

    def test_retention_window(self) -> None:
        store = MemoryStore()
        IdempotencyTracker(store, retention_days=30).mark_processed("1")

        entry = store.items()["list_1"]
        assert entry.expires_at is not None
        assert entry.expires_at - time.time() == pytest.approx(30 * 86400, abs=5)
