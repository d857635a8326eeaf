"""Tests for the command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from lead_sync import cli
from lead_sync.core.engine import ErrorEntry, RunReport
from lead_sync.core.state import JsonFileStore
from lead_sync.errors import FetchFailure

runner = CliRunner()

CREDENTIAL_VARS = (
    "LEAD_SYNC_AMPLEMARKET_API_TOKEN",
    "LEAD_SYNC_INSTANTLY_API_KEY",
    "LEAD_SYNC_INSTANTLY_V1_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def fake_sync(report: RunReport | None = None, error: Exception | None = None):
    calls = []

    async def run_sync(settings, on_progress=None):
        calls.append(settings)
        if error:
            raise error
        return report or RunReport()

    run_sync.calls = calls
    return run_sync


class TestRunCommand:
    """Tests for `lead-sync run`."""

    def test_missing_credentials(self) -> None:
        result = runner.invoke(cli.app, ["run"])

        assert result.exit_code == 1
        assert "amplemarket_api_token is required" in result.output

    def test_json_report(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        sync = fake_sync(RunReport(total_leads=3))
        monkeypatch.setattr(cli, "run_sync", sync)

        result = runner.invoke(
            cli.app,
            [
                "run",
                "--amplemarket-token", "am",
                "--instantly-key", "inst",
                "--state-file", str(tmp_path / "s.json"),
                "--no-track",
                "--json",
            ],
        )

        assert result.exit_code == 0
        assert '"totalLeads": 3' in result.stdout
        settings = sync.calls[0]
        assert settings.sync.track_processed is False
        assert settings.sync.state_file == tmp_path / "s.json"

    def test_list_errors_exit_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        report = RunReport(errors=[ErrorEntry("A", "boom")])
        monkeypatch.setattr(cli, "run_sync", fake_sync(report))

        result = runner.invoke(
            cli.app, ["run", "--amplemarket-token", "am", "--instantly-key", "inst", "--json"]
        )

        assert result.exit_code == 1

    def test_no_lists_exit_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        report = RunReport(general_errors=["No lists found in Amplemarket"])
        monkeypatch.setattr(cli, "run_sync", fake_sync(report))

        result = runner.invoke(
            cli.app, ["run", "--amplemarket-token", "am", "--instantly-key", "inst", "--json"]
        )

        assert result.exit_code == 1
        assert '"general": "No lists found in Amplemarket"' in result.stdout

    def test_collection_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        error = FetchFailure("Instantly campaigns", 401, "bad key")
        monkeypatch.setattr(cli, "run_sync", fake_sync(error=error))

        result = runner.invoke(
            cli.app, ["run", "--amplemarket-token", "am", "--instantly-key", "inst", "--json"]
        )

        assert result.exit_code == 1
        assert "Instantly campaigns API error: 401" in result.stdout


class TestStateCommands:
    """Tests for `lead-sync status` and `lead-sync reset`."""

    def test_status_lists_entries(self, tmp_path: Path) -> None:
        state = tmp_path / "state.json"
        JsonFileStore(state).put("list_42", "2024-05-01T00:00:00+00:00", ttl_seconds=3600)

        result = runner.invoke(cli.app, ["status", "--state-file", str(state)])

        assert result.exit_code == 0
        assert "42" in result.output

    def test_status_empty(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["status", "--state-file", str(tmp_path / "none.json")])

        assert result.exit_code == 0
        assert "No synced lists" in result.output

    def test_reset_single_list(self, tmp_path: Path) -> None:
        state = tmp_path / "state.json"
        store = JsonFileStore(state)
        store.put("list_1", "a", ttl_seconds=3600)
        store.put("list_2", "b", ttl_seconds=3600)

        result = runner.invoke(cli.app, ["reset", "1", "--state-file", str(state)])

        assert result.exit_code == 0
        remaining = JsonFileStore(state)
        assert remaining.get("list_1") is None
        assert remaining.get("list_2") == "b"

    def test_reset_all(self, tmp_path: Path) -> None:
        state = tmp_path / "state.json"
        JsonFileStore(state).put("list_1", "a", ttl_seconds=3600)

        result = runner.invoke(cli.app, ["reset", "--state-file", str(state), "--yes"])

        assert result.exit_code == 0
        assert not state.exists()

    def test_reset_all_requires_confirmation(self, tmp_path: Path) -> None:
        state = tmp_path / "state.json"
        JsonFileStore(state).put("list_1", "a", ttl_seconds=3600)

        result = runner.invoke(cli.app, ["reset", "--state-file", str(state)], input="n\n")

        assert result.exit_code == 1
        assert state.exists()

    def test_state_file_from_settings(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        state = tmp_path / "custom.json"
        JsonFileStore(state).put("list_42", "2024-05-01T00:00:00+00:00", ttl_seconds=3600)
        monkeypatch.setenv("LEAD_SYNC_SYNC__STATE_FILE", str(state))

        status_result = runner.invoke(cli.app, ["status"])
        reset_result = runner.invoke(cli.app, ["reset", "42"])

        assert status_result.exit_code == 0
        assert "42" in status_result.output
        assert reset_result.exit_code == 0
        assert JsonFileStore(state).get("list_42") is None


class TestCheckCommand:
    """Tests for `lead-sync check`."""

    def fake_connection_check(self, monkeypatch: pytest.MonkeyPatch) -> list:
        actions = []

        async def run_probe(settings, action=None):
            actions.append(action)
            return {"instantly": {"success": True}}

        monkeypatch.setattr(cli, "run_probe", run_probe)
        return actions

    def test_only_one_api(self, monkeypatch: pytest.MonkeyPatch) -> None:
        actions = self.fake_connection_check(monkeypatch)

        result = runner.invoke(cli.app, ["check", "--only", "instantly"])

        assert result.exit_code == 0
        assert actions == ["test-instantly"]

    def test_unknown_target_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        actions = self.fake_connection_check(monkeypatch)

        result = runner.invoke(cli.app, ["check", "--only", "hubspot"])

        assert result.exit_code == 2
        assert actions == []
