"""
Lead Sync CLI - Command Line Interface.

Commands:
    run     Sync Amplemarket lead lists into matching Instantly campaigns
    check   Test both API connections
    status  Show lists already synced
    reset   Forget synced lists so they are sent again
    config  Manage configuration
    serve   Start the HTTP entrypoint
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import SecretStr
from rich.console import Console
from rich.table import Table

from lead_sync import __version__
from lead_sync.config import Settings, load_settings
from lead_sync.core.state import JsonFileStore
from lead_sync.core.tracker import IdempotencyTracker
from lead_sync.errors import LeadSyncError
from lead_sync.service import run_probe, run_sync
from lead_sync.utils.display import (
    ProgressDisplay,
    print_details,
    print_error,
    print_info,
    print_success,
    print_summary,
    print_warning,
)
from lead_sync.utils.logger import setup_logging_from_config


app = typer.Typer(
    name="lead-sync",
    help="Sync Amplemarket lead lists into Instantly campaigns.",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


class ProbeTarget(str, Enum):
    """APIs the check command can probe on their own."""

    AMPLEMARKET = "amplemarket"
    INSTANTLY = "instantly"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]lead-sync[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Lead Sync - Amplemarket → Instantly synchronization."""
    pass


# =============================================================================
# RUN Command
# =============================================================================
@app.command()
def run(
    amplemarket_token: str = typer.Option(
        None,
        "--amplemarket-token",
        envvar="LEAD_SYNC_AMPLEMARKET_API_TOKEN",
        help="Amplemarket API token.",
    ),
    instantly_key: str = typer.Option(
        None,
        "--instantly-key",
        envvar="LEAD_SYNC_INSTANTLY_API_KEY",
        help="Instantly API key.",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file.",
        exists=True,
    ),
    state_file: Path = typer.Option(
        None,
        "--state-file",
        help="Path to the processed-lists state file.",
    ),
    track: bool = typer.Option(
        True,
        "--track/--no-track",
        help="Skip lists already synced within the retention window.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Fetch and transform but do not send leads.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the run report as JSON.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output.",
    ),
) -> None:
    """
    Sync every Amplemarket lead list into the Instantly campaign with the same name.

    Example:
        lead-sync run --amplemarket-token am_xxx --instantly-key in_xxx
    """
    try:
        settings = _build_settings(
            config_file=config_file,
            amplemarket_token=amplemarket_token,
            instantly_key=instantly_key,
            state_file=state_file,
            track=track,
            dry_run=dry_run,
        )
    except (ValueError, LeadSyncError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    errors = settings.validate_credentials()
    if errors:
        for err in errors:
            print_error(err)
        print_info("Use --help for configuration options.")
        raise typer.Exit(1)

    setup_logging_from_config(
        settings.logging,
        level="WARNING" if quiet or as_json else None,
    )

    if dry_run:
        print_warning("DRY RUN - No leads will be sent")

    display = ProgressDisplay() if not (quiet or as_json) else None

    try:
        if display:
            display.start()
        report = asyncio.run(
            run_sync(settings, on_progress=display.update if display else None)
        )
    except LeadSyncError as e:
        if as_json:
            console.print_json(data={"error": str(e)})
        else:
            print_error(str(e))
        raise typer.Exit(1)
    finally:
        if display:
            display.stop()

    if as_json:
        console.print_json(data=report.to_dict())
    elif not quiet:
        console.print()
        print_details(report)
        print_summary(report)

    if report.has_errors:
        if not as_json:
            for message in report.general_errors:
                print_warning(message)
            if report.errors:
                print_warning(f"{len(report.errors)} list(s) failed")
        raise typer.Exit(1)

    if not as_json:
        print_success(f"Sync completed: {report.total_leads:,} leads sent")


# =============================================================================
# CHECK Command
# =============================================================================
@app.command()
def check(
    amplemarket_token: str = typer.Option(
        None,
        "--amplemarket-token",
        envvar="LEAD_SYNC_AMPLEMARKET_API_TOKEN",
        help="Amplemarket API token.",
    ),
    instantly_key: str = typer.Option(
        None,
        "--instantly-key",
        envvar="LEAD_SYNC_INSTANTLY_API_KEY",
        help="Instantly API key.",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file.",
        exists=True,
    ),
    target: Optional[ProbeTarget] = typer.Option(
        None,
        "--only",
        help="Probe only one of the APIs.",
    ),
) -> None:
    """Test both API connections with a small request."""
    settings = _build_settings(
        config_file=config_file,
        amplemarket_token=amplemarket_token,
        instantly_key=instantly_key,
    )
    action = f"test-{target.value}" if target else None
    result = asyncio.run(run_probe(settings, action))
    console.print_json(data=result)

    if not all(part.get("success") for part in result.values()):
        raise typer.Exit(1)


# =============================================================================
# STATUS Command
# =============================================================================
@app.command()
def status(
    state_file: Path = typer.Option(
        None,
        "--state-file",
        help="Path to state file (defaults to the configured sync.state_file).",
    ),
) -> None:
    """Show lists already synced and when their markers expire."""
    store = _state_store(state_file)
    entries = store.items()

    if not entries:
        print_info("No synced lists recorded. Run a sync first.")
        raise typer.Exit(0)

    table = Table(title="Synced Lists", border_style="blue")
    table.add_column("List ID", style="cyan")
    table.add_column("Synced At")
    table.add_column("Expires")

    for key, entry in sorted(entries.items()):
        expires = (
            datetime.fromtimestamp(entry.expires_at, timezone.utc).isoformat()
            if entry.expires_at
            else "never"
        )
        table.add_row(
            key.removeprefix(IdempotencyTracker.KEY_PREFIX),
            entry.value,
            expires,
        )

    console.print(table)


# =============================================================================
# RESET Command
# =============================================================================
@app.command()
def reset(
    list_ids: Optional[list[str]] = typer.Argument(
        None,
        help="List IDs to forget (all when omitted).",
    ),
    state_file: Path = typer.Option(
        None,
        "--state-file",
        help="Path to state file (defaults to the configured sync.state_file).",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation.",
    ),
) -> None:
    """Forget synced lists so the next run sends them again."""
    store = _state_store(state_file)

    if not list_ids:
        if not yes:
            typer.confirm("Forget every synced list?", abort=True)
        store.clear()
        print_success("Cleared all synced lists")
        return

    tracker = IdempotencyTracker(store)
    for list_id in list_ids:
        if store.delete(tracker.key_for(list_id)):
            print_success(f"Forgot list {list_id}")
        else:
            print_warning(f"List {list_id} was not recorded")


# =============================================================================
# CONFIG Command
# =============================================================================
@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration.",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Write a config file with the current settings.",
    ),
    output: Path = typer.Option(
        Path("config.toml"),
        "--output",
        "-o",
        help="Output path for config file.",
    ),
) -> None:
    """Manage configuration."""
    if init:
        settings = Settings()
        settings.to_file(output)
        print_success(f"Generated config file: {output}")
        return

    if show:
        settings = Settings()
        table = Table(title="Current Configuration", border_style="cyan")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        table.add_row("Amplemarket Token", _mask(settings.amplemarket_api_token))
        table.add_row("Instantly Key", _mask(settings.instantly_api_key))
        table.add_row("Amplemarket URL", settings.source.base_url)
        table.add_row("Instantly URL", settings.destination.base_url)
        table.add_row(
            "Leads per Request", f"{settings.destination.max_leads_per_request}"
        )
        table.add_row("State File", str(settings.sync.state_file))
        table.add_row("Retention", f"{settings.sync.retention_days} days")

        console.print(table)
        return

    console.print("Use --show to view config or --init to create config file.")


# =============================================================================
# SERVE Command
# =============================================================================
@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port."),
) -> None:
    """Start the HTTP entrypoint (POST /sync, POST /debug)."""
    import uvicorn

    from lead_sync.server import create_app

    settings = Settings()
    setup_logging_from_config(settings.logging)
    uvicorn.run(create_app(settings), host=host, port=port)


# =============================================================================
# Helper Functions
# =============================================================================
def _mask(secret: SecretStr) -> str:
    value = secret.get_secret_value()
    if not value:
        return "[dim]not set[/dim]"
    return value[:5] + "..."


def _state_store(state_file: Path | None) -> JsonFileStore:
    """State store at the given path, or at the configured one."""
    return JsonFileStore(state_file or Settings().sync.state_file)


def _build_settings(
    config_file: Path | None = None,
    **overrides: Any,
) -> Settings:
    """Build settings from config file and CLI overrides."""
    settings = load_settings(config_file) if config_file else Settings()

    settings = settings.with_credentials(
        amplemarket_token=overrides.get("amplemarket_token"),
        instantly_token=overrides.get("instantly_key"),
    )
    if overrides.get("state_file"):
        settings.sync.state_file = Path(overrides["state_file"])
    if overrides.get("track") is not None:
        settings.sync.track_processed = overrides["track"]
    if overrides.get("dry_run") is not None:
        settings.sync.dry_run = overrides["dry_run"]

    return settings


if __name__ == "__main__":
    app()
