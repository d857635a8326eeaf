"""
Rich Terminal Display Components.

Provides console UI for:
- Per-list progress during a run
- Summary and detail tables for a run report
- Status messages
"""

from __future__ import annotations

from typing import Any

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from lead_sync.core.engine import RunReport


console = Console(stderr=True)


class ProgressDisplay:
    """
    Rich terminal UI for sync progress.

    Example:
        display = ProgressDisplay()
        display.start()
        report = await engine.run(on_progress=display.update)
        display.stop()
    """

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            console=console,
        )
        self._live: Live | None = None
        self._task_id: Any = None
        self._report: RunReport | None = None

    def start(self) -> None:
        """Start the progress display."""
        self._task_id = self.progress.add_task("[cyan]Lists", total=None)
        self._live = Live(
            self._build_display(),
            console=console,
            refresh_per_second=4,
        )
        self._live.start()

    def stop(self) -> None:
        """Stop the progress display."""
        if self._live:
            self._live.stop()
            self._live = None

    def update(self, report: RunReport) -> None:
        """Refresh from the current state of the run report."""
        self._report = report
        if self._task_id is not None:
            self.progress.update(
                self._task_id,
                total=report.lists_total,
                completed=report.lists_done,
            )
        if self._live:
            self._live.update(self._build_display())

    def _build_display(self) -> Panel:
        report = self._report

        stats_table = Table.grid(padding=(0, 3))
        for _ in range(4):
            stats_table.add_column(justify="center")

        if report is not None:
            stats_table.add_row(
                f"[green]Processed:[/green] {len(report.processed)}",
                f"[yellow]Skipped:[/yellow] {len(report.skipped)}",
                f"[red]Errors:[/red] {len(report.errors)}",
                f"[cyan]Leads:[/cyan] {report.total_leads:,}",
            )

        return Panel(
            Group(self.progress, stats_table),
            title="[bold white]Lead Sync - Amplemarket → Instantly[/bold white]",
            border_style="blue",
            padding=(1, 2),
        )

    def __enter__(self) -> "ProgressDisplay":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()


def print_summary(report: RunReport) -> None:
    """Print a summary table after a run."""
    table = Table(title="Sync Summary", border_style="green")

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Duration", f"{report.duration_seconds:.1f}s")
    table.add_row("Lists", f"{report.lists_total:,}")
    table.add_row("Campaigns", f"{report.campaigns_total:,}")
    table.add_row("Processed", f"{len(report.processed):,}")
    table.add_row("Skipped", f"{len(report.skipped):,}")
    table.add_row("Errors", f"{len(report.errors):,}")
    table.add_row("Leads Sent", f"{report.total_leads:,}")
    if report.dry_run:
        table.add_row("Mode", "[yellow]dry run[/yellow]")

    console.print(table)


def print_details(report: RunReport) -> None:
    """Print one row per list with its outcome."""
    table = Table(title="Lists", border_style="blue")
    table.add_column("List")
    table.add_column("Outcome")
    table.add_column("Detail")

    for entry in report.processed:
        detail = f"{entry.leads_count:,} leads → {entry.campaign_name}"
        if entry.rejected_count:
            detail += f" ({entry.rejected_count} without email)"
        table.add_row(entry.list_name, "[green]✓ processed[/green]", detail)
    for skipped in report.skipped:
        table.add_row(skipped.list_name, "[yellow]skipped[/yellow]", skipped.reason.value)
    for error in report.errors:
        table.add_row(error.list_name, "[red]✗ error[/red]", error.error)
    for message in report.general_errors:
        table.add_row("-", "[red]✗ error[/red]", message)

    console.print(table)


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red bold]Error:[/red bold] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green bold]✓[/green bold] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow bold]⚠[/yellow bold] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")
