"""Rich output formatting for the SurrealKit CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from surrealkit.testing.report import render_summary

if TYPE_CHECKING:
    from surrealkit.models.ledger import MigrationRecord, MigrationSummary, SyncResult
    from surrealkit.models.report import RunReport


# ---------------------------------------------------------------------------
# Status colour mapping
# ---------------------------------------------------------------------------

_STATUS_COLOURS: dict[str, str] = {
    "applied": "green",
    "skipped": "dim",
    "pending": "yellow",
    "failed": "red",
    "PASS": "green",
    "FAIL": "red",
}


def _coloured_status(status: str) -> str:
    """Return a Rich markup string with the status colour-coded."""
    colour = _STATUS_COLOURS.get(status, "white")
    return f"[{colour}]{status}[/{colour}]"


# ---------------------------------------------------------------------------
# Migrations
# ---------------------------------------------------------------------------


def display_migration_summary(console: Console, summary: MigrationSummary) -> None:
    """Render one row per migration file with its outcome.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    summary:
        The result of ``migrate_all``.
    """
    if not summary.outcomes:
        console.print(f"[dim]No .surql files found in {escape(summary.source_dir)}.[/dim]")
        return

    title = "Migrations (dry run)" if summary.dry_run else "Migrations"
    table = Table(title=title, show_lines=False, pad_edge=True, expand=False)
    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("File", style="bold")
    table.add_column("Status")
    table.add_column("Error")

    for idx, outcome in enumerate(summary.outcomes, start=1):
        table.add_row(
            str(idx),
            escape(outcome.file),
            _coloured_status(outcome.status.value),
            escape(outcome.error or ""),
        )
    console.print(table)

    if summary.aborted:
        console.print("[red]Stopped at the first failure (fail-fast).[/red]")


def display_status(console: Console, records: list[MigrationRecord]) -> None:
    """Render the applied-migrations ledger."""
    if not records:
        console.print("No migrations recorded")
        return

    table = Table(title="Applied migrations", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Applied At")
    table.add_column("Hash", style="dim")
    table.add_column("File", style="bold")
    for record in records:
        table.add_row(str(record.applied_at or "-"), record.id[:16], escape(record.file))
    console.print(table)


# ---------------------------------------------------------------------------
# Sync
# ---------------------------------------------------------------------------


def display_sync_result(console: Console, result: SyncResult) -> None:
    """Summarise one reconciliation pass."""
    prefix = "[yellow](dry run)[/yellow] " if result.dry_run else ""
    if not result.has_changes and not result.errors:
        console.print(f"{prefix}[green]Schema is in sync.[/green]")
        return

    lines = [
        f"[bold]Changed files:[/bold]   {len(result.changed)}",
        f"[bold]Applied:[/bold]         {len(result.applied)}",
        f"[bold]Errors:[/bold]          {len(result.errors)}",
        f"[bold]Stale entities:[/bold]  {len(result.stale_entities)}",
        f"[bold]Pruned:[/bold]          {result.pruned}",
    ]
    console.print(Panel("\n".join(lines), title=f"{prefix}Schema Sync", border_style="blue"))

    for path, error in sorted(result.errors.items()):
        console.print(f"  [red]ERROR[/red] {escape(path)}: {escape(error)}")
    if result.dry_run:
        for statement in result.prune_statements:
            console.print(f"  [dim]would run[/dim] {escape(statement)}")
    elif result.stale_entities and not result.pruned:
        for entity in result.stale_entities:
            console.print(f"  [yellow]stale[/yellow] {escape(entity.label())}")


# ---------------------------------------------------------------------------
# Test reports
# ---------------------------------------------------------------------------


def display_test_report(console: Console, report: RunReport) -> None:
    """Render a per-suite table followed by the failing-case summary."""
    if report.suites:
        table = Table(title="Test Suites", show_lines=False, pad_edge=True, expand=False)
        table.add_column("Suite", style="bold")
        table.add_column("File", style="dim")
        table.add_column("Result", justify="center")
        table.add_column("Passed", justify="right")
        table.add_column("Failed", justify="right")
        table.add_column("Duration", justify="right")
        for suite in report.suites:
            table.add_row(
                escape(suite.suite_name),
                escape(suite.suite_file),
                _coloured_status("PASS" if suite.passed else "FAIL"),
                str(suite.cases_passed),
                str(suite.cases_failed),
                f"{suite.duration_ms}ms",
            )
        console.print(table)

    console.print(render_summary(report), markup=False, highlight=False)
