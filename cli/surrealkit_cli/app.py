"""SurrealKit CLI application -- Typer-based developer interface.

Provides commands for bootstrap setup, ledger-tracked migrations, seeding,
schema sync (one-shot or watch) and declarative test runs.  Human-readable
output goes to *stderr* via Rich; machine-readable output (``--json``) goes
to *stdout* so that pipelines can compose cleanly.

Exit codes: ``0`` success, ``1`` failed cases or execution failure, ``3``
configuration error.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import signal
import sys
from collections.abc import AsyncIterator, Coroutine
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from surrealkit.config import Settings, load_settings
from surrealkit.errors import ConfigurationError, SuiteExecutionError, SurrealKitError
from surrealkit.executor.base import DatabaseClient, RootCredentials
from surrealkit.executor.surreal_http import connect
from surrealkit.logging_config import configure_logging
from surrealkit.migration.ledger import apply_one, migrate_all
from surrealkit.migration.sync import SyncOptions, run_sync
from surrealkit.models.ledger import SyncResult
from surrealkit.models.report import RunReport
from surrealkit.models.suite_spec import TestOptions
from surrealkit.state.bootstrap import apply_seed, ensure_bootstrap_schema
from surrealkit.state.repository import MigrationLedgerRepository
from surrealkit.testing.report import report_json, write_json_report
from surrealkit.testing.runner import run_test_suites
from surrealkit_cli.display import (
    display_migration_summary,
    display_status,
    display_sync_result,
    display_test_report,
)

T = TypeVar("T")

EXIT_FAILURE = 1
EXIT_CONFIG = 3

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="surrealkit",
    help="SurrealKit - schema lifecycle, sync and declarative testing for SurrealDB",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False
_verbose: bool = False


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output, _verbose  # noqa: PLW0603
    _json_output = json_mode
    _verbose = verbose


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_settings() -> Settings:
    """Load settings and configure logging, exiting with code 3 when invalid."""
    try:
        settings = load_settings()
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_CONFIG) from exc
    configure_logging(structured=settings.structured_logging, debug=_verbose or settings.debug)
    return settings


def _exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, ConfigurationError):
        return EXIT_CONFIG
    if isinstance(exc, SuiteExecutionError) and isinstance(exc.__cause__, ConfigurationError):
        return EXIT_CONFIG
    return EXIT_FAILURE


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro* to completion, mapping SurrealKit errors to exit codes."""
    try:
        return asyncio.run(coro)
    except SurrealKitError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=_exit_code_for(exc)) from exc


@contextlib.asynccontextmanager
async def _root_session(settings: Settings) -> AsyncIterator[DatabaseClient]:
    """Open a root session scoped to the configured namespace and database."""
    client = await connect(settings.database_host, timeout=settings.request_timeout)
    try:
        await client.signin(
            RootCredentials(
                username=settings.database_user,
                password=settings.database_password.get_secret_value(),
            )
        )
        await client.use(settings.database_namespace, settings.database_name)
        yield client
    finally:
        await client.close()


def _write_stdout(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _partial_report(exc: SuiteExecutionError, started_at: datetime) -> RunReport:
    """Build a report from the suites that settled before *exc* aborted the run."""
    finished_at = datetime.now(UTC)
    return RunReport(
        started_at=started_at,
        finished_at=finished_at,
        duration_ms=int((finished_at - started_at).total_seconds() * 1000),
        suites=sorted(exc.completed, key=lambda s: s.suite_file),
    )


# ---------------------------------------------------------------------------
# setup / seed / apply
# ---------------------------------------------------------------------------


@app.command()
def setup() -> None:
    """Run database/setup.surql (if present) and define the tracking tables."""
    settings = _load_settings()

    async def _setup() -> None:
        async with _root_session(settings) as client:
            await ensure_bootstrap_schema(client, settings)

    _run(_setup())
    console.print("[green]Setup complete.[/green]")


@app.command()
def seed() -> None:
    """Run database/seed.surql."""
    settings = _load_settings()

    async def _seed() -> None:
        async with _root_session(settings) as client:
            await apply_seed(client, settings)

    _run(_seed())
    console.print("[green]Seed applied.[/green]")


@app.command("apply")
def apply_file(
    path: Path = typer.Argument(..., help="SurrealQL file to execute.", exists=True, dir_okay=False),
    track: bool = typer.Option(
        False,
        "--track",
        help="Record the file in the migration ledger and skip it if already applied.",
    ),
) -> None:
    """Execute a single SurrealQL file."""
    settings = _load_settings()

    async def _apply() -> str:
        async with _root_session(settings) as client:
            if track:
                await ensure_bootstrap_schema(client, settings)
            status = await apply_one(client, path, track=track, root=settings.project_root)
            return status.value

    status = _run(_apply())
    if _json_output:
        _write_stdout(json.dumps({"file": path.as_posix(), "status": status}))
    else:
        console.print(f"{escape(str(path))}: [bold]{status}[/bold]")


# ---------------------------------------------------------------------------
# migrate / status
# ---------------------------------------------------------------------------


@app.command()
def migrate(
    fail_fast: bool = typer.Option(
        True,
        "--fail-fast/--no-fail-fast",
        help="Stop at the first failing migration.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report pending migrations without executing them.",
    ),
) -> None:
    """Apply every migration in database/migrations not yet in the ledger."""
    settings = _load_settings()

    async def _migrate() -> Any:
        async with _root_session(settings) as client:
            return await migrate_all(client, settings, fail_fast=fail_fast, dry_run=dry_run)

    summary = _run(_migrate())
    if _json_output:
        _write_stdout(summary.model_dump_json(indent=2))
    else:
        display_migration_summary(console, summary)

    if summary.failed:
        raise typer.Exit(code=EXIT_FAILURE)


@app.command()
def status() -> None:
    """List applied migrations in the order they were recorded."""
    settings = _load_settings()

    async def _status() -> Any:
        async with _root_session(settings) as client:
            return await MigrationLedgerRepository(client).list_applied()

    records = _run(_status())
    if _json_output:
        _write_stdout(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
    else:
        display_status(console, records)


# ---------------------------------------------------------------------------
# sync
# ---------------------------------------------------------------------------


@app.command()
def sync(
    watch: bool = typer.Option(False, "--watch", help="Keep syncing until interrupted."),
    debounce_ms: int = typer.Option(
        250,
        "--debounce-ms",
        min=0,
        help="Interval between watch passes, in milliseconds (minimum 250).",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report changes without applying them."),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop at the first failing schema file."),
    no_prune: bool = typer.Option(False, "--no-prune", help="Report stale entities instead of removing them."),
    allow_shared_prune: bool = typer.Option(
        False,
        "--allow-shared-prune",
        help="Permit pruning on a database marked as shared.",
    ),
) -> None:
    """Reconcile the database with database/schema."""
    settings = _load_settings()
    options = SyncOptions(
        watch=watch,
        debounce_ms=debounce_ms,
        dry_run=dry_run,
        fail_fast=fail_fast,
        prune=not no_prune,
        allow_shared_prune=allow_shared_prune,
    )

    def _on_pass(result: SyncResult) -> None:
        if _json_output:
            _write_stdout(result.model_dump_json())
        else:
            display_sync_result(console, result)

    async def _sync() -> SyncResult:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, stop_event.set)
        async with _root_session(settings) as client:
            return await run_sync(client, settings, options, stop_event=stop_event, on_pass=_on_pass)

    result = _run(_sync())
    if result.errors:
        raise typer.Exit(code=EXIT_FAILURE)


# ---------------------------------------------------------------------------
# test
# ---------------------------------------------------------------------------


@app.command("test")
def run_tests(
    suite: str | None = typer.Option(None, "--suite", help="Glob matched against suite paths and names."),
    case: str | None = typer.Option(None, "--case", help="Glob matched against case names."),
    tags: list[str] | None = typer.Option(None, "--tag", help="Only run suites or cases carrying this tag."),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Stop after the first failing case."),
    parallel: int = typer.Option(1, "--parallel", min=1, help="Number of suites to run concurrently."),
    json_out: Path | None = typer.Option(None, "--json-out", help="Write the JSON report to this path."),
    no_setup: bool = typer.Option(False, "--no-setup", help="Skip database/setup.surql and tracking tables."),
    no_sync: bool = typer.Option(False, "--no-sync", help="Skip syncing database/schema."),
    no_seed: bool = typer.Option(False, "--no-seed", help="Skip database/seed.surql."),
    base_url: str | None = typer.Option(None, "--base-url", help="Base URL for api_request cases."),
    timeout_ms: int | None = typer.Option(None, "--timeout-ms", min=1, help="Default api_request timeout."),
    keep_db: bool = typer.Option(False, "--keep-db", help="Keep the per-suite databases after the run."),
) -> None:
    """Run declarative test suites from database/tests/suites."""
    settings = _load_settings()
    options = TestOptions(
        suite=suite,
        case=case,
        tags=tags or [],
        fail_fast=fail_fast,
        parallel=parallel,
        json_out=json_out,
        no_setup=no_setup,
        no_sync=no_sync,
        no_seed=no_seed,
        base_url=base_url,
        timeout_ms=timeout_ms,
        keep_db=keep_db,
    )

    started_at = datetime.now(UTC)

    async def _tests() -> tuple[RunReport, SuiteExecutionError | None]:
        try:
            return await run_test_suites(settings, options), None
        except SuiteExecutionError as exc:
            return _partial_report(exc, started_at), exc

    report, fatal = _run(_tests())

    if json_out is not None:
        try:
            write_json_report(json_out, report)
        except SurrealKitError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise typer.Exit(code=EXIT_FAILURE) from exc

    if _json_output:
        _write_stdout(report_json(report))
    else:
        display_test_report(console, report)

    if fatal is not None:
        console.print(f"[red]Error:[/red] {escape(str(fatal))}")
        raise typer.Exit(code=_exit_code_for(fatal)) from fatal

    if report.cases_failed > 0:
        console.print(f"[red]{report.cases_failed} test cases failed[/red]")
        raise typer.Exit(code=EXIT_FAILURE)
