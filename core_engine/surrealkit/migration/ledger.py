"""Content-addressed migration ledger.

A migration file is identified by the SHA-256 of its bytes.  Applying a file
whose hash is already in the ledger is a no-op; editing a file produces a new
hash and therefore a new, additional migration.  Ledger rows are never
updated or removed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from surrealkit.config import Settings
from surrealkit.errors import ExecutionError, StateIOError
from surrealkit.executor.base import DatabaseClient
from surrealkit.models.ledger import MigrationOutcome, MigrationStatus, MigrationSummary
from surrealkit.state.bootstrap import ensure_bootstrap_schema
from surrealkit.state.repository import MigrationLedgerRepository
from surrealkit.state.snapshot_store import collect_surql_files, normalize_path, read_schema_file

logger = logging.getLogger(__name__)


def collect_migration_files(settings: Settings) -> tuple[Path, list[Path]]:
    """Return the migration source directory and its files in apply order.

    Falls back to the schema directory when the migrations directory holds
    no ``.surql`` files.
    """
    files = collect_surql_files(settings.migrations_dir)
    if files:
        return settings.migrations_dir, files

    legacy = collect_surql_files(settings.schema_dir)
    if legacy:
        logger.warning(
            "Using legacy migration source %s because %s is empty",
            normalize_path(settings.schema_dir, settings.project_root),
            normalize_path(settings.migrations_dir, settings.project_root),
        )
        return settings.schema_dir, legacy
    return settings.migrations_dir, []


async def apply_migration_file(
    client: DatabaseClient,
    path: Path,
    root: Path | None = None,
) -> MigrationStatus:
    """Apply *path* unless its content hash is already in the ledger.

    Parameters
    ----------
    client:
        Session with access to the ledger table.
    path:
        The migration file.
    root:
        Project root used to record a repository-relative path.

    Returns
    -------
    MigrationStatus
        ``APPLIED`` or ``SKIPPED``.

    Raises
    ------
    ExecutionError
        The file's SQL or the ledger write failed.
    StateIOError
        The file could not be read.
    """
    schema_file = read_schema_file(path, root)
    ledger = MigrationLedgerRepository(client)

    if await ledger.get(schema_file.hash) is not None:
        return MigrationStatus.SKIPPED

    await client.execute(schema_file.sql)
    await ledger.record(schema_file.hash, schema_file.path)
    return MigrationStatus.APPLIED


async def migrate_all(
    client: DatabaseClient,
    settings: Settings,
    *,
    fail_fast: bool = True,
    dry_run: bool = False,
) -> MigrationSummary:
    """Apply every migration file in lexicographic path order.

    With ``fail_fast`` the first failing file stops the run; otherwise the
    failure is logged and the remaining files are still tried.  ``dry_run``
    only consults the ledger to report which files are pending.
    """
    root = settings.project_root
    if not dry_run:
        await ensure_bootstrap_schema(client, settings)

    source_dir, files = collect_migration_files(settings)
    summary = MigrationSummary(source_dir=normalize_path(source_dir, root), dry_run=dry_run)
    if not files:
        logger.info("No .surql files found in %s", summary.source_dir)
        return summary

    ledger = MigrationLedgerRepository(client)
    for path in files:
        label = normalize_path(path, root)

        if dry_run:
            schema_file = read_schema_file(path, root)
            applied = await ledger.get(schema_file.hash) is not None
            status = MigrationStatus.SKIPPED if applied else MigrationStatus.PENDING
            summary.outcomes.append(MigrationOutcome(file=label, status=status))
            continue

        try:
            status = await apply_migration_file(client, path, root)
        except ExecutionError as exc:
            logger.error("Error applying %s: %s", label, exc)
            summary.outcomes.append(MigrationOutcome(file=label, status=MigrationStatus.FAILED, error=str(exc)))
            if fail_fast:
                summary.aborted = True
                break
            continue

        if status is MigrationStatus.APPLIED:
            logger.info("Applied %s", label)
        else:
            logger.info("Skipped %s (already applied)", label)
        summary.outcomes.append(MigrationOutcome(file=label, status=status))

    return summary


async def apply_one(
    client: DatabaseClient,
    path: Path,
    *,
    track: bool = False,
    root: Path | None = None,
) -> MigrationStatus:
    """Execute a single file, through the ledger when *track* is set."""
    if track:
        return await apply_migration_file(client, path, root)
    try:
        sql = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StateIOError("reading", path) from exc
    await client.execute(sql)
    return MigrationStatus.APPLIED
