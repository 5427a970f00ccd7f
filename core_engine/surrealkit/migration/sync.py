"""Schema reconciliation: one-shot passes and the debounced watch loop.

A pass applies every schema file whose hash differs from the server-side
tracking table, then looks for entities that disappeared from the schema
since the last persisted catalog and (optionally) removes them.  Pruning is
refused on databases flagged as shared unless explicitly allowed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from surrealkit.config import Settings, parse_bool
from surrealkit.diff.schema_diff import diff_schema, removed_entities, render_remove_sql
from surrealkit.errors import ExecutionError, SharedDatabaseError, SurrealKitError
from surrealkit.executor.base import DatabaseClient
from surrealkit.executor.capabilities import supports_remove_api
from surrealkit.models.ledger import SyncResult
from surrealkit.models.schema import CatalogSnapshot, EntityKind, SchemaFile
from surrealkit.parser.catalog import build_catalog_snapshot
from surrealkit.state.bootstrap import ensure_bootstrap_schema
from surrealkit.state.repository import SyncHashRepository, SyncMetaRepository
from surrealkit.state.snapshot_store import (
    collect_schema_files,
    load_catalog_snapshot,
    load_schema_snapshot,
    save_catalog_snapshot,
    save_schema_snapshot,
    snapshot_from_files,
)

logger = logging.getLogger(__name__)

MIN_WATCH_INTERVAL_MS = 250


class SyncOptions(BaseModel):
    """Behaviour switches for :func:`run_sync`."""

    watch: bool = False
    debounce_ms: int = Field(default=MIN_WATCH_INTERVAL_MS, ge=0)
    dry_run: bool = False
    fail_fast: bool = False
    prune: bool = True
    allow_shared_prune: bool = False
    persist_snapshots: bool = Field(
        default=True,
        description="Write the local file-hash and catalog snapshots after a clean pass.",
    )

    @property
    def interval_seconds(self) -> float:
        return max(self.debounce_ms, MIN_WATCH_INTERVAL_MS) / 1000.0


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


async def detect_shared_db(client: DatabaseClient, settings: Settings) -> bool:
    """Return whether pruning should be guarded.

    A parseable ``SURREALKIT_SHARED_DB`` wins over the stored ``shared`` flag.
    """
    override = settings.shared_db_flag()
    if override is not None:
        return override

    record = await SyncMetaRepository(client).get("shared")
    if record is None:
        return False
    if isinstance(record.value, bool):
        return record.value
    if isinstance(record.value, str):
        return parse_bool(record.value) or False
    return False


async def write_sync_meta(client: DatabaseClient, settings: Settings) -> None:
    """Record provenance: the shared flag and owner (when configured) and ``last_sync``."""
    meta = SyncMetaRepository(client)
    shared = settings.shared_db_flag()
    if shared is not None:
        await meta.upsert("shared", shared)
    owner = settings.owner_label()
    if owner is not None:
        await meta.upsert("owner", owner)
    await meta.upsert("last_sync", datetime.now(UTC).isoformat())


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


async def _prune(
    client: DatabaseClient,
    settings: Settings,
    options: SyncOptions,
    result: SyncResult,
) -> None:
    if await detect_shared_db(client, settings) and not options.allow_shared_prune:
        raise SharedDatabaseError(
            "database is marked shared; refusing stale prune without --allow-shared-prune"
        )

    api_supported = True
    if any(entity.kind == EntityKind.API.value for entity in result.stale_entities):
        api_supported = await supports_remove_api(client)

    statements = render_remove_sql(result.stale_entities, api_supported)
    result.prune_statements = statements
    if options.dry_run:
        logger.info("DRY RUN: would prune %d stale entities", len(statements))
        for stmt in statements:
            logger.info("  %s", stmt)
        return

    if statements:
        try:
            await client.execute("\n".join(statements))
        except ExecutionError as exc:
            raise ExecutionError(f"pruning {len(statements)} stale entities: {exc}") from exc
    result.pruned = len(result.stale_entities)
    logger.info("Pruned %d stale entities", result.pruned)


def _applied_catalog(
    files: list[SchemaFile],
    result: SyncResult,
    old_catalog: CatalogSnapshot,
    new_catalog: CatalogSnapshot,
) -> CatalogSnapshot:
    """Return the catalog to persist after a pass.

    Entities declared only by files that failed to apply were never created,
    so they are left out until those files apply cleanly.
    """
    if not result.errors:
        return new_catalog
    healthy = build_catalog_snapshot(f for f in files if f.path not in result.errors)
    entities = healthy.entity_set() | (old_catalog.entity_set() & new_catalog.entity_set())
    return CatalogSnapshot(entities=sorted(entities))


async def run_sync_once(client: DatabaseClient, settings: Settings, options: SyncOptions) -> SyncResult:
    """Run one reconciliation pass.

    Parameters
    ----------
    client:
        Session for the target namespace/database.
    settings:
        Supplies the schema and state directories and the shared-db and
        owner settings.
    options:
        Pass behaviour.  ``watch`` is ignored here.

    Returns
    -------
    SyncResult
        What changed, what was applied and what was (or would be) pruned.

    Raises
    ------
    ExecutionError
        A file failed under ``fail_fast``, or pruning failed.
    SharedDatabaseError
        Pruning was needed on a shared database without the override.
    CapabilityError
        A stale ``api`` entity cannot be removed on this server.
    """
    root = settings.project_root
    files = collect_schema_files(settings.schema_dir, root)
    hashes = SyncHashRepository(client)
    tracked = await hashes.all()

    current_snapshot = snapshot_from_files(files)
    result = SyncResult(
        dry_run=options.dry_run,
        file_diff=diff_schema(load_schema_snapshot(settings.schema_snapshot_path), current_snapshot),
    )

    if not files:
        logger.info("No schema files found in %s", settings.schema_dir)

    for schema_file in files:
        if tracked.get(schema_file.path) == schema_file.hash:
            continue

        result.changed.append(schema_file.path)
        if options.dry_run:
            logger.info("DRY RUN: would apply %s", schema_file.path)
            continue

        try:
            await client.execute(schema_file.sql)
        except ExecutionError as exc:
            result.errors[schema_file.path] = str(exc)
            logger.error("Error applying %s: %s", schema_file.path, exc)
            if options.fail_fast:
                raise ExecutionError(f"applying {schema_file.path}: {exc}") from exc
            continue

        await hashes.upsert(schema_file.path, schema_file.hash)
        result.applied.append(schema_file.path)
        logger.info("Applied %s", schema_file.path)

    old_catalog = load_catalog_snapshot(settings.catalog_snapshot_path)
    new_catalog = build_catalog_snapshot(files)
    result.stale_entities = removed_entities(old_catalog, new_catalog)

    if options.prune and result.stale_entities:
        await _prune(client, settings, options, result)

    if not options.dry_run:
        await write_sync_meta(client, settings)

        if options.persist_snapshots:
            if not result.errors:
                save_schema_snapshot(settings.schema_snapshot_path, current_snapshot)
            # Stale entities keep being reported until they are actually pruned.
            if not result.stale_entities or result.pruned:
                save_catalog_snapshot(
                    settings.catalog_snapshot_path,
                    _applied_catalog(files, result, old_catalog, new_catalog),
                )

    if not result.changed:
        logger.info("Schema already in sync")
    if result.errors:
        logger.warning("Sync completed with %d apply error(s)", len(result.errors))
    if result.stale_entities and not options.prune:
        logger.warning(
            "Detected %d stale entities; rerun without --no-prune to remove",
            len(result.stale_entities),
        )
    return result


async def run_sync(
    client: DatabaseClient,
    settings: Settings,
    options: SyncOptions,
    stop_event: asyncio.Event | None = None,
    on_pass: Callable[[SyncResult], None] | None = None,
) -> SyncResult:
    """Bootstrap the tracking tables, then sync once or watch until stopped.

    In watch mode a pass runs immediately and then once per interval until
    *stop_event* is set.  The event is only checked between passes.  Errors
    in later passes are logged and the loop continues, unless ``fail_fast``
    is set, in which case they propagate.

    Returns
    -------
    SyncResult
        The result of the last completed pass.
    """
    await ensure_bootstrap_schema(client, settings)

    result = await run_sync_once(client, settings, options)
    if on_pass is not None:
        on_pass(result)
    if not options.watch:
        return result

    stop = stop_event or asyncio.Event()
    interval = options.interval_seconds
    logger.info("Watch mode active (%dms interval). Waiting for schema changes...", int(interval * 1000))

    while True:
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except TimeoutError:
            pass
        else:
            logger.info("Stopping schema watch")
            return result

        try:
            result = await run_sync_once(client, settings, options)
        except SurrealKitError as exc:
            if options.fail_fast:
                raise
            logger.error("Sync iteration error: %s", exc)
            continue

        if result.has_changes:
            if options.dry_run:
                logger.info(
                    "Change detected (dry-run): %d schema file(s), %d stale entity(ies) would be pushed",
                    len(result.changed),
                    len(result.stale_entities),
                )
            else:
                logger.info(
                    "Change detected and pushed: %d schema file(s) synced, %d stale entity(ies) pruned",
                    len(result.changed),
                    result.pruned,
                )
        if on_pass is not None:
            on_pass(result)
