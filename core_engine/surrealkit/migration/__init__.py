"""Migration ledger and schema sync reconciler."""

from surrealkit.migration.ledger import (
    apply_migration_file,
    apply_one,
    collect_migration_files,
    migrate_all,
)
from surrealkit.migration.sync import (
    SyncOptions,
    detect_shared_db,
    run_sync,
    run_sync_once,
    write_sync_meta,
)

__all__ = [
    "SyncOptions",
    "apply_migration_file",
    "apply_one",
    "collect_migration_files",
    "detect_shared_db",
    "migrate_all",
    "run_sync",
    "run_sync_once",
    "write_sync_meta",
]
