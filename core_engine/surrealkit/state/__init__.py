"""Local snapshot state and server-side tracking tables."""

from surrealkit.state.bootstrap import BOOTSTRAP_SQL, apply_seed, ensure_bootstrap_schema
from surrealkit.state.repository import (
    MigrationLedgerRepository,
    SyncHashRepository,
    SyncMetaRepository,
)
from surrealkit.state.snapshot_store import (
    collect_schema_files,
    collect_surql_files,
    load_catalog_snapshot,
    load_schema_snapshot,
    normalize_path,
    read_schema_file,
    save_catalog_snapshot,
    save_schema_snapshot,
    sha256_hex,
    snapshot_from_files,
)

__all__ = [
    "BOOTSTRAP_SQL",
    "MigrationLedgerRepository",
    "SyncHashRepository",
    "SyncMetaRepository",
    "apply_seed",
    "collect_schema_files",
    "collect_surql_files",
    "ensure_bootstrap_schema",
    "load_catalog_snapshot",
    "load_schema_snapshot",
    "normalize_path",
    "read_schema_file",
    "save_catalog_snapshot",
    "save_schema_snapshot",
    "sha256_hex",
    "snapshot_from_files",
]
