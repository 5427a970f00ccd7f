"""Local schema state: file discovery, hashing and snapshot persistence.

Two JSON documents live in the state directory: the file-hash snapshot and
the entity-catalog snapshot.  Both are versioned, written pretty-printed
with a trailing newline, and a missing file loads as an empty snapshot.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from surrealkit.errors import StateIOError
from surrealkit.models.schema import (
    SNAPSHOT_VERSION,
    CatalogSnapshot,
    SchemaFile,
    SchemaSnapshot,
    SchemaSnapshotEntry,
)

logger = logging.getLogger(__name__)

SCHEMA_SUFFIX = ".surql"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def normalize_path(path: Path, root: Path | None = None) -> str:
    """Return *path* relative to *root* (when inside it) with forward slashes."""
    if root is not None:
        try:
            path = path.resolve().relative_to(root.resolve())
        except ValueError:
            pass
    return path.as_posix()


def collect_surql_files(directory: Path) -> list[Path]:
    """Return every ``*.surql`` file under *directory*, sorted by path.

    A missing directory yields an empty list.
    """
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.rglob(f"*{SCHEMA_SUFFIX}") if p.is_file())


def read_schema_file(path: Path, root: Path | None = None) -> SchemaFile:
    """Read one schema file and hash its raw bytes."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise StateIOError("reading", path) from exc
    try:
        sql = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StateIOError("decoding", path) from exc
    return SchemaFile(path=normalize_path(path, root), sql=sql, hash=sha256_hex(raw))


def collect_schema_files(schema_dir: Path, root: Path | None = None) -> list[SchemaFile]:
    """Read every schema file under *schema_dir* in path order."""
    return [read_schema_file(path, root) for path in collect_surql_files(schema_dir)]


def snapshot_from_files(files: list[SchemaFile]) -> SchemaSnapshot:
    """Build a snapshot whose entries are sorted regardless of input order."""
    entries = sorted(
        (SchemaSnapshotEntry(path=f.path, hash=f.hash) for f in files),
        key=lambda e: (e.path, e.hash),
    )
    return SchemaSnapshot(version=SNAPSHOT_VERSION, files=entries)


# ---------------------------------------------------------------------------
# JSON persistence
# ---------------------------------------------------------------------------


def _load_or_default(path: Path, model: type[_ModelT], default: _ModelT) -> _ModelT:
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StateIOError("reading", path) from exc
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise StateIOError("parsing", path) from exc


def _save_pretty(path: Path, value: BaseModel) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StateIOError("creating directory for", path) from exc
    try:
        path.write_text(value.model_dump_json(indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise StateIOError("writing", path) from exc
    logger.debug("Wrote %s", path)


def load_schema_snapshot(path: Path) -> SchemaSnapshot:
    return _load_or_default(path, SchemaSnapshot, SchemaSnapshot())


def save_schema_snapshot(path: Path, snapshot: SchemaSnapshot) -> None:
    _save_pretty(path, snapshot)


def load_catalog_snapshot(path: Path) -> CatalogSnapshot:
    return _load_or_default(path, CatalogSnapshot, CatalogSnapshot())


def save_catalog_snapshot(path: Path, snapshot: CatalogSnapshot) -> None:
    _save_pretty(path, snapshot)
