"""Repositories over SurrealKit's server-side tracking tables.

Each repository takes a :class:`DatabaseClient` at construction time and
issues its own statements, so call sites never embed tracking-table SQL.
Upserts are delete-then-create rather than update-in-place: a row either
reflects the latest successful write or is absent.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from surrealkit.executor.base import DatabaseClient, query_value
from surrealkit.models.ledger import MigrationRecord, SyncMetaRecord, SyncRecord

logger = logging.getLogger(__name__)

MIGRATION_TABLE = "_migration"
SYNC_TABLE = "_surrealkit_sync"
SYNC_META_TABLE = "_surrealkit_sync_meta"


def _rows(value: Any) -> list[dict[str, Any]]:
    if isinstance(value, list):
        return [row for row in value if isinstance(row, dict)]
    if isinstance(value, dict):
        return [value]
    return []


def record_key(value: Any) -> str:
    """Return the key part of a record id such as ``_migration:⟨abc⟩``."""
    if isinstance(value, dict) and "id" in value:
        value = value["id"]
    text = str(value)
    _, sep, key = text.partition(":")
    if not sep:
        return text
    return key.strip("⟨⟩`")


class MigrationLedgerRepository:
    """Append-only ledger of applied migration files, keyed by content hash."""

    def __init__(self, client: DatabaseClient) -> None:
        self._client = client

    async def get(self, file_hash: str) -> MigrationRecord | None:
        """Return the ledger row for *file_hash*, if it was ever applied."""
        result = await query_value(
            self._client,
            f"SELECT * FROM type::thing('{MIGRATION_TABLE}', $id);",
            {"id": file_hash},
        )
        rows = _rows(result)
        if not rows:
            return None
        row = rows[0]
        return MigrationRecord(id=file_hash, file=str(row.get("file", "")), applied_at=row.get("applied_at"))

    async def record(self, file_hash: str, file: str) -> None:
        await self._client.execute(
            f"CREATE type::thing('{MIGRATION_TABLE}', $id) "
            "CONTENT { file: $file, applied_at: time::now() };",
            {"id": file_hash, "file": file},
        )

    async def list_applied(self) -> list[MigrationRecord]:
        """Return every ledger row ordered by ``applied_at``."""
        result = await query_value(
            self._client,
            f"SELECT id, file, applied_at FROM {MIGRATION_TABLE} ORDER BY applied_at;",
        )
        return [
            MigrationRecord(
                id=record_key(row.get("id", "")),
                file=str(row.get("file", "")),
                applied_at=row.get("applied_at"),
            )
            for row in _rows(result)
        ]


class SyncHashRepository:
    """Current content hash per schema path."""

    def __init__(self, client: DatabaseClient) -> None:
        self._client = client

    async def all(self) -> dict[str, str]:
        result = await query_value(self._client, f"SELECT path, hash FROM {SYNC_TABLE};")
        tracked: dict[str, str] = {}
        for row in _rows(result):
            path, digest = row.get("path"), row.get("hash")
            if isinstance(path, str) and isinstance(digest, str):
                tracked[path] = digest
        return tracked

    async def get(self, path: str) -> SyncRecord | None:
        result = await query_value(
            self._client,
            f"SELECT path, hash, synced_at FROM {SYNC_TABLE} WHERE path = $path LIMIT 1;",
            {"path": path},
        )
        rows = _rows(result)
        if not rows:
            return None
        return SyncRecord.model_validate(rows[0])

    async def upsert(self, path: str, file_hash: str) -> None:
        await self._client.execute(
            f"DELETE {SYNC_TABLE} WHERE path = $path; "
            f"CREATE {SYNC_TABLE} CONTENT {{ path: $path, hash: $hash, synced_at: time::now() }};",
            {"path": path, "hash": file_hash},
        )


class SyncMetaRepository:
    """Key/value provenance rows (``shared``, ``owner``, ``last_sync``)."""

    def __init__(self, client: DatabaseClient) -> None:
        self._client = client

    async def get(self, key: str) -> SyncMetaRecord | None:
        result = await query_value(
            self._client,
            f"SELECT key, value, updated_at FROM {SYNC_META_TABLE} WHERE key = $key LIMIT 1;",
            {"key": key},
        )
        rows = _rows(result)
        if not rows:
            return None
        return SyncMetaRecord.model_validate(rows[0])

    async def upsert(self, key: str, value: Any) -> None:
        # Variables travel as strings over HTTP, so typed values are inlined as JSON literals.
        literal = json.dumps(value)
        await self._client.execute(
            f"DELETE {SYNC_META_TABLE} WHERE key = $key; "
            f"CREATE {SYNC_META_TABLE} CONTENT {{ key: $key, value: {literal}, updated_at: time::now() }};",
            {"key": key},
        )
        logger.debug("Stored sync meta %s=%s", key, literal)
