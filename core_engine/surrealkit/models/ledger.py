"""Models for the migration ledger and the sync reconciler.

Ledger and sync-tracking rows live in the database itself; the summaries
here are the in-process results returned to callers.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from surrealkit.models.schema import EntityKey, FileDiff


class MigrationRecord(BaseModel):
    """One ledger row.  ``id`` is the SHA-256 of the applied file."""

    id: str
    file: str
    applied_at: datetime | str | None = None


class SyncRecord(BaseModel):
    """Current hash for one schema path, as tracked server-side."""

    path: str
    hash: str
    synced_at: datetime | str | None = None


class SyncMetaRecord(BaseModel):
    key: str
    value: Any = None
    updated_at: datetime | str | None = None


class MigrationStatus(str, Enum):
    """Outcome of applying one migration file."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"
    PENDING = "pending"


class MigrationOutcome(BaseModel):
    file: str
    status: MigrationStatus
    error: str | None = None


class MigrationSummary(BaseModel):
    """Per-file outcomes of one ``migrate_all`` invocation, in apply order."""

    source_dir: str
    dry_run: bool = False
    aborted: bool = Field(default=False, description="A failure stopped the run before every file was tried.")
    outcomes: list[MigrationOutcome] = Field(default_factory=list)

    def count(self, status: MigrationStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failed(self) -> int:
        return self.count(MigrationStatus.FAILED)


class SyncResult(BaseModel):
    """What one reconciliation pass observed and did."""

    dry_run: bool = False
    file_diff: FileDiff = Field(default_factory=FileDiff)
    changed: list[str] = Field(default_factory=list, description="Files whose tracked hash differed.")
    applied: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict, description="Apply error text keyed by path.")
    stale_entities: list[EntityKey] = Field(default_factory=list)
    prune_statements: list[str] = Field(default_factory=list)
    pruned: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.changed or self.stale_entities)
