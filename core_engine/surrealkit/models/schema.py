"""Schema file, snapshot and catalog models.

A :class:`SchemaSnapshot` records the content hash of every schema file at
the last successful sync; a :class:`CatalogSnapshot` records the structural
entities (tables, fields, indexes, ...) those files declared.  Diffs are
computed on these structures only, never on SQL text.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

SNAPSHOT_VERSION = 1


class EntityKind(str, Enum):
    """Kinds of schema entity recognised in ``DEFINE`` statements."""

    TABLE = "table"
    FIELD = "field"
    EVENT = "event"
    INDEX = "index"
    FUNCTION = "function"
    PARAM = "param"
    ACCESS = "access"
    ANALYZER = "analyzer"
    USER = "user"
    API = "api"


# Kinds whose REMOVE statement needs the owning table.
SCOPED_KINDS: frozenset[str] = frozenset(
    {EntityKind.FIELD.value, EntityKind.EVENT.value, EntityKind.INDEX.value}
)


class SchemaFile(BaseModel):
    """A schema source file read from disk.  Recomputed on every run."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Project-relative path with forward slashes.")
    sql: str = Field(..., description="Raw file contents.")
    hash: str = Field(..., description="SHA-256 hex digest of the raw file bytes.")


class SchemaSnapshotEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    hash: str


class SchemaSnapshot(BaseModel):
    """Last known file state, sorted by path."""

    version: int = SNAPSHOT_VERSION
    files: list[SchemaSnapshotEntry] = Field(default_factory=list)

    def as_mapping(self) -> dict[str, str]:
        """Return ``path -> hash`` in path order."""
        return {entry.path: entry.hash for entry in sorted(self.files, key=lambda e: (e.path, e.hash))}


class EntityKey(BaseModel):
    """Identity of one schema entity: ``(kind, scope, name)``.

    ``kind`` is kept as a plain lower-case string so that catalogs written by
    newer releases (with kinds this release does not know) still load.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    scope: str | None = None
    name: str

    @field_validator("kind", mode="before")
    @classmethod
    def normalise_kind(cls, v: object) -> object:
        if isinstance(v, Enum):
            v = v.value
        if isinstance(v, str):
            return v.lower()
        return v

    def sort_key(self) -> tuple[str, bool, str, str]:
        # An absent scope orders before any present scope.
        return (self.kind, self.scope is not None, self.scope or "", self.name)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, EntityKey):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def label(self) -> str:
        if self.scope:
            return f"{self.kind} {self.name} ON {self.scope}"
        return f"{self.kind} {self.name}"


class CatalogSnapshot(BaseModel):
    """Structural inventory of entities declared by the schema files."""

    version: int = SNAPSHOT_VERSION
    entities: list[EntityKey] = Field(default_factory=list)

    def entity_set(self) -> set[EntityKey]:
        return set(self.entities)


class FileDiff(BaseModel):
    """File-level classification between two schema snapshots."""

    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed)
