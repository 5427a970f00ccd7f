"""Domain models for the SurrealKit engine."""

from surrealkit.models.ledger import (
    MigrationOutcome,
    MigrationRecord,
    MigrationStatus,
    MigrationSummary,
    SyncMetaRecord,
    SyncRecord,
    SyncResult,
)
from surrealkit.models.report import AssertionReport, CaseReport, RunReport, SuiteReport
from surrealkit.models.schema import (
    SNAPSHOT_VERSION,
    CatalogSnapshot,
    EntityKey,
    EntityKind,
    FileDiff,
    SchemaFile,
    SchemaSnapshot,
    SchemaSnapshotEntry,
)
from surrealkit.models.suite_spec import (
    ActorKind,
    ActorSpec,
    ApiRequestCase,
    FilterInput,
    FixtureSpec,
    GlobalDefaults,
    GlobalTestConfig,
    HeaderAssertionSpec,
    JsonAssertionSpec,
    LoadedSpecs,
    LoadedSuite,
    PermissionAction,
    PermissionRuleSpec,
    PermissionsMatrixCase,
    SchemaBehaviorCase,
    SchemaMetadataCase,
    SqlExpectCase,
    SuiteSpec,
    TestOptions,
)

__all__ = [
    "SNAPSHOT_VERSION",
    "ActorKind",
    "ActorSpec",
    "ApiRequestCase",
    "AssertionReport",
    "CaseReport",
    "CatalogSnapshot",
    "EntityKey",
    "EntityKind",
    "FileDiff",
    "FilterInput",
    "FixtureSpec",
    "GlobalDefaults",
    "GlobalTestConfig",
    "HeaderAssertionSpec",
    "JsonAssertionSpec",
    "LoadedSpecs",
    "LoadedSuite",
    "MigrationOutcome",
    "MigrationRecord",
    "MigrationStatus",
    "MigrationSummary",
    "PermissionAction",
    "PermissionRuleSpec",
    "PermissionsMatrixCase",
    "RunReport",
    "SchemaBehaviorCase",
    "SchemaFile",
    "SchemaMetadataCase",
    "SchemaSnapshot",
    "SchemaSnapshotEntry",
    "SqlExpectCase",
    "SuiteReport",
    "SuiteSpec",
    "SyncMetaRecord",
    "SyncRecord",
    "SyncResult",
    "TestOptions",
]
