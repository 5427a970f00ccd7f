"""Schema snapshot and catalog diffing."""

from surrealkit.diff.schema_diff import diff_schema, removed_entities, render_remove_sql

__all__ = [
    "diff_schema",
    "removed_entities",
    "render_remove_sql",
]
