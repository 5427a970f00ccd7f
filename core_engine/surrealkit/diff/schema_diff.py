"""File- and entity-level diffs between schema snapshots.

File diffs compare ``path -> hash`` maps only; SQL text is never compared.
Entity diffs are set differences over catalog snapshots and feed the
``REMOVE`` statements used when pruning.

All outputs are deterministic: identical inputs produce identical lists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from surrealkit.errors import CapabilityError, MissingScopeError
from surrealkit.models.schema import CatalogSnapshot, EntityKey, EntityKind, FileDiff, SchemaSnapshot

logger = logging.getLogger(__name__)


def diff_schema(old: SchemaSnapshot, new: SchemaSnapshot) -> FileDiff:
    """Classify every path as added, modified or removed.

    Parameters
    ----------
    old:
        The last persisted snapshot.
    new:
        The snapshot built from the files currently on disk.

    Returns
    -------
    FileDiff
        Paths in each list appear in path order.
    """
    old_map = old.as_mapping()
    new_map = new.as_mapping()

    added: list[str] = []
    modified: list[str] = []
    for path, digest in new_map.items():
        previous = old_map.get(path)
        if previous is None:
            added.append(path)
        elif previous != digest:
            modified.append(path)

    removed = [path for path in old_map if path not in new_map]

    return FileDiff(added=added, modified=modified, removed=removed)


def removed_entities(old: CatalogSnapshot, new: CatalogSnapshot) -> list[EntityKey]:
    """Return entities present in *old* but absent from *new*, in key order."""
    return sorted(old.entity_set() - new.entity_set())


def _require_scope(entity: EntityKey, object_name: str) -> str:
    if not entity.scope:
        raise MissingScopeError(
            f"cannot render REMOVE {object_name} for '{entity.name}' because scope is missing"
        )
    return entity.scope


def _with_optional_scope(object_name: str, entity: EntityKey) -> str:
    if entity.scope:
        return f"REMOVE {object_name} {entity.name} ON {entity.scope};"
    return f"REMOVE {object_name} {entity.name};"


def render_remove_sql(entities: Iterable[EntityKey], api_removal_supported: bool) -> list[str]:
    """Render one ``REMOVE`` statement per stale entity.

    Parameters
    ----------
    entities:
        Stale entities, usually from :func:`removed_entities`.
    api_removal_supported:
        Whether the target server understands ``REMOVE API``.

    Returns
    -------
    list[str]
        Statements in input order.  Entities of unknown kinds are skipped.

    Raises
    ------
    CapabilityError
        An ``api`` entity is present and the server cannot remove it.
    MissingScopeError
        A field, event or index entity has no owning table.
    """
    statements: list[str] = []
    for entity in entities:
        kind = entity.kind
        if kind == EntityKind.TABLE.value:
            statements.append(f"REMOVE TABLE {entity.name};")
        elif kind in (EntityKind.FIELD.value, EntityKind.EVENT.value, EntityKind.INDEX.value):
            object_name = kind.upper()
            scope = _require_scope(entity, object_name)
            statements.append(f"REMOVE {object_name} {entity.name} ON {scope};")
        elif kind in (EntityKind.FUNCTION.value, EntityKind.PARAM.value, EntityKind.ANALYZER.value):
            statements.append(f"REMOVE {kind.upper()} {entity.name};")
        elif kind in (EntityKind.ACCESS.value, EntityKind.USER.value):
            statements.append(_with_optional_scope(kind.upper(), entity))
        elif kind == EntityKind.API.value:
            if not api_removal_supported:
                raise CapabilityError(
                    f"API removal requested for '{entity.name}' but this SurrealDB server does not "
                    "support `REMOVE API`. Use a manual migration or upgrade server support."
                )
            statements.append(f"REMOVE API {entity.name};")
        else:
            logger.debug("Skipping REMOVE for unsupported entity kind %r (%s)", kind, entity.name)
    return statements
