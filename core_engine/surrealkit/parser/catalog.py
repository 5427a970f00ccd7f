"""Catalog extraction from ``DEFINE`` statements.

Builds a structural inventory of the entities a set of schema files
declares.  Recognition is token based and best effort: it reads the entity
kind, its name and (for table-owned kinds) the ``ON <table>`` clause, and
nothing else.  It is not a schema validator.
"""

from __future__ import annotations

from collections.abc import Iterable

from surrealkit.models.schema import SNAPSHOT_VERSION, CatalogSnapshot, EntityKey, SchemaFile
from surrealkit.parser.statements import split_statements, strip_line_comments, tokenize

_MODIFIERS = frozenset({"OVERWRITE", "IF", "NOT", "EXISTS"})
_IDENT_PUNCTUATION = ",;(){}"

_UNSCOPED_KINDS = frozenset({"table", "function", "param", "analyzer", "api"})
_TABLE_SCOPED_KINDS = frozenset({"field", "event", "index"})
_OPTIONALLY_SCOPED_KINDS = frozenset({"access", "user"})


def _keyword(token: str, expected: str) -> bool:
    return token.upper() == expected


def clean_ident(token: str) -> str:
    """Strip surrounding punctuation and cut at the first ``(``.

    ``fn::greet($name)`` becomes ``fn::greet``.
    """
    trimmed = token.strip(_IDENT_PUNCTUATION)
    head, _, _ = trimmed.partition("(")
    return head


def _skip_modifiers(tokens: list[str], idx: int) -> int:
    while idx < len(tokens) and tokens[idx].upper() in _MODIFIERS:
        idx += 1
    return idx


def _find_keyword(tokens: list[str], start: int, keyword: str) -> int | None:
    for i in range(start, len(tokens)):
        if _keyword(tokens[i], keyword):
            return i
    return None


def parse_define_entity(statement: str) -> EntityKey | None:
    """Return the entity declared by *statement*, or ``None``.

    Statements that are not ``DEFINE``, that declare an unrecognised kind, or
    that declare a field, event or index without an ``ON`` clause yield
    ``None``.
    """
    tokens = tokenize(statement)
    if len(tokens) < 3 or not _keyword(tokens[0], "DEFINE"):
        return None

    kind = tokens[1].lower()
    idx = _skip_modifiers(tokens, 2)
    if idx >= len(tokens):
        return None
    name = clean_ident(tokens[idx])

    if kind in _UNSCOPED_KINDS:
        return EntityKey(kind=kind, name=name)

    if kind in _TABLE_SCOPED_KINDS:
        on_idx = _find_keyword(tokens, idx + 1, "ON")
        if on_idx is None:
            return None
        scope_idx = on_idx + 1
        if scope_idx < len(tokens) and _keyword(tokens[scope_idx], "TABLE"):
            scope_idx += 1
        if scope_idx >= len(tokens):
            return None
        return EntityKey(kind=kind, scope=clean_ident(tokens[scope_idx]), name=name)

    if kind in _OPTIONALLY_SCOPED_KINDS:
        scope: str | None = None
        on_idx = _find_keyword(tokens, idx + 1, "ON")
        if on_idx is not None and on_idx + 1 < len(tokens):
            scope = clean_ident(tokens[on_idx + 1])
        return EntityKey(kind=kind, scope=scope, name=name)

    return None


def extract_entities(sql: str) -> set[EntityKey]:
    """Return every entity declared in one schema file's text."""
    entities: set[EntityKey] = set()
    for statement in split_statements(strip_line_comments(sql)):
        entity = parse_define_entity(statement)
        if entity is not None:
            entities.add(entity)
    return entities


def build_catalog_snapshot(files: Iterable[SchemaFile]) -> CatalogSnapshot:
    """Build a catalog from *files*.  Duplicates collapse; order is canonical."""
    entities: set[EntityKey] = set()
    for schema_file in files:
        entities |= extract_entities(schema_file.sql)
    return CatalogSnapshot(version=SNAPSHOT_VERSION, entities=sorted(entities))
