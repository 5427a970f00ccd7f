"""SurrealQL statement splitting and catalog extraction."""

from surrealkit.parser.catalog import (
    build_catalog_snapshot,
    clean_ident,
    extract_entities,
    parse_define_entity,
)
from surrealkit.parser.statements import split_statements, strip_line_comments, tokenize

__all__ = [
    "build_catalog_snapshot",
    "clean_ident",
    "extract_entities",
    "parse_define_entity",
    "split_statements",
    "strip_line_comments",
    "tokenize",
]
