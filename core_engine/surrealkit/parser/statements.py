"""Quote-aware statement splitting for SurrealQL schema files.

This is a shallow scanner.  It knows about single, double and
backtick quoting and backslash escapes, which is enough to find statement
boundaries in schema files.  Tokenising is a plain whitespace split with no
further quote awareness.
"""

from __future__ import annotations

_LINE_COMMENT_PREFIXES = ("--", "//")


def strip_line_comments(sql: str) -> str:
    """Drop whole lines whose first non-blank characters start a comment.

    Inline trailing comments are left in place.
    """
    return "\n".join(
        line for line in sql.splitlines() if not line.lstrip().startswith(_LINE_COMMENT_PREFIXES)
    )


def split_statements(sql: str) -> list[str]:
    """Split *sql* on ``;`` outside quoted regions.

    Parameters
    ----------
    sql:
        Raw statement text, normally already passed through
        :func:`strip_line_comments`.

    Returns
    -------
    list[str]
        Trimmed, non-empty statements without their terminating ``;``.  A
        trailing statement with no terminator is included.
    """
    statements: list[str] = []
    buf: list[str] = []
    in_single = in_double = in_backtick = False
    prev_escape = False

    for ch in sql:
        if ch == "'" and not (in_double or in_backtick or prev_escape):
            in_single = not in_single
        elif ch == '"' and not (in_single or in_backtick or prev_escape):
            in_double = not in_double
        elif ch == "`" and not (in_single or in_double or prev_escape):
            in_backtick = not in_backtick
        elif ch == ";" and not (in_single or in_double or in_backtick):
            stmt = "".join(buf).strip()
            if stmt:
                statements.append(stmt)
            buf.clear()
            prev_escape = False
            continue

        # A backslash escapes exactly one following character.
        prev_escape = ch == "\\" and not prev_escape
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        statements.append(tail)
    return statements


def tokenize(statement: str) -> list[str]:
    """Split a statement into whitespace-separated words."""
    return statement.split()
