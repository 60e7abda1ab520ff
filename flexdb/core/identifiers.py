"""
Validated identifiers for schema (table) and field (column) names.

Names are interpolated into statement text, so they are admitted only through a
whitelist grammar: ASCII letter or underscore first, then letters, digits and
underscores. SQLite keywords and engine/catalog-reserved prefixes are refused.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import InvalidIdentifier

MAX_IDENTIFIER_LENGTH = 64

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Prefixes owned by the engine (sqlite_) and by the schema catalog (flexdb_).
RESERVED_PREFIXES = ("sqlite_", "flexdb_")

# Field names that would shadow the identity column or SQLite's rowid aliases.
RESERVED_FIELD_NAMES = frozenset({"id", "rowid", "oid", "_rowid_"})

SQLITE_KEYWORDS = frozenset(
    """
    ABORT ACTION ADD AFTER ALL ALTER ALWAYS ANALYZE AND AS ASC ATTACH AUTOINCREMENT
    BEFORE BEGIN BETWEEN BY CASCADE CASE CAST CHECK COLLATE COLUMN COMMIT CONFLICT
    CONSTRAINT CREATE CROSS CURRENT CURRENT_DATE CURRENT_TIME CURRENT_TIMESTAMP
    DATABASE DEFAULT DEFERRABLE DEFERRED DELETE DESC DETACH DISTINCT DO DROP EACH
    ELSE END ESCAPE EXCEPT EXCLUDE EXCLUSIVE EXISTS EXPLAIN FAIL FILTER FIRST
    FOLLOWING FOR FOREIGN FROM FULL GENERATED GLOB GROUP GROUPS HAVING IF IGNORE
    IMMEDIATE IN INDEX INDEXED INITIALLY INNER INSERT INSTEAD INTERSECT INTO IS
    ISNULL JOIN KEY LAST LEFT LIKE LIMIT MATCH MATERIALIZED NATURAL NO NOT NOTHING
    NOTNULL NULL NULLS OF OFFSET ON OR ORDER OTHERS OUTER OVER PARTITION PLAN
    PRAGMA PRECEDING PRIMARY QUERY RAISE RANGE RECURSIVE REFERENCES REGEXP REINDEX
    RELEASE RENAME REPLACE RESTRICT RETURNING RIGHT ROLLBACK ROW ROWS SAVEPOINT
    SELECT SET TABLE TEMP TEMPORARY THEN TIES TO TRANSACTION TRIGGER UNBOUNDED
    UNION UNIQUE UPDATE USING VACUUM VALUES VIEW VIRTUAL WHEN WHERE WINDOW WITH
    WITHOUT
    """.split()
)


def identifier_problem(name: object) -> Optional[str]:
    """Return why ``name`` is not a safe identifier, or None if it is."""
    if not isinstance(name, str):
        return f"expected str, got {type(name).__name__}"
    if not name:
        return "must not be empty"
    if len(name) > MAX_IDENTIFIER_LENGTH:
        return f"longer than {MAX_IDENTIFIER_LENGTH} characters"
    if not _IDENTIFIER_RE.match(name):
        return "only ASCII letters, digits and underscores allowed, not starting with a digit"
    if name.upper() in SQLITE_KEYWORDS:
        return "reserved SQL keyword"
    lowered = name.lower()
    for prefix in RESERVED_PREFIXES:
        if lowered.startswith(prefix):
            return f"prefix {prefix!r} is reserved"
    return None


class Identifier(str):
    """A ``str`` that passed the identifier grammar. Construct as ``Identifier(name)``."""

    __slots__ = ()

    def __new__(cls, name: object) -> "Identifier":
        if isinstance(name, Identifier):
            return name
        problem = identifier_problem(name)
        if problem is not None:
            raise InvalidIdentifier(name, problem)
        return super().__new__(cls, name)

    def __repr__(self) -> str:
        return f"Identifier({str.__repr__(self)})"


def field_identifier(name: object) -> Identifier:
    """Identifier for a field; also refuses names colliding with the identity column."""
    ident = Identifier(name)
    if ident.lower() in RESERVED_FIELD_NAMES:
        raise InvalidIdentifier(name, "reserved for the identity column")
    return ident


__all__ = [
    "Identifier",
    "MAX_IDENTIFIER_LENGTH",
    "RESERVED_FIELD_NAMES",
    "RESERVED_PREFIXES",
    "SQLITE_KEYWORDS",
    "field_identifier",
    "identifier_problem",
]
