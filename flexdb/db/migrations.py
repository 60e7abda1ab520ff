"""
Idempotent database migrations.

Only flexdb's own bookkeeping (the schema catalog) lives here; record tables
are provisioned per schema by the record store. Uses CREATE ... IF NOT EXISTS
so it can be re-run safely at any time.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMAS_TABLE = "flexdb_schemas"
FIELDS_TABLE = "flexdb_fields"


def catalog_tables_exist(conn: sqlite3.Connection) -> bool:
    """Return True if flexdb_schemas and flexdb_fields exist."""
    cur = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name IN (?, ?)",
        (SCHEMAS_TABLE, FIELDS_TABLE),
    )
    names = {row[0] for row in cur.fetchall()}
    return names == {SCHEMAS_TABLE, FIELDS_TABLE}


def run_migrations(conn: sqlite3.Connection) -> None:
    """
    Apply all schema migrations idempotently.

    Safe to call on every startup; only creates what's missing.
    """
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {SCHEMAS_TABLE} (
            schema_name TEXT PRIMARY KEY,
            defined_at_utc TEXT NOT NULL
        );
        """
    )
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {FIELDS_TABLE} (
            schema_name TEXT NOT NULL REFERENCES {SCHEMAS_TABLE}(schema_name) ON DELETE CASCADE,
            field_name TEXT NOT NULL,
            field_type TEXT NOT NULL,
            position INTEGER NOT NULL,
            PRIMARY KEY (schema_name, field_name)
        );
        """
    )
    conn.execute(
        f"CREATE INDEX IF NOT EXISTS idx_{FIELDS_TABLE}_position ON {FIELDS_TABLE}(schema_name, position);"
    )
    conn.commit()
    logger.debug("Database migrations complete")
