"""
Schema catalog persistence in SQLite.

Records every defined schema (name, field order, field types) so a process
reopening the same database can restore its registry. Requires run_migrations.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Tuple

from ..core.types import Schema, schema_from_pairs
from .migrations import FIELDS_TABLE, SCHEMAS_TABLE

logger = logging.getLogger(__name__)


class SchemaCatalog:
    """Read/write schema definitions from the flexdb_schemas/flexdb_fields tables."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def record(self, schema: Schema) -> None:
        """
        Replace the catalog entry for ``schema.name``. Does not commit; the caller
        owns the transaction so the entry lands together with the table.
        """
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        self._conn.execute(
            f"""
            INSERT INTO {SCHEMAS_TABLE} (schema_name, defined_at_utc)
            VALUES (?, ?)
            ON CONFLICT(schema_name) DO UPDATE SET defined_at_utc = excluded.defined_at_utc;
            """,
            (str(schema.name), now),
        )
        self._conn.execute(f"DELETE FROM {FIELDS_TABLE} WHERE schema_name = ?", (str(schema.name),))
        self._conn.executemany(
            f"INSERT INTO {FIELDS_TABLE} (schema_name, field_name, field_type, position) VALUES (?, ?, ?, ?)",
            [
                (str(schema.name), str(name), field_type.value, position)
                for position, (name, field_type) in enumerate(schema.fields.items())
            ],
        )

    def names(self) -> List[str]:
        cur = self._conn.execute(f"SELECT schema_name FROM {SCHEMAS_TABLE} ORDER BY schema_name")
        return [row[0] for row in cur.fetchall()]

    def load_all(self) -> List[Schema]:
        """Rebuild every catalogued Schema, fields in declaration order."""
        pairs: Dict[str, List[Tuple[str, str]]] = {name: [] for name in self.names()}
        cur = self._conn.execute(
            f"SELECT schema_name, field_name, field_type FROM {FIELDS_TABLE} ORDER BY schema_name, position"
        )
        for schema_name, field_name, field_type in cur.fetchall():
            pairs.setdefault(schema_name, []).append((field_name, field_type))
        schemas = [schema_from_pairs(name, fields) for name, fields in pairs.items()]
        logger.debug("Loaded %d schema(s) from catalog", len(schemas))
        return schemas
