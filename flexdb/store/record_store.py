"""
Record store: validated CRUD over schema-driven SQLite tables.

Owns the schema registry and the (externally opened) connection. Every
operation resolves the schema and checks field names before any statement is
built; values always travel as bound parameters. Engine errors are translated
into the flexdb taxonomy, never retried and never swallowed.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.errors import ConstraintViolation, SchemaError, StorageFault, UnknownField
from ..core.identifiers import Identifier
from ..core.types import FieldType, Record, Schema, Value
from ..db.catalog import SchemaCatalog
from ..db.migrations import run_migrations
from ..registry import SchemaRegistry
from .marshal import SqlParam, column_type, from_column, to_parameter
from .statements import (
    ID_COLUMN,
    count_sql,
    create_table_sql,
    delete_sql,
    insert_sql,
    select_sql,
    table_info_sql,
    update_sql,
)

logger = logging.getLogger(__name__)

FieldSpec = Union[Mapping[str, Union[FieldType, str]], Sequence[Tuple[str, Union[FieldType, str]]]]


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """IntegrityError -> ConstraintViolation; any other sqlite3.Error -> StorageFault."""
    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise ConstraintViolation(f"{action}: {exc}") from exc
    except sqlite3.Error as exc:
        raise StorageFault(f"{action}: {exc}") from exc


class RecordStore:
    """
    Schema registry plus storage handle. Construct once per connection and pass
    it to callers; there is no module-level store.

    Not thread-safe by itself: concurrent use relies on SQLite's own locking, so
    wrap calls in a lock if one connection is shared between threads.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        self._conn = conn
        self.registry = registry if registry is not None else SchemaRegistry()
        self._catalog = SchemaCatalog(conn)
        with _storage_errors("apply catalog migrations"):
            run_migrations(conn)

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    # ---- Schemas ------------------------------------------------------------

    def define(self, schema: Schema) -> None:
        """
        Provision the table for ``schema`` and register it.

        Idempotent for an identical definition. Raises SchemaError (registry left
        unchanged) when the engine refuses the DDL or an existing table of that
        name has different columns.
        """
        if not isinstance(schema, Schema):
            raise TypeError(f"Expected Schema, got {type(schema).__name__}")
        try:
            with self._conn:
                # sqlite3 does not open a transaction before DDL on its own
                if not self._conn.in_transaction:
                    self._conn.execute("BEGIN")
                self._conn.execute(create_table_sql(schema))
                self._verify_table(schema)
                self._catalog.record(schema)
        except sqlite3.Error as exc:
            raise SchemaError(f"Cannot provision schema {schema.name!r}: {exc}", str(schema.name)) from exc
        self.registry.define(schema)
        logger.info("Defined schema %s", schema.describe())

    def define_schema(self, name: str, fields: FieldSpec) -> Schema:
        """Build a Schema from ``name`` and ``fields`` (mapping or pairs) and define it."""
        schema = Schema(name, fields)
        self.define(schema)
        return schema

    def lookup(self, name: str) -> Optional[Schema]:
        return self.registry.lookup(name)

    def schemas(self) -> List[str]:
        return self.registry.names()

    def restore(self) -> List[str]:
        """Load every catalogued schema into the registry. Returns the restored names."""
        with _storage_errors("restore schemas from catalog"):
            schemas = self._catalog.load_all()
        for schema in schemas:
            self.registry.define(schema)
        names = [str(s.name) for s in schemas]
        if names:
            logger.debug("Restored schemas: %s", ", ".join(names))
        return names

    def _verify_table(self, schema: Schema) -> None:
        rows = self._conn.execute(table_info_sql(schema.name)).fetchall()
        # table_info row: (cid, name, type, notnull, dflt_value, pk)
        actual = {str(r[1]).lower(): (str(r[2]).upper(), bool(r[3]), bool(r[5])) for r in rows}
        expected = {ID_COLUMN: ("INTEGER", False, True)}
        for name, field_type in schema.fields.items():
            expected[name.lower()] = (column_type(field_type), True, False)
        if actual == expected:
            return
        missing = sorted(set(expected) - set(actual))
        extra = sorted(set(actual) - set(expected))
        changed = sorted(n for n in set(expected) & set(actual) if expected[n] != actual[n])
        raise SchemaError(
            f"Table {schema.name!r} already exists with incompatible columns "
            f"(missing={missing}, unexpected={extra}, differing={changed})",
            str(schema.name),
        )

    # ---- Records ------------------------------------------------------------

    def _bind(self, schema: Schema, fields: Mapping[str, Value]) -> Tuple[List[Identifier], List[SqlParam]]:
        """Validate every name, then every value, then return (columns, params)."""
        for name in fields:
            if not isinstance(name, str) or name not in schema.fields:
                raise UnknownField(str(schema.name), name)
        columns: List[Identifier] = []
        params: List[SqlParam] = []
        for name, value in fields.items():
            params.append(to_parameter(name, schema.fields[name], value))
            columns.append(Identifier(name))
        return columns, params

    def _to_record(self, schema: Schema, row: Sequence[object]) -> Record:
        data = {}
        for offset, (name, field_type) in enumerate(schema.fields.items(), start=1):
            data[str(name)] = from_column(name, field_type, row[offset])
        return Record(id=int(row[0]), data=data)

    def create(self, schema_name: str, fields: Mapping[str, Value]) -> int:
        """
        Insert one record and return its id. Omitted fields are not defaulted:
        the NOT NULL constraint rejects them as ConstraintViolation.
        """
        schema = self.registry.require(schema_name)
        columns, params = self._bind(schema, fields)
        with _storage_errors(f"create {schema.name}"):
            with self._conn:
                cur = self._conn.execute(insert_sql(schema.name, columns), params)
        record_id = int(cur.lastrowid)
        logger.debug("Created %s id=%d", schema.name, record_id)
        return record_id

    def get(self, schema_name: str, record_id: int) -> Optional[Record]:
        schema = self.registry.require(schema_name)
        with _storage_errors(f"get {schema.name} id={record_id}"):
            row = self._conn.execute(select_sql(schema, by_id=True), (record_id,)).fetchone()
        if row is None:
            return None
        return self._to_record(schema, row)

    def get_all(self, schema_name: str) -> List[Record]:
        """Every record of the schema. Callers must not rely on the order."""
        schema = self.registry.require(schema_name)
        with _storage_errors(f"get_all {schema.name}"):
            rows = self._conn.execute(select_sql(schema, by_id=False)).fetchall()
        return [self._to_record(schema, row) for row in rows]

    def update(self, schema_name: str, record_id: int, fields: Mapping[str, Value]) -> bool:
        """
        Partial update of the supplied fields. An empty mapping is a no-op that
        returns False without touching storage. True iff a row was affected.
        """
        schema = self.registry.require(schema_name)
        columns, params = self._bind(schema, fields)
        if not columns:
            return False
        with _storage_errors(f"update {schema.name} id={record_id}"):
            with self._conn:
                cur = self._conn.execute(update_sql(schema.name, columns), params + [record_id])
        logger.debug("Updated %s id=%s rows=%d", schema.name, record_id, cur.rowcount)
        return cur.rowcount > 0

    def delete(self, schema_name: str, record_id: int) -> bool:
        schema = self.registry.require(schema_name)
        with _storage_errors(f"delete {schema.name} id={record_id}"):
            with self._conn:
                cur = self._conn.execute(delete_sql(schema.name), (record_id,))
        logger.debug("Deleted %s id=%s rows=%d", schema.name, record_id, cur.rowcount)
        return cur.rowcount > 0

    def count(self, schema_name: str) -> int:
        schema = self.registry.require(schema_name)
        with _storage_errors(f"count {schema.name}"):
            return int(self._conn.execute(count_sql(schema.name)).fetchone()[0])

    def __repr__(self) -> str:
        return f"RecordStore(schemas={self.registry.names()})"


__all__ = ["RecordStore"]
