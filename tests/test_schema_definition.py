"""Schema definition: provisioning, idempotence, incompatible collisions, catalog restore."""

from __future__ import annotations

import sqlite3
import tempfile
from pathlib import Path

import pytest

from flexdb.core.errors import InvalidIdentifier, SchemaError
from flexdb.core.types import FieldType, Schema, Value
from flexdb.db.migrations import catalog_tables_exist
from flexdb.registry import SchemaRegistry
from flexdb.store.record_store import RecordStore


@pytest.fixture
def conn():
    c = sqlite3.connect(":memory:")
    yield c
    c.close()


def _tables(conn):
    cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    return [row[0] for row in cur.fetchall()]


def _columns(conn, table):
    return [(r[1], r[2], r[3], r[5]) for r in conn.execute(f'PRAGMA table_info("{table}")').fetchall()]


def test_store_init_creates_catalog(conn):
    RecordStore(conn)
    assert catalog_tables_exist(conn) is True


def test_define_provisions_table_with_not_null_typed_columns(conn):
    store = RecordStore(conn)
    store.define_schema(
        "widgets",
        {"label": FieldType.TEXT, "qty": FieldType.INTEGER, "price": FieldType.REAL, "ok": FieldType.BOOLEAN},
    )
    assert "widgets" in _tables(conn)
    assert _columns(conn, "widgets") == [
        ("id", "INTEGER", 0, 1),
        ("label", "TEXT", 1, 0),
        ("qty", "INTEGER", 1, 0),
        ("price", "REAL", 1, 0),
        ("ok", "INTEGER", 1, 0),
    ]


def test_define_registers_schema(conn):
    store = RecordStore(conn)
    schema = store.define_schema("widgets", {"label": "text"})
    assert store.lookup("widgets") == schema
    assert store.registry.lookup("widgets") is schema
    assert store.schemas() == ["widgets"]


def test_define_twice_is_idempotent(conn):
    store = RecordStore(conn)
    fields = {"label": FieldType.TEXT, "qty": FieldType.INTEGER}
    store.define_schema("widgets", fields)
    rid = store.create("widgets", {"label": Value.text("a"), "qty": Value.integer(1)})
    tables_once = _tables(conn)
    columns_once = _columns(conn, "widgets")

    store.define_schema("widgets", fields)

    assert _tables(conn) == tables_once
    assert _columns(conn, "widgets") == columns_once
    assert store.get("widgets", rid) is not None
    assert store.schemas() == ["widgets"]


def test_incompatible_redefinition_raises_schema_error_and_keeps_registry(conn):
    store = RecordStore(conn)
    original = store.define_schema("widgets", {"label": FieldType.TEXT})
    with pytest.raises(SchemaError) as exc_info:
        store.define_schema("widgets", {"label": FieldType.INTEGER})
    assert exc_info.value.schema_name == "widgets"
    assert store.lookup("widgets") == original
    with pytest.raises(SchemaError):
        store.define_schema("widgets", {"label": FieldType.TEXT, "extra": FieldType.REAL})
    assert store.lookup("widgets") == original


def test_failed_catalog_write_rolls_back_new_table(conn, monkeypatch):
    store = RecordStore(conn)

    def broken_record(schema):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store._catalog, "record", broken_record)
    with pytest.raises(SchemaError):
        store.define_schema("gadgets", {"label": FieldType.TEXT})
    assert "gadgets" not in _tables(conn)
    assert store.lookup("gadgets") is None

    monkeypatch.undo()
    store.define_schema("gadgets", {"label": FieldType.TEXT})
    assert "gadgets" in _tables(conn)


def test_collision_with_foreign_table_raises_schema_error(conn):
    conn.execute("CREATE TABLE legacy (pk TEXT, payload BLOB)")
    conn.commit()
    store = RecordStore(conn)
    with pytest.raises(SchemaError):
        store.define_schema("legacy", {"payload": FieldType.TEXT})
    assert store.lookup("legacy") is None


def test_case_folded_name_collision_detected(conn):
    store = RecordStore(conn)
    store.define_schema("widgets", {"label": FieldType.TEXT})
    with pytest.raises(SchemaError):
        store.define_schema("WIDGETS", {"size": FieldType.REAL})


@pytest.mark.parametrize(
    "name",
    ["", "1abc", "has space", "semi;colon", 'quo"te', "select", "Table", "sqlite_master", "flexdb_schemas", "x" * 65],
)
def test_invalid_schema_names_rejected(conn, name):
    store = RecordStore(conn)
    tables_before = _tables(conn)
    with pytest.raises(InvalidIdentifier):
        store.define_schema(name, {"a": FieldType.TEXT})
    assert _tables(conn) == tables_before


@pytest.mark.parametrize("field_name", ["id", "ID", "rowid", "drop table", "order", "9lives"])
def test_invalid_field_names_rejected(conn, field_name):
    store = RecordStore(conn)
    with pytest.raises(InvalidIdentifier):
        store.define_schema("widgets", {field_name: FieldType.TEXT})
    assert "widgets" not in _tables(conn)


def test_case_insensitive_duplicate_fields_rejected(conn):
    store = RecordStore(conn)
    with pytest.raises(InvalidIdentifier):
        store.define_schema("widgets", [("label", FieldType.TEXT), ("LABEL", FieldType.TEXT)])


def test_unknown_field_type_name_is_schema_error(conn):
    store = RecordStore(conn)
    with pytest.raises(SchemaError):
        store.define_schema("widgets", {"label": "varchar"})


def test_invalid_identifier_is_schema_error_and_value_error():
    with pytest.raises(SchemaError):
        Schema("bad name", {})
    with pytest.raises(ValueError):
        Schema("bad name", {})


def test_define_rejects_non_schema(conn):
    store = RecordStore(conn)
    with pytest.raises(TypeError):
        store.define({"name": "widgets"})


def test_shared_registry_is_used(conn):
    registry = SchemaRegistry()
    store = RecordStore(conn, registry)
    store.define_schema("widgets", {"label": FieldType.TEXT})
    assert "widgets" in registry


def test_catalog_restore_across_connections():
    """Schemas defined through one connection are restored by a new store on the same file."""
    with tempfile.NamedTemporaryFile(suffix=".sqlite", delete=False) as f:
        path = f.name
    try:
        conn = sqlite3.connect(path)
        store = RecordStore(conn)
        store.define_schema("zebra", [("stripes", FieldType.INTEGER), ("name", FieldType.TEXT)])
        store.define_schema("empty", {})
        rid = store.create("zebra", {"stripes": Value.integer(40), "name": Value.text("Zed")})
        conn.close()

        conn = sqlite3.connect(path)
        fresh = RecordStore(conn)
        assert fresh.schemas() == []
        assert fresh.restore() == ["empty", "zebra"]
        zebra = fresh.lookup("zebra")
        assert list(zebra.fields) == ["stripes", "name"]
        assert zebra.fields["stripes"] is FieldType.INTEGER
        assert fresh.lookup("empty").fields == {}
        assert fresh.get("zebra", rid).data["name"] == Value.text("Zed")
        conn.close()
    finally:
        Path(path).unlink(missing_ok=True)


def test_catalog_keeps_one_entry_per_schema(conn):
    store = RecordStore(conn)
    store.define_schema("widgets", {"label": FieldType.TEXT})
    store.define_schema("widgets", {"label": FieldType.TEXT})
    assert conn.execute("SELECT COUNT(*) FROM flexdb_schemas").fetchone()[0] == 1
    assert conn.execute("SELECT COUNT(*) FROM flexdb_fields").fetchone()[0] == 1
