"""
Statement text for schema-driven tables.

Names only ever arrive as Identifier instances (validated at schema definition)
and are double-quoted on top of that. Values are never interpolated: every
builder emits ``?`` placeholders and callers bind parameters.
"""

from __future__ import annotations

from typing import Sequence

from ..core.identifiers import Identifier
from ..core.types import Schema
from .marshal import column_type

ID_COLUMN = "id"


def quote_identifier(name: Identifier) -> str:
    """Double-quote a validated identifier for SQLite."""
    if not isinstance(name, Identifier):
        raise TypeError(f"Refusing to quote unvalidated name {name!r}; wrap it in Identifier first")
    return '"' + name.replace('"', '""') + '"'


def _columns(names: Sequence[Identifier]) -> str:
    return ", ".join(quote_identifier(n) for n in names)


def create_table_sql(schema: Schema) -> str:
    """CREATE TABLE IF NOT EXISTS with an identity column and one NOT NULL column per field."""
    parts = [f'"{ID_COLUMN}" INTEGER PRIMARY KEY AUTOINCREMENT']
    for name, field_type in schema.fields.items():
        parts.append(f"{quote_identifier(name)} {column_type(field_type)} NOT NULL")
    return f"CREATE TABLE IF NOT EXISTS {quote_identifier(schema.name)} ({', '.join(parts)})"


def insert_sql(table: Identifier, columns: Sequence[Identifier]) -> str:
    if not columns:
        return f"INSERT INTO {quote_identifier(table)} DEFAULT VALUES"
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {quote_identifier(table)} ({_columns(columns)}) VALUES ({placeholders})"


def select_sql(schema: Schema, *, by_id: bool) -> str:
    """SELECT id plus every declared field, in declaration order."""
    cols = [f'"{ID_COLUMN}"'] + [quote_identifier(n) for n in schema.fields]
    sql = f"SELECT {', '.join(cols)} FROM {quote_identifier(schema.name)}"
    if by_id:
        return sql + f' WHERE "{ID_COLUMN}" = ?'
    return sql + f' ORDER BY "{ID_COLUMN}"'


def update_sql(table: Identifier, columns: Sequence[Identifier]) -> str:
    if not columns:
        raise ValueError("update_sql needs at least one column")
    sets = ", ".join(f"{quote_identifier(n)} = ?" for n in columns)
    return f'UPDATE {quote_identifier(table)} SET {sets} WHERE "{ID_COLUMN}" = ?'


def delete_sql(table: Identifier) -> str:
    return f'DELETE FROM {quote_identifier(table)} WHERE "{ID_COLUMN}" = ?'


def count_sql(table: Identifier) -> str:
    return f"SELECT COUNT(*) FROM {quote_identifier(table)}"


def table_info_sql(table: Identifier) -> str:
    return f"PRAGMA table_info({quote_identifier(table)})"
