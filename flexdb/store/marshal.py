"""
Value marshalling between flexdb Values and SQLite column values.

Every function branches over each FieldType and raises on anything unhandled,
so adding a FieldType fails loudly here instead of falling through.
"""

from __future__ import annotations

from typing import Union

from ..core.errors import StorageFault, ValueTypeMismatch
from ..core.types import FieldType, Value

SqlParam = Union[str, int, float]


def column_type(field_type: FieldType) -> str:
    """SQLite column type for a field. SQLite has no boolean, so BOOLEAN is INTEGER."""
    if field_type is FieldType.TEXT:
        return "TEXT"
    if field_type is FieldType.INTEGER:
        return "INTEGER"
    if field_type is FieldType.REAL:
        return "REAL"
    if field_type is FieldType.BOOLEAN:
        return "INTEGER"
    raise TypeError(f"Unhandled field type {field_type!r}")


def to_parameter(field_name: str, field_type: FieldType, value: Value) -> SqlParam:
    """Bound parameter for ``value`` written to a ``field_type`` column. Tags must match exactly."""
    if not isinstance(value, Value):
        raise ValueTypeMismatch(field_name, field_type, type(value).__name__)
    if value.kind is not field_type:
        raise ValueTypeMismatch(field_name, field_type, value.kind)
    if field_type is FieldType.TEXT:
        return str(value.payload)
    if field_type is FieldType.INTEGER:
        return int(value.payload)
    if field_type is FieldType.REAL:
        return float(value.payload)
    if field_type is FieldType.BOOLEAN:
        return 1 if value.payload else 0
    raise TypeError(f"Unhandled field type {field_type!r}")


def from_column(field_name: str, field_type: FieldType, raw: object) -> Value:
    """
    Value for a stored column. BOOLEAN reads any nonzero number as true, so rows
    written by other tools with e.g. -1 or 2 still come back as exactly 1.
    """
    if raw is None:
        raise StorageFault(f"Column {field_name!r} holds NULL despite its NOT NULL constraint")
    if field_type is FieldType.TEXT:
        if not isinstance(raw, str):
            raise StorageFault(f"Column {field_name!r} holds {type(raw).__name__}, expected text")
        return Value.text(raw)
    if field_type is FieldType.INTEGER:
        if not isinstance(raw, int):
            raise StorageFault(f"Column {field_name!r} holds {type(raw).__name__}, expected integer")
        return Value.integer(raw)
    if field_type is FieldType.REAL:
        if not isinstance(raw, (int, float)):
            raise StorageFault(f"Column {field_name!r} holds {type(raw).__name__}, expected real")
        return Value.real(float(raw))
    if field_type is FieldType.BOOLEAN:
        if not isinstance(raw, (int, float)):
            raise StorageFault(f"Column {field_name!r} holds {type(raw).__name__}, expected boolean")
        return Value.boolean(raw != 0)
    raise TypeError(f"Unhandled field type {field_type!r}")
