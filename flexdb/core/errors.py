"""
Shared exception types for flexdb.
Callers branch on the class, never on message text. Extend only.
"""

from __future__ import annotations

from typing import Optional


class FlexDBError(Exception):
    """Base exception for flexdb; catch this for any package-raised error."""

    pass


class UnknownSchema(FlexDBError, LookupError):
    """An operation referenced a schema name that was never defined."""

    def __init__(self, schema_name: str) -> None:
        super().__init__(f"Unknown schema: {schema_name!r}")
        self.schema_name = schema_name


class UnknownField(FlexDBError, LookupError):
    """A create/update payload referenced a field not declared in the schema."""

    def __init__(self, schema_name: str, field_name: str) -> None:
        super().__init__(f"Schema {schema_name!r} has no field {field_name!r}")
        self.schema_name = schema_name
        self.field_name = field_name


class ConstraintViolation(FlexDBError):
    """The storage engine rejected a write (missing NOT NULL field, type mismatch)."""

    pass


class ValueTypeMismatch(ConstraintViolation):
    """A Value's tag differs from the FieldType of the field it is bound to."""

    def __init__(self, field_name: str, expected: object, actual: object) -> None:
        super().__init__(f"Field {field_name!r} expects {expected} but got {actual}")
        self.field_name = field_name
        self.expected = expected
        self.actual = actual


class SchemaError(FlexDBError):
    """Provisioning storage for a schema failed."""

    def __init__(self, message: str, schema_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.schema_name = schema_name


class InvalidIdentifier(SchemaError, ValueError):
    """A schema or field name falls outside the safe identifier grammar."""

    def __init__(self, name: object, reason: str) -> None:
        super().__init__(f"Invalid identifier {name!r}: {reason}")
        self.name = name
        self.reason = reason


class StorageFault(FlexDBError):
    """Any other underlying storage failure (I/O, corruption, closed connection)."""

    pass


__all__ = [
    "ConstraintViolation",
    "FlexDBError",
    "InvalidIdentifier",
    "SchemaError",
    "StorageFault",
    "UnknownField",
    "UnknownSchema",
    "ValueTypeMismatch",
]
