"""
Stable facade: type model, identifiers and error taxonomy. No storage access.
Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    ConstraintViolation,
    FlexDBError,
    InvalidIdentifier,
    SchemaError,
    StorageFault,
    UnknownField,
    UnknownSchema,
    ValueTypeMismatch,
)
from .identifiers import Identifier, field_identifier
from .types import FieldType, Model, Record, Schema, Value, schema_from_pairs

__all__ = [
    "ConstraintViolation",
    "FieldType",
    "FlexDBError",
    "Identifier",
    "InvalidIdentifier",
    "Model",
    "Record",
    "Schema",
    "SchemaError",
    "StorageFault",
    "UnknownField",
    "UnknownSchema",
    "Value",
    "ValueTypeMismatch",
    "field_identifier",
    "schema_from_pairs",
]
