"""
Top-level public API surface. Stable facades only.
Canonical entrypoint: import flexdb; open a store with flexdb.open_store(path).
Does not import cli.
"""

from __future__ import annotations

from ._version import __version__
from .core import (
    ConstraintViolation,
    FieldType,
    FlexDBError,
    InvalidIdentifier,
    Model,
    Record,
    Schema,
    SchemaError,
    StorageFault,
    UnknownField,
    UnknownSchema,
    Value,
    ValueTypeMismatch,
)
from .registry import SchemaRegistry
from .store import RecordStore, open_store, sqlite_conn

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "ConstraintViolation",
    "FieldType",
    "FlexDBError",
    "InvalidIdentifier",
    "Model",
    "Record",
    "RecordStore",
    "Schema",
    "SchemaError",
    "SchemaRegistry",
    "StorageFault",
    "UnknownField",
    "UnknownSchema",
    "Value",
    "ValueTypeMismatch",
    "open_store",
    "sqlite_conn",
]
