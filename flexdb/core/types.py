"""
Type model: FieldType, Value, Schema and Record.

Data is carried in frozen dataclasses for immutability; Value is a closed tagged
union over FieldType with no untyped fallback.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import numpy as np

from .identifiers import Identifier, field_identifier
from .errors import InvalidIdentifier, SchemaError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_TRUE_WORDS = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "f", "no", "n", "off"})


class FieldType(enum.Enum):
    """Primitive kind a field may hold."""

    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    BOOLEAN = "boolean"

    @classmethod
    def from_name(cls, name: Union[str, "FieldType"]) -> "FieldType":
        """Accept a FieldType or its case-insensitive name ("text", "INTEGER", ...)."""
        if isinstance(name, FieldType):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            choices = ", ".join(ft.value for ft in cls)
            raise ValueError(f"Unknown field type {name!r}; expected one of: {choices}") from None

    def __str__(self) -> str:
        return self.value


def _unwrap_scalar(obj: Any) -> Any:
    """numpy scalars (from pandas rows) become the equivalent Python scalar."""
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


def _is_int(obj: Any) -> bool:
    return isinstance(obj, int) and not isinstance(obj, bool)


@dataclass(frozen=True)
class Value:
    """
    Runtime value tagged with exactly one FieldType.

    Payload per kind: str (TEXT), int (INTEGER), float (REAL), 0 or 1 (BOOLEAN).
    Build with the kind constructors rather than the raw dataclass.
    """

    kind: FieldType
    payload: Union[str, int, float]

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FieldType):
            raise TypeError(f"Value kind must be a FieldType, got {self.kind!r}")
        p = self.payload
        if self.kind is FieldType.TEXT:
            if not isinstance(p, str):
                raise TypeError(f"TEXT payload must be str, got {type(p).__name__}")
            object.__setattr__(self, "payload", str(p))
        elif self.kind is FieldType.INTEGER:
            if not _is_int(p):
                raise TypeError(f"INTEGER payload must be int, got {type(p).__name__}")
            if not INT64_MIN <= p <= INT64_MAX:
                raise ValueError(f"INTEGER payload {p} outside the signed 64-bit range")
            object.__setattr__(self, "payload", int(p))
        elif self.kind is FieldType.REAL:
            if not (_is_int(p) or isinstance(p, float)):
                raise TypeError(f"REAL payload must be float, got {type(p).__name__}")
            object.__setattr__(self, "payload", float(p))
        elif self.kind is FieldType.BOOLEAN:
            if isinstance(p, bool):
                object.__setattr__(self, "payload", int(p))
            elif not (_is_int(p) and p in (0, 1)):
                raise TypeError(f"BOOLEAN payload must be a bool or 0/1, got {p!r}")
        else:
            raise TypeError(f"Unhandled field type {self.kind!r}")

    @classmethod
    def text(cls, value: str) -> "Value":
        return cls(FieldType.TEXT, _unwrap_scalar(value))

    @classmethod
    def integer(cls, value: int) -> "Value":
        return cls(FieldType.INTEGER, _unwrap_scalar(value))

    @classmethod
    def real(cls, value: float) -> "Value":
        return cls(FieldType.REAL, _unwrap_scalar(value))

    @classmethod
    def boolean(cls, value: bool) -> "Value":
        return cls(FieldType.BOOLEAN, _unwrap_scalar(value))

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """Infer the tag from a plain Python (or numpy) scalar. bool wins over int."""
        obj = _unwrap_scalar(obj)
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            return cls(FieldType.BOOLEAN, obj)
        if isinstance(obj, int):
            return cls(FieldType.INTEGER, obj)
        if isinstance(obj, float):
            return cls(FieldType.REAL, obj)
        if isinstance(obj, str):
            return cls(FieldType.TEXT, obj)
        raise TypeError(f"No field type for {type(obj).__name__} value {obj!r}")

    @classmethod
    def of(cls, field_type: FieldType, obj: Any) -> "Value":
        """
        Value of ``field_type`` from a Python scalar. Only lossless widening is
        applied (int -> REAL, 0/1 -> BOOLEAN); anything else raises TypeError.
        """
        obj = _unwrap_scalar(obj)
        if isinstance(obj, Value):
            if obj.kind is not field_type:
                raise TypeError(f"Expected a {field_type} value, got {obj.kind}")
            return obj
        if field_type is FieldType.TEXT:
            return cls(FieldType.TEXT, obj)
        if field_type is FieldType.INTEGER:
            return cls(FieldType.INTEGER, obj)
        if field_type is FieldType.REAL:
            return cls(FieldType.REAL, obj)
        if field_type is FieldType.BOOLEAN:
            return cls(FieldType.BOOLEAN, obj)
        raise TypeError(f"Unhandled field type {field_type!r}")

    @classmethod
    def parse(cls, field_type: FieldType, text: str) -> "Value":
        """Parse command-line text for a field of ``field_type``."""
        if field_type is FieldType.TEXT:
            return cls(FieldType.TEXT, text)
        if field_type is FieldType.INTEGER:
            return cls(FieldType.INTEGER, int(text.strip()))
        if field_type is FieldType.REAL:
            return cls(FieldType.REAL, float(text.strip()))
        if field_type is FieldType.BOOLEAN:
            word = text.strip().lower()
            if word in _TRUE_WORDS:
                return cls(FieldType.BOOLEAN, True)
            if word in _FALSE_WORDS:
                return cls(FieldType.BOOLEAN, False)
            raise ValueError(f"Not a boolean: {text!r}")
        raise TypeError(f"Unhandled field type {field_type!r}")

    def to_python(self) -> Union[str, int, float, bool]:
        if self.kind is FieldType.BOOLEAN:
            return bool(self.payload)
        return self.payload

    def __str__(self) -> str:
        return f"{self.kind}({self.to_python()!r})"


@dataclass(frozen=True)
class Schema:
    """
    Named record type. ``name`` doubles as the table name; ``fields`` keeps
    declaration order and is read-only once constructed.
    """

    name: str
    fields: Mapping[str, FieldType]

    def __post_init__(self) -> None:
        name = Identifier(self.name)
        items = self.fields.items() if isinstance(self.fields, Mapping) else self.fields
        checked: Dict[str, FieldType] = {}
        folded: Dict[str, str] = {}
        for field_name, field_type in items:
            ident = field_identifier(field_name)
            key = ident.lower()
            if key in folded:
                raise InvalidIdentifier(
                    field_name, f"duplicates field {folded[key]!r} (names are case-insensitive)"
                )
            folded[key] = ident
            try:
                checked[ident] = FieldType.from_name(field_type)
            except ValueError as exc:
                raise SchemaError(f"Field {field_name!r}: {exc}", str(name)) from exc
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "fields", MappingProxyType(checked))

    def __hash__(self) -> int:
        return hash((self.name, tuple(self.fields.items())))

    def field_type(self, field_name: str) -> Optional[FieldType]:
        return self.fields.get(field_name)

    def describe(self) -> str:
        """One-line human summary, e.g. ``users(name:text, age:integer)``."""
        cols = ", ".join(f"{n}:{t}" for n, t in self.fields.items())
        return f"{self.name}({cols})"


@dataclass
class Record:
    """A persisted (id set) or about-to-be-persisted (id None) instance of a schema."""

    id: Optional[int] = None
    data: Dict[str, Value] = field(default_factory=dict)

    def to_python(self) -> Dict[str, Any]:
        """Plain dict: ``id`` first, then each field as its Python value."""
        out: Dict[str, Any] = {"id": self.id}
        for name, value in self.data.items():
            out[name] = value.to_python()
        return out


# The record type is called "model" by some callers.
Model = Record


def schema_from_pairs(name: str, pairs: Iterable[Tuple[str, Union[str, FieldType]]]) -> Schema:
    """Build a Schema from (field, type-name) pairs, e.g. parsed CLI arguments or catalog rows."""
    return Schema(name, [(f, FieldType.from_name(t)) for f, t in pairs])


__all__ = [
    "FieldType",
    "INT64_MAX",
    "INT64_MIN",
    "Model",
    "Record",
    "Schema",
    "Value",
    "schema_from_pairs",
]
