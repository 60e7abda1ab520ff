"""
Schema registry: the set of known record types, keyed by name.
Leaf component; no storage access. Provisioning lives in flexdb.store.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .core.errors import UnknownSchema
from .core.types import Schema


class SchemaRegistry:
    """In-memory name -> Schema map. Definitions overwrite; nothing is ever removed."""

    def __init__(self) -> None:
        self._schemas: Dict[str, Schema] = {}

    def define(self, schema: Schema) -> None:
        """Register ``schema`` under its name, replacing any prior definition."""
        if not isinstance(schema, Schema):
            raise TypeError(f"Expected Schema, got {type(schema).__name__}")
        self._schemas[str(schema.name)] = schema

    def lookup(self, name: str) -> Optional[Schema]:
        return self._schemas.get(name)

    def require(self, name: str) -> Schema:
        """Lookup or raise UnknownSchema."""
        schema = self._schemas.get(name)
        if schema is None:
            raise UnknownSchema(name)
        return schema

    def names(self) -> List[str]:
        return sorted(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[Schema]:
        return iter([self._schemas[n] for n in self.names()])
