"""
Tabular access for dashboards, notebooks and the CLI export command.

Records of one schema come back as a pandas DataFrame (``id`` first, then the
declared fields); a DataFrame can be loaded back one row per create call.
"""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from .core.errors import UnknownField
from .core.types import FieldType, Value
from .store.record_store import RecordStore

# Column dtypes used so an empty frame still carries the schema's types.
_DTYPES: Dict[FieldType, str] = {
    FieldType.TEXT: "object",
    FieldType.INTEGER: "int64",
    FieldType.REAL: "float64",
    FieldType.BOOLEAN: "bool",
}


def load_records_frame(store: RecordStore, schema_name: str) -> pd.DataFrame:
    """All records of ``schema_name`` as a DataFrame. BOOLEAN fields are Python bools."""
    schema = store.registry.require(schema_name)
    columns = ["id"] + [str(n) for n in schema.fields]
    rows = [record.to_python() for record in store.get_all(schema_name)]
    frame = pd.DataFrame(rows, columns=columns)
    dtypes = {"id": "int64"}
    dtypes.update({str(n): _DTYPES[t] for n, t in schema.fields.items()})
    return frame.astype(dtypes)


def import_frame(store: RecordStore, schema_name: str, frame: pd.DataFrame) -> List[int]:
    """
    Create one record per row of ``frame`` and return the new ids in row order.
    An ``id`` column is ignored (ids are store-assigned). Every other column must
    be a declared field; cells go through Value.of, so only lossless conversions apply.
    Every row is converted before the first insert, so an undeclared column or a
    bad cell writes nothing.
    """
    schema = store.registry.require(schema_name)
    columns = [c for c in frame.columns if c != "id"]
    for column in columns:
        if column not in schema.fields:
            raise UnknownField(str(schema.name), column)
    payloads: List[Dict[str, Value]] = [
        {column: Value.of(schema.fields[column], cell) for column, cell in zip(columns, row)}
        for row in frame[columns].itertuples(index=False, name=None)
    ]
    return [store.create(schema_name, payload) for payload in payloads]


def csv_dtypes(store: RecordStore, schema_name: str) -> Dict[str, type]:
    """``dtype`` mapping for pandas.read_csv that keeps TEXT fields as strings."""
    schema = store.registry.require(schema_name)
    return {str(n): str for n, t in schema.fields.items() if t is FieldType.TEXT}
