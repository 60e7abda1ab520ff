"""
Schema and record commands: define, schemas, create, get, list, update, delete,
export, import. Records print as one JSON object per line.
Usage: flexdb <command> [--db PATH] ...
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional, Tuple

import pandas as pd

from flexdb.core.errors import FlexDBError, UnknownField
from flexdb.core.types import Record, Schema, Value
from flexdb.read_api import csv_dtypes, import_frame, load_records_frame
from flexdb.store.record_store import RecordStore
from flexdb.store.sqlite_session import open_store


def _split(token: str, sep: str) -> Tuple[str, str]:
    name, found, rest = token.partition(sep)
    if not found or not name:
        raise ValueError(f"Expected NAME{sep}VALUE, got {token!r}")
    return name, rest


def _parse_assignments(schema: Schema, tokens: List[str]) -> Dict[str, Value]:
    """``field=value`` tokens, parsed per the field's declared type."""
    out: Dict[str, Value] = {}
    for token in tokens:
        name, raw = _split(token, "=")
        field_type = schema.fields.get(name)
        if field_type is None:
            raise UnknownField(str(schema.name), name)
        out[name] = Value.parse(field_type, raw)
    return out


def _print_record(record: Record) -> None:
    print(json.dumps(record.to_python()))


def cmd_define(store: RecordStore, args: argparse.Namespace) -> int:
    pairs = [_split(token, ":") for token in args.fields]
    schema = store.define_schema(args.schema, pairs)
    print(f"Defined {schema.describe()}")
    return 0


def cmd_schemas(store: RecordStore, args: argparse.Namespace) -> int:
    for schema in store.registry:
        print(schema.describe())
    return 0


def cmd_create(store: RecordStore, args: argparse.Namespace) -> int:
    schema = store.registry.require(args.schema)
    record_id = store.create(args.schema, _parse_assignments(schema, args.assignments))
    print(record_id)
    return 0


def cmd_get(store: RecordStore, args: argparse.Namespace) -> int:
    record = store.get(args.schema, args.id)
    if record is None:
        print(f"{args.schema} id={args.id} not found", file=sys.stderr)
        return 1
    _print_record(record)
    return 0


def cmd_list(store: RecordStore, args: argparse.Namespace) -> int:
    for record in store.get_all(args.schema):
        _print_record(record)
    return 0


def cmd_update(store: RecordStore, args: argparse.Namespace) -> int:
    schema = store.registry.require(args.schema)
    changed = store.update(args.schema, args.id, _parse_assignments(schema, args.assignments))
    print("updated" if changed else "unchanged")
    return 0 if changed else 1


def cmd_delete(store: RecordStore, args: argparse.Namespace) -> int:
    removed = store.delete(args.schema, args.id)
    print("deleted" if removed else "not found")
    return 0 if removed else 1


def cmd_export(store: RecordStore, args: argparse.Namespace) -> int:
    frame = load_records_frame(store, args.schema)
    if args.out:
        frame.to_csv(args.out, index=False)
        print(f"Wrote {len(frame)} row(s) to {args.out}")
    else:
        frame.to_csv(sys.stdout, index=False)
    return 0


def cmd_import(store: RecordStore, args: argparse.Namespace) -> int:
    frame = pd.read_csv(args.csv, dtype=csv_dtypes(store, args.schema), keep_default_na=False)
    ids = import_frame(store, args.schema, frame)
    print(f"Imported {len(ids)} row(s) into {args.schema}")
    return 0


_COMMANDS = {
    "define": cmd_define,
    "schemas": cmd_schemas,
    "create": cmd_create,
    "get": cmd_get,
    "list": cmd_list,
    "update": cmd_update,
    "delete": cmd_delete,
    "export": cmd_export,
    "import": cmd_import,
}


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="flexdb", description="Schema-driven record store.")
    sub = ap.add_subparsers(dest="command", required=True)

    def add(name: str, help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--db", default=None, help="DB path (default: from config or FLEXDB_DB_PATH)")
        return p

    p = add("define", "Define a schema: NAME field:type ...")
    p.add_argument("schema")
    p.add_argument("fields", nargs="*", metavar="FIELD:TYPE")
    add("schemas", "List defined schemas")
    p = add("create", "Create a record: NAME field=value ...")
    p.add_argument("schema")
    p.add_argument("assignments", nargs="*", metavar="FIELD=VALUE")
    p = add("get", "Print one record")
    p.add_argument("schema")
    p.add_argument("id", type=int)
    p = add("list", "Print every record of a schema")
    p.add_argument("schema")
    p = add("update", "Update fields of a record: NAME ID field=value ...")
    p.add_argument("schema")
    p.add_argument("id", type=int)
    p.add_argument("assignments", nargs="*", metavar="FIELD=VALUE")
    p = add("delete", "Delete a record")
    p.add_argument("schema")
    p.add_argument("id", type=int)
    p = add("export", "Write a schema's records as CSV")
    p.add_argument("schema")
    p.add_argument("--out", default=None, help="CSV path (default: stdout)")
    p = add("import", "Create one record per CSV row")
    p.add_argument("schema")
    p.add_argument("csv")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)
    try:
        with open_store(args.db) as store:
            return _COMMANDS[args.command](store, args)
    except (FlexDBError, ValueError, TypeError) as e:
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 1
