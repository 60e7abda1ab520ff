"""
Initialize a local SQLite DB: create the file and the schema catalog tables.
Use: flexdb init [--db PATH]
Default DB path: from config (db.path) or FLEXDB_DB_PATH.
"""

from __future__ import annotations

import argparse
import sqlite3
import sys
from typing import List, Optional

from flexdb.core.errors import FlexDBError
from flexdb.db.migrations import run_migrations
from flexdb.store.sqlite_session import sqlite_conn


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="flexdb init",
        description="Create a local SQLite DB and its schema catalog.",
    )
    ap.add_argument("--db", default=None, help="DB path (default: from config or FLEXDB_DB_PATH)")
    args = ap.parse_args(argv)
    try:
        with sqlite_conn(args.db) as conn:
            run_migrations(conn)
            path = conn.execute("PRAGMA database_list").fetchone()[2] or ":memory:"
        print(f"Initialized DB: {path}")
        return 0
    except (FlexDBError, sqlite3.Error) as e:
        print(f"init failed: {e}", file=sys.stderr)
        return 1
