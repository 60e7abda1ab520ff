"""
SQLite connection lifecycle: context managers with guaranteed close and the
configured pragmas (foreign_keys=ON, journal mode, busy timeout).
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

from ..config import db_busy_timeout_ms, db_journal_mode
from ..config import db_path as _configured_db_path
from ..core.errors import StorageFault
from .record_store import RecordStore

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


def _resolve(db_path: Union[str, Path, None]) -> str:
    if db_path is None:
        db_path = _configured_db_path()
    if str(db_path) == MEMORY:
        return MEMORY
    path = Path(db_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)


def apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute(f"PRAGMA busy_timeout = {int(db_busy_timeout_ms())}")
    # In-memory databases only support MEMORY journaling.
    if conn.execute("PRAGMA database_list").fetchone()[2]:
        conn.execute(f"PRAGMA journal_mode = {db_journal_mode()}")
    conn.commit()


@contextmanager
def sqlite_conn(db_path: Union[str, Path, None] = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Yield a SQLite connection that is always closed on exit.
    db_path defaults to the configured path; ":memory:" gives a private in-memory DB.
    """
    path = _resolve(db_path)
    try:
        conn = sqlite3.connect(path)
    except sqlite3.Error as exc:
        raise StorageFault(f"Cannot open database {path}: {exc}") from exc
    try:
        apply_pragmas(conn)
        logger.debug("Opened SQLite connection %s", path)
        yield conn
    finally:
        conn.close()


@contextmanager
def open_store(
    db_path: Union[str, Path, None] = None,
    *,
    restore: bool = True,
) -> Generator[RecordStore, None, None]:
    """
    Yield a RecordStore over a fresh connection: catalog migrations applied and,
    unless ``restore`` is False, previously defined schemas loaded into its registry.
    """
    with sqlite_conn(db_path) as conn:
        store = RecordStore(conn)
        if restore:
            store.restore()
        yield store


__all__ = ["MEMORY", "apply_pragmas", "open_store", "sqlite_conn"]
