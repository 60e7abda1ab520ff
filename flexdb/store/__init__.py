"""
Store: schema-driven record persistence over SQLite.
Statement building and value marshalling live here; no CLI or config loading.
"""

from __future__ import annotations

from .record_store import RecordStore
from .sqlite_session import open_store, sqlite_conn

__all__ = ["RecordStore", "open_store", "sqlite_conn"]
