"""
Database layer: catalog migrations and schema catalog persistence.

Record tables are provisioned by flexdb.store; this layer only owns flexdb's
own bookkeeping tables.
"""

from __future__ import annotations

from .catalog import SchemaCatalog
from .migrations import catalog_tables_exist, run_migrations

__all__ = ["run_migrations", "catalog_tables_exist", "SchemaCatalog"]
