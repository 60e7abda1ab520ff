"""Allow python -m flexdb <command> ...; same as the flexdb console script."""
from __future__ import annotations

from flexdb.cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
