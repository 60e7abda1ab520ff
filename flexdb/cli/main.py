"""
Top-level CLI dispatcher: flexdb [--verbose] <command> [args...].
All commands dispatch to package CLI modules.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from flexdb import __version__
from flexdb.config import log_level

_RECORD_COMMANDS = ("define", "schemas", "create", "get", "list", "update", "delete", "export", "import")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, log_level(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="flexdb",
        description="Schema-driven record store over SQLite",
    )
    parser.add_argument("--version", action="version", version=f"flexdb {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="command")
    subparsers.add_parser("init", help="Create the DB file and schema catalog", add_help=False)
    for name in _RECORD_COMMANDS:
        subparsers.add_parser(name, help=f"Run {name}", add_help=False)

    args, rest = parser.parse_known_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    _configure_logging(args.verbose)
    cmd = args.command

    if cmd == "init":
        from flexdb.cli import init_db as mod

        return mod.main(rest)
    if cmd in _RECORD_COMMANDS:
        from flexdb.cli import records as mod

        return mod.main([cmd] + rest)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
