"""
Load config from config.yaml with optional env overrides.
Single source of truth for DB path, connection pragmas and log level.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml

# Defaults if no YAML or env
_DEFAULTS = {
    "db": {
        "path": "data/flexdb.sqlite",
        "busy_timeout_ms": 5000,
        "journal_mode": "WAL",
    },
    "logging": {"level": "WARNING"},
}

_JOURNAL_MODES = frozenset({"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"})


def _config_yaml_path() -> Path:
    """FLEXDB_CONFIG if set, else config.yaml at repo root (parent of package dir)."""
    explicit = os.environ.get("FLEXDB_CONFIG")
    if explicit:
        return Path(explicit)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(config_path: Optional[Path] = None) -> dict:
    config_path = config_path or _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    path = os.environ.get("FLEXDB_DB_PATH")
    if path:
        overrides.setdefault("db", {})["path"] = path
    timeout = os.environ.get("FLEXDB_BUSY_TIMEOUT_MS")
    if timeout:
        overrides.setdefault("db", {})["busy_timeout_ms"] = int(timeout)
    journal = os.environ.get("FLEXDB_JOURNAL_MODE")
    if journal:
        overrides.setdefault("db", {})["journal_mode"] = journal
    level = os.environ.get("FLEXDB_LOG_LEVEL")
    if level:
        overrides.setdefault("logging", {})["level"] = level
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def db_path() -> str:
    return str(get_config()["db"]["path"])


def db_busy_timeout_ms() -> int:
    return int(get_config()["db"]["busy_timeout_ms"])


def db_journal_mode() -> str:
    mode = str(get_config()["db"]["journal_mode"]).upper()
    if mode not in _JOURNAL_MODES:
        raise ValueError(f"Unsupported journal_mode {mode!r}; expected one of {sorted(_JOURNAL_MODES)}")
    return mode


def log_level() -> str:
    return str(get_config()["logging"]["level"]).upper()
