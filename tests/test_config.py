"""Config precedence: defaults <- config.yaml <- env."""

from __future__ import annotations

import pytest

from flexdb import config


@pytest.fixture
def no_env(monkeypatch, tmp_path):
    for key in ("FLEXDB_DB_PATH", "FLEXDB_BUSY_TIMEOUT_MS", "FLEXDB_JOURNAL_MODE", "FLEXDB_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FLEXDB_CONFIG", str(tmp_path / "missing.yaml"))
    return tmp_path


def test_defaults_without_yaml_or_env(no_env):
    assert config.db_path() == "data/flexdb.sqlite"
    assert config.db_busy_timeout_ms() == 5000
    assert config.db_journal_mode() == "WAL"
    assert config.log_level() == "WARNING"


def test_yaml_overrides_defaults(no_env, monkeypatch):
    cfg = no_env / "config.yaml"
    cfg.write_text("db:\n  path: other.sqlite\n  journal_mode: delete\nlogging:\n  level: info\n", encoding="utf-8")
    monkeypatch.setenv("FLEXDB_CONFIG", str(cfg))
    assert config.db_path() == "other.sqlite"
    assert config.db_journal_mode() == "DELETE"
    assert config.db_busy_timeout_ms() == 5000
    assert config.log_level() == "INFO"


def test_env_overrides_yaml(no_env, monkeypatch):
    cfg = no_env / "config.yaml"
    cfg.write_text("db:\n  path: other.sqlite\n", encoding="utf-8")
    monkeypatch.setenv("FLEXDB_CONFIG", str(cfg))
    monkeypatch.setenv("FLEXDB_DB_PATH", "env.sqlite")
    monkeypatch.setenv("FLEXDB_BUSY_TIMEOUT_MS", "250")
    monkeypatch.setenv("FLEXDB_LOG_LEVEL", "debug")
    assert config.db_path() == "env.sqlite"
    assert config.db_busy_timeout_ms() == 250
    assert config.log_level() == "DEBUG"


def test_non_mapping_yaml_ignored(no_env, monkeypatch):
    cfg = no_env / "config.yaml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("FLEXDB_CONFIG", str(cfg))
    assert config.get_config()["db"]["path"] == "data/flexdb.sqlite"


def test_bad_journal_mode_rejected(no_env, monkeypatch):
    monkeypatch.setenv("FLEXDB_JOURNAL_MODE", "sideways")
    with pytest.raises(ValueError):
        config.db_journal_mode()


def test_deep_merge_keeps_sibling_keys():
    merged = config._deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}
