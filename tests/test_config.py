"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool

from pocketwallet.config import BaseConfig, DevConfig, TestConfig


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for name in (
        "POCKETWALLET_DATABASE_URL",
        "POCKETWALLET_DEV_MODE",
        "POCKETWALLET_LOG_LEVEL",
        "POCKETWALLET_RECENT_TRANSACTIONS",
        "POCKETWALLET_SQL_ECHO",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("POCKETWALLET_DATA_DIR", str(tmp_path / "data"))
    return tmp_path


def test_defaults_build_sqlite_file_in_data_dir(isolated_env):
    config = BaseConfig()

    assert config.DATA_DIR == (isolated_env / "data").resolve()
    assert config.DATA_DIR.is_dir()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'pocketwallet.db'}"
    assert config.is_sqlite
    assert config.RECENT_TRANSACTIONS == 10
    assert config.LOG_LEVEL == "INFO"
    assert config.sqlalchemy_engine_options() == {
        "echo": False,
        "connect_args": {"check_same_thread": False, "timeout": 30},
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("POCKETWALLET_DATABASE_URL", "postgresql://wallet@localhost/wallet")
    monkeypatch.setenv("POCKETWALLET_DEV_MODE", "no")
    monkeypatch.setenv("POCKETWALLET_LOG_LEVEL", "debug")
    monkeypatch.setenv("POCKETWALLET_RECENT_TRANSACTIONS", "25")
    monkeypatch.setenv("POCKETWALLET_SQL_ECHO", "true")

    config = BaseConfig()

    assert config.DATABASE_URL == "postgresql://wallet@localhost/wallet"
    assert not config.is_sqlite
    assert config.DEV_MODE is False
    assert config.LOG_LEVEL == "DEBUG"
    assert config.RECENT_TRANSACTIONS == 25
    assert config.sqlalchemy_engine_options() == {"echo": True}


@pytest.mark.parametrize("value", ["ten", "0", "-3"])
def test_bad_recent_transactions_value(monkeypatch, value):
    monkeypatch.setenv("POCKETWALLET_RECENT_TRANSACTIONS", value)

    with pytest.raises(ValueError):
        BaseConfig()


def test_test_config_uses_shared_in_memory_database():
    config = TestConfig()

    assert config.DATABASE_URL == "sqlite://"
    assert config.sqlalchemy_engine_options()["poolclass"] is StaticPool
    assert "journal_mode" not in config.SQLITE_PRAGMAS


def test_dev_config_is_a_base_config():
    config = DevConfig()

    assert isinstance(config, BaseConfig)
    assert config.DEBUG is True
    assert isinstance(config.DATA_DIR, Path)
