import logging
from pathlib import Path

from appsupport.core.config import StorageConfig, app_data_dir


def test_data_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("APPSUPPORT_DATA_DIR", str(tmp_path / "data"))
    assert app_data_dir() == tmp_path / "data"


def test_default_data_dir_uses_app_name(monkeypatch):
    monkeypatch.delenv("APPSUPPORT_DATA_DIR", raising=False)
    path = app_data_dir("MyApp")
    assert isinstance(path, Path)
    assert path.name == "MyApp"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("APPSUPPORT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("APPSUPPORT_BUSY_TIMEOUT_MS", "250")
    monkeypatch.setenv("APPSUPPORT_JOURNAL_MODE", "wal")
    monkeypatch.setenv("APPSUPPORT_FOREIGN_KEYS", "0")
    monkeypatch.setenv("APPSUPPORT_CONNECT_TIMEOUT", "2.5")

    config = StorageConfig.from_env()
    assert config.data_dir == tmp_path
    assert config.busy_timeout_ms == 250
    assert config.journal_mode == "WAL"
    assert config.foreign_keys is False
    assert config.connect_timeout == 2.5
    assert config.pragmas() == {"foreign_keys": False, "busy_timeout_ms": 250, "journal_mode": "WAL"}


def test_invalid_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("APPSUPPORT_BUSY_TIMEOUT_MS", "soon")
    monkeypatch.setenv("APPSUPPORT_CONNECT_TIMEOUT", "later")
    with caplog.at_level(logging.WARNING, logger="appsupport.core.config"):
        config = StorageConfig.from_env()
    assert config.busy_timeout_ms == 5000
    assert config.connect_timeout == 30.0
    assert "APPSUPPORT_BUSY_TIMEOUT_MS" in caplog.text


def test_negative_busy_timeout_is_ignored(monkeypatch):
    monkeypatch.setenv("APPSUPPORT_BUSY_TIMEOUT_MS", "-1")
    assert StorageConfig.from_env().busy_timeout_ms == 5000


def test_default_pragmas(monkeypatch):
    for name in ("APPSUPPORT_JOURNAL_MODE", "APPSUPPORT_FOREIGN_KEYS", "APPSUPPORT_BUSY_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)
    assert StorageConfig.from_env().pragmas() == {"foreign_keys": True, "busy_timeout_ms": 5000}
