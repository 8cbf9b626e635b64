import os

import pytest

from appsupport.storage.settings.registry import InstanceRegistry
from appsupport.storage.settings.store import SettingsStore
from appsupport.storage.sqlite.connections import ConnectionRegistry
from appsupport.storage.sqlite.schema import ColumnDefinition, ColumnType, Schema
from appsupport.storage.sqlite.table_engine import TableEngine


@pytest.fixture
def connections():
    registry = ConnectionRegistry(pragmas={"foreign_keys": True, "busy_timeout_ms": 1000})
    yield registry
    registry.close_all()


@pytest.fixture
def instances():
    return InstanceRegistry()


@pytest.fixture
def engine(connections):
    return TableEngine(connections)


@pytest.fixture
def conn(engine, tmp_path):
    return engine.open_database(tmp_path / "engine.sqlite")


@pytest.fixture
def people_schema():
    return Schema(
        [
            ColumnDefinition("id", ColumnType.PK_AUTOINCREMENT),
            ColumnDefinition("name", ColumnType.TEXT),
            ColumnDefinition("age", ColumnType.INTEGER, nullable=True),
            ColumnDefinition("score", ColumnType.REAL, nullable=True),
        ]
    )


@pytest.fixture
def make_store(tmp_path, connections, instances):
    created = []

    def _make(database_name="settings.sqlite", table_name="settings", **kwargs):
        kwargs.setdefault("data_dir", tmp_path)
        store = SettingsStore(
            database_name,
            table_name,
            connections=connections,
            registry=instances,
            **kwargs,
        )
        created.append(store)
        return store

    yield _make
    for store in created:
        store.close()


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt5.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
