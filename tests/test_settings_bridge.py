import pytest

from appsupport.storage.settings.registry import InstanceRegistry
from appsupport.ui.settings_bridge import QtDelivery, SettingsBridge, SignalBusBridge, system_language


@pytest.fixture
def make_bridge(qapp, tmp_path, connections, instances):
    created = []

    def _make(**kwargs):
        bridge = SettingsBridge(
            data_dir=tmp_path, connections=connections, registry=instances, **kwargs
        )
        created.append(bridge)
        return bridge

    yield _make
    for bridge in created:
        bridge.close()


def test_bridge_read_write(make_bridge):
    bridge = make_bridge()
    assert bridge.write("volume", 75)
    assert bridge.read("volume") == 75
    assert bridge.exists("volume")
    assert bridge.remove("volume")
    assert not bridge.exists("volume")


def test_setting_changed_is_delivered_through_the_event_loop(make_bridge):
    a = make_bridge()
    b = make_bridge()
    received = []
    b.settingChanged.connect(lambda key, old, new: received.append((key, old, new)))

    a.write("theme", "dark")
    assert received == []
    b.flush()
    assert received == [("theme", None, "dark")]


def test_lifecycle_signals_and_properties(make_bridge):
    bridge = make_bridge()
    events = []
    bridge.databaseOpened.connect(lambda: events.append("opened"))
    bridge.databaseClosed.connect(lambda: events.append("closed"))
    bridge.databasePathChanged.connect(lambda: events.append("path"))
    bridge.settingsTableNameChanged.connect(lambda: events.append("table"))

    bridge.write("k", 1)
    bridge.databaseName = "other.sqlite"
    assert bridge.databaseName == "other.sqlite"
    bridge.settingsTableName = "prefs"
    assert bridge.settingsTableName == "prefs"
    assert events == ["opened", "path", "closed", "opened", "table", "closed", "opened"]
    assert bridge.store.table_name == "prefs"


def test_qt_delivery_runs_posted_callables_in_order(qapp):
    delivery = QtDelivery()
    seen = []
    for i in range(10):
        assert delivery.post(lambda i=i: seen.append(i))
    assert seen == []
    delivery.barrier()
    assert seen == list(range(10))

    delivery.close()
    assert delivery.post(lambda: seen.append("late")) is False


def test_system_language(qapp, make_bridge):
    language = system_language()
    assert language
    assert "_" not in language
    assert make_bridge().systemLanguage() == language


def test_signal_bus_bridge_targets_by_object_name(qapp):
    registry = InstanceRegistry()
    inbox = SignalBusBridge("inbox", registry=registry)
    outbox = SignalBusBridge("outbox", registry=registry)
    to_inbox, to_outbox = [], []
    inbox.signalReceived.connect(lambda name, data: to_inbox.append((name, data)))
    outbox.signalReceived.connect(lambda name, data: to_outbox.append((name, data)))
    try:
        assert outbox.emitSignal("refresh", "inbox", {"page": 3}) == 1
        assert to_inbox == []
        inbox.flush()
        assert to_inbox == [("refresh", {"page": 3})]

        inbox.setObjectName("archive")
        assert outbox.emitSignal("refresh", "inbox", {}) == 0
        assert outbox.emitSignal("refresh", "archive", {}) == 1
        assert outbox.emitSignal("all", "", {}) == 2
        inbox.flush()
        outbox.flush()
        assert [name for name, _ in to_inbox] == ["refresh", "refresh", "all"]
        assert to_outbox == [("all", {})]
    finally:
        inbox.close()
        outbox.close()
