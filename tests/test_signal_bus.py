import gc
import threading

import pytest

from appsupport.core.delivery import ImmediateDelivery
from appsupport.storage.settings.registry import InstanceRegistry
from appsupport.storage.settings.signal_bus import SignalBus, bus_registry


@pytest.fixture
def buses():
    registry = InstanceRegistry()
    created = []

    def _make(object_name="", **kwargs):
        bus = SignalBus(object_name, registry=registry, **kwargs)
        created.append(bus)
        return bus

    yield _make
    for bus in created:
        bus.close()


def _recorder(bus):
    received = []
    bus.signal_received.connect(lambda name, data: received.append((name, data)))
    return received


def test_untargeted_signal_reaches_every_participant(buses):
    sender = buses("sender")
    inbox = buses("inbox")
    outbox = buses("outbox")
    seen = {bus.object_name: _recorder(bus) for bus in (sender, inbox, outbox)}

    assert sender.emit_signal("refresh", data={"page": 2}) == 3
    for bus in (sender, inbox, outbox):
        bus.flush()
    for received in seen.values():
        assert received == [("refresh", {"page": 2})]


def test_targeted_signal_reaches_matching_names_only(buses):
    sender = buses("sender")
    first = buses("inbox")
    second = buses("inbox")
    other = buses("outbox")
    r_sender, r_first, r_second, r_other = (_recorder(b) for b in (sender, first, second, other))

    assert sender.emit_signal("refresh", "inbox", {"page": 1}) == 2
    for bus in (sender, first, second, other):
        bus.flush()
    assert r_first == r_second == [("refresh", {"page": 1})]
    assert r_sender == []
    assert r_other == []


def test_unknown_target_reaches_nobody(buses):
    sender = buses("sender")
    received = _recorder(sender)
    assert sender.emit_signal("refresh", "nobody") == 0
    sender.flush()
    assert received == []


def test_missing_data_is_an_empty_mapping(buses):
    bus = buses(delivery=ImmediateDelivery())
    received = _recorder(bus)
    bus.emit_signal("ping")
    assert received == [("ping", {})]


def test_each_receiver_gets_its_own_copy(buses):
    a = buses(delivery=ImmediateDelivery())
    b = buses(delivery=ImmediateDelivery())
    payloads = []
    a.signal_received.connect(lambda name, data: payloads.append(data))
    b.signal_received.connect(lambda name, data: payloads.append(data))
    original = {"count": 1}

    a.emit_signal("tick", data=original)
    payloads[0]["count"] = 99
    assert payloads[1] == {"count": 1}
    assert original == {"count": 1}


def test_closed_participants_are_skipped(buses):
    sender = buses()
    closed = buses()
    received = _recorder(closed)
    closed.close()
    closed.close()

    assert closed.closed
    assert sender.emit_signal("refresh") == 1
    assert closed.deliver_signal("refresh", {}) is False
    assert received == []


def test_signals_are_delivered_off_the_emitting_thread(buses):
    bus = buses("worker")
    threads = []
    bus.signal_received.connect(lambda name, data: threads.append(threading.current_thread()))
    bus.emit_signal("run")
    bus.flush()
    assert threads and threads[0] is not threading.current_thread()


def test_collected_participant_leaves_the_bus():
    registry = InstanceRegistry()
    bus = SignalBus("temp", registry=registry)
    handle = bus.handle
    assert registry.is_live(handle)
    del bus
    gc.collect()
    assert not registry.is_live(handle)


def test_default_registry_is_shared():
    with SignalBus("shared-a") as a, SignalBus("shared-b") as b:
        assert bus_registry().is_live(a.handle)
        assert bus_registry().is_live(b.handle)
        received = _recorder(b)
        assert a.emit_signal("hello", "shared-b") == 1
        b.flush()
        assert received == [("hello", {})]
    assert not bus_registry().is_live(a.handle)
