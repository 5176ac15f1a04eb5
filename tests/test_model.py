import queue

import pytest

from shair.model import (
    Device,
    FilePreview,
    LocalInfo,
    PeerStatus,
    PeerUpdate,
    Shairer,
    SvcType,
    TransferRequest,
)


@pytest.mark.parametrize(
    "svc, text",
    [(SvcType.BLUETOOTH, "Bluetooth"), (SvcType.LOCAL, "Local"), (SvcType.REMOTE, "Remote")],
)
def test_svc_type_str(svc, text):
    assert str(svc) == text


@pytest.mark.parametrize("value, text", [(0, "Bluetooth"), (1, "Local"), (2, "Remote")])
def test_svc_type_from_wire_value(value, text):
    assert str(SvcType(value)) == text


def test_peer_status_from_wire_value():
    device = Device("peer")
    discovered = PeerUpdate(device, PeerStatus(0))
    removed = PeerUpdate(device, PeerStatus(1))
    assert discovered.status is PeerStatus.DISCOVERED
    assert removed.status is PeerStatus.REMOVED


def test_devices_are_distinct_map_keys():
    a = Device("peer", SvcType.LOCAL, LocalInfo("10.0.0.2", 8085))
    b = Device("peer", SvcType.LOCAL, LocalInfo("10.0.0.2", 8085))
    table = {a: 1, b: 2}
    assert len(table) == 2
    assert table[a] == 1
    assert a != b
    assert a == a


def test_device_exposes_local_info():
    d = Device("peer", SvcType.LOCAL, LocalInfo("10.0.0.2", 8085))
    assert d.ip == "10.0.0.2"
    assert d.svc_port == 8085


def test_device_defaults():
    d = Device()
    assert d.name == ""
    assert d.ip is None
    assert d.svc_port == 0


def test_peer_update_holds_same_device():
    d = Device("x")
    update = PeerUpdate(d, PeerStatus.REMOVED)
    assert update.peer is d
    assert update.status is PeerStatus.REMOVED


def test_transfer_request_has_own_queues():
    sender = Device("s")
    r1 = TransferRequest(sender, [FilePreview("a.txt", 3)])
    r2 = TransferRequest(sender, [])
    assert isinstance(r1.accept, queue.Queue)
    assert r1.accept is not r2.accept
    r1.accept.put(True)
    assert r2.accept.empty()
    assert r1.file_previews[0].size == 3


def test_shairer_is_abstract():
    with pytest.raises(TypeError):
        Shairer()