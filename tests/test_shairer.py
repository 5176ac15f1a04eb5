import queue
import socket
import threading

import pytest

from shair.errors import ErrorCode, ShairError
from shair.local.mdns import MDNS_SERVICE, BrowseEntry
from shair.local.server import serve
from shair.local.shairer import LocalShairer
from shair.model import Device, LocalInfo, PeerStatus, SvcType


def _free_port():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def receiver(tmp_path):
    port = _free_port()
    cancel = threading.Event()
    requests = queue.Queue()
    save_dir = tmp_path / "in"
    save_dir.mkdir()
    t = threading.Thread(target=serve, args=(port, cancel, save_dir, requests), daemon=True)
    t.start()
    device = Device("peer", SvcType.LOCAL, LocalInfo("127.0.0.1", port))
    yield device, requests, save_dir
    cancel.set()
    t.join(5)


def _answer(requests, value):
    def run():
        requests.get(timeout=10).accept.put(value)

    t = threading.Thread(target=run, daemon=True)
    t.start()
    return t


def test_send_accepted(receiver, tmp_path):
    device, requests, save_dir = receiver
    src = tmp_path / "note.txt"
    src.write_bytes(b"payload")
    _answer(requests, True)
    progress = queue.Queue()
    LocalShairer(0).send_files(threading.Event(), device, progress, [str(src)])
    for _ in range(50):
        if (save_dir / "note.txt").exists() and (save_dir / "note.txt").read_bytes():
            break
        threading.Event().wait(0.1)
    assert (save_dir / "note.txt").read_bytes() == b"payload"


def test_send_rejected(receiver, tmp_path):
    device, requests, _ = receiver
    src = tmp_path / "note.txt"
    src.write_bytes(b"payload")
    _answer(requests, False)
    with pytest.raises(ShairError) as info:
        LocalShairer(0).send_files(threading.Event(), device, queue.Queue(), [str(src)])
    assert info.value.code is ErrorCode.TRANSFER_REJECTED


def test_missing_file(tmp_path):
    with pytest.raises(ShairError) as info:
        LocalShairer(0).send_files(
            threading.Event(), Device(), queue.Queue(), [str(tmp_path / "nope")]
        )
    assert info.value.code is ErrorCode.STAT_FILE


def test_discovered_then_removed():
    shairer = LocalShairer(0)
    updates = queue.Queue()
    entry = BrowseEntry("not-this-host-xyz", MDNS_SERVICE, 8085, ("192.0.2.5",), 120)
    shairer._handle_added(entry, updates)
    added = updates.get_nowait()
    assert added.status is PeerStatus.DISCOVERED
    assert added.peer.ip == "192.0.2.5" and added.peer.svc_port == 8085
    assert shairer.device_to_tcp[added.peer] == ("192.0.2.5", 8085)
    shairer._handle_removed(entry, updates)
    removed = updates.get_nowait()
    assert removed.status is PeerStatus.REMOVED
    assert removed.peer is added.peer
    assert shairer.device_to_tcp == {}


def test_self_is_ignored():
    shairer = LocalShairer(0)
    updates = queue.Queue()
    entry = BrowseEntry(socket.gethostname(), MDNS_SERVICE, 1, ("192.0.2.5",), 120)
    shairer._handle_added(entry, updates)
    assert updates.empty()
    assert shairer.service_to_device == {}