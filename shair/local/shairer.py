"""A Shairer for the local network: mDNS discovery and TCP transfer."""

from __future__ import annotations

import logging
import queue
import socket
import threading
from collections.abc import Sequence
from concurrent.futures import CancelledError
from contextlib import ExitStack

from shair.errors import ErrorCode, ShairError
from shair.local.header import Header
from shair.local.mdns import MDNS_SERVICE, BrowseEntry, announce_service, browse
from shair.local.send import Sender
from shair.local.server import serve
from shair.model import Device, LocalInfo, PeerStatus, PeerUpdate, Shairer, SvcType


class LocalShairer(Shairer):
    """Discovers peers over mDNS and exchanges files over TCP on ``port``."""

    def __init__(self, port: int, logger: logging.Logger | None = None) -> None:
        self.port = port
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self.service_to_device: dict[str, Device] = {}
        self.device_to_tcp: dict[Device, tuple[str, int]] = {}

    def _handle_added(self, entry: BrowseEntry, peer_updates: queue.Queue) -> None:
        if entry.name == socket.gethostname() or not entry.ips:
            return
        device = Device(
            name=entry.name,
            discovered_on=SvcType.LOCAL,
            local_info=LocalInfo(ip=entry.ips[0], svc_port=entry.port),
        )
        peer_updates.put(PeerUpdate(device, PeerStatus.DISCOVERED))
        with self._lock:
            self.service_to_device[entry.name] = device
            self.device_to_tcp[device] = (entry.ips[0], entry.port)

    def _handle_removed(self, entry: BrowseEntry, peer_updates: queue.Queue) -> None:
        with self._lock:
            device = self.service_to_device.pop(entry.name, None)
            if device is None:
                return
            self.device_to_tcp.pop(device, None)
        peer_updates.put(PeerUpdate(device, PeerStatus.REMOVED))

    def discover(self, cancel: threading.Event, peer_updates: queue.Queue) -> None:
        browse(
            MDNS_SERVICE,
            lambda e: self._handle_added(e, peer_updates),
            lambda e: self._handle_removed(e, peer_updates),
            cancel,
        )

    def announce(
        self,
        cancel: threading.Event,
        local_device_name: str,
        save_dir: str,
        transfer_requests: queue.Queue,
    ) -> None:
        threads = [
            threading.Thread(
                target=announce_service,
                args=(local_device_name, self.port, cancel),
                daemon=True,
            ),
            threading.Thread(
                target=serve,
                args=(self.port, cancel, save_dir, transfer_requests),
                daemon=True,
            ),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    def send_files(
        self,
        cancel: threading.Event,
        target: Device,
        progress: queue.Queue,
        filepaths: Sequence[str],
    ) -> None:
        with ExitStack() as stack:
            files = []
            for path in filepaths:
                try:
                    files.append(stack.enter_context(open(path, "rb")))
                except OSError as exc:
                    raise ShairError(ErrorCode.STAT_FILE, f"cannot open file {path}", exc) from exc
            try:
                header = Header.from_paths(filepaths)
            except OSError as exc:
                raise ShairError(ErrorCode.STAT_FILE, "cannot stat file", exc) from exc

            with self._lock:
                ip, port = self.device_to_tcp.get(target, (target.ip, target.svc_port))
            try:
                conn = socket.create_connection((ip, port))
            except (OSError, TypeError) as exc:
                raise ShairError(
                    ErrorCode.UNEXPECTED, f"cannot dial with server {ip}:{port}", exc
                ) from exc
            stack.callback(conn.close)

            sender = Sender(cancel, conn, files)
            try:
                sender.write_header(header)
            except (OSError, CancelledError) as exc:
                raise ShairError(ErrorCode.UNEXPECTED, "failed to write header on conn", exc) from exc

            try:
                answer = conn.recv(1)
            except OSError as exc:
                raise ShairError(ErrorCode.UNEXPECTED, "failed to read confirmation bit", exc) from exc
            if len(answer) != 1:
                raise ShairError(ErrorCode.UNEXPECTED, "failed to read confirmation bit")
            if answer == b"\x00":
                raise ShairError(ErrorCode.TRANSFER_REJECTED, "cannot send file")

            try:
                sender.send_files(progress)
            except (OSError, CancelledError) as exc:
                raise ShairError(ErrorCode.SEND_FILE, "cannot send file", exc) from exc