"""Accept incoming transfers and save the received files."""

from __future__ import annotations

import os
import queue
import socket
import threading
from pathlib import Path

from shair.local.header import Header
from shair.model import Device, FilePreview, SvcType, TransferRequest
from shair.progress import ProgressSink, ProgressWriter

_CHUNK = 32 * 1024
_POLL = 0.2


def _recv_exact(conn: socket.socket, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = conn.recv(size - len(buf))
        if not chunk:
            raise ConnectionError("connection closed while reading header")
        buf += chunk
    return bytes(buf)


def read_header(conn: socket.socket) -> Header:
    """Read one length-prefixed header from ``conn``."""
    prefix = _recv_exact(conn, 2)
    size = int.from_bytes(prefix, "big")
    if size < 4:
        raise ValueError(f"invalid header size {size}")
    return Header.decode(prefix + _recv_exact(conn, size - 2))


def read_and_save_file(
    conn: socket.socket, name: str, size: int, save_dir: str | os.PathLike, progress: ProgressSink
) -> int:
    """Copy up to ``size`` bytes from ``conn`` into ``save_dir/name``; return bytes read."""
    safe_name = Path(name).name
    if not safe_name or safe_name in (".", ".."):
        raise ValueError(f"invalid file name {name!r}")
    reporter = ProgressWriter(progress)
    read = 0
    with open(Path(save_dir) / safe_name, "wb") as out:
        while read < size:
            chunk = conn.recv(min(_CHUNK, size - read))
            if not chunk:
                break
            out.write(chunk)
            reporter.write(chunk)
            read += len(chunk)
    return read


def _peer_name(conn: socket.socket) -> str:
    try:
        peer = conn.getpeername()
        if isinstance(peer, tuple):
            return socket.gethostbyaddr(peer[0])[0]
    except (OSError, IndexError, TypeError):
        pass
    return "unknown"


def handle_request(
    conn: socket.socket,
    cancel: threading.Event,
    save_dir: str | os.PathLike,
    transfer_requests: queue.Queue,
) -> None:
    """Serve one transfer: ask the user, answer the sender, save the files."""
    progress: queue.Queue = queue.Queue()
    try:
        header = read_header(conn)
        previews = [FilePreview(n, s) for n, s in zip(header.names, header.sizes)]
        request = TransferRequest(
            sender=Device(name=_peer_name(conn), discovered_on=SvcType.LOCAL),
            file_previews=previews,
            progress=progress,
        )
        transfer_requests.put(request)

        while True:
            if cancel.is_set():
                return
            try:
                accepted = request.accept.get(timeout=_POLL)
                break
            except queue.Empty:
                continue

        if not accepted:
            conn.sendall(b"\x00")
            return
        conn.sendall(b"\x01")

        for name, size in zip(header.names, header.sizes):
            read = read_and_save_file(conn, name, size, save_dir, progress)
            if read != size:
                raise ConnectionError(f"didn't read enough bytes for file {name}")
    finally:
        progress.put(None)
        conn.close()


def serve(
    port: int,
    cancel: threading.Event,
    save_dir: str | os.PathLike,
    transfer_requests: queue.Queue,
) -> None:
    """Accept transfers on ``port`` one at a time until ``cancel`` is set."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(("", port))
        listener.listen()
        listener.settimeout(_POLL)
        while not cancel.is_set():
            try:
                conn, _ = listener.accept()
            except (socket.timeout, OSError):
                continue
            conn.settimeout(None)
            try:
                handle_request(conn, cancel, save_dir, transfer_requests)
            except (OSError, ValueError):
                continue