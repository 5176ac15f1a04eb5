"""A socket writer that refuses to write once its transfer is cancelled."""

from __future__ import annotations

import socket
import threading
from concurrent.futures import CancelledError


class ContextConn:
    """Wraps a socket so that writes stop as soon as ``cancel`` is set."""

    def __init__(self, cancel: threading.Event, conn: socket.socket) -> None:
        self.cancel = cancel
        self.conn = conn

    def write(self, data: bytes) -> int:
        """Send all of ``data``; raise CancelledError if cancelled."""
        if self.cancel.is_set():
            raise CancelledError("context cancelled")
        self.conn.sendall(data)
        return len(data)