"""Write the header and file contents of a transfer to a connection."""

from __future__ import annotations

import socket
import threading
from collections.abc import Sequence
from concurrent.futures import CancelledError
from typing import BinaryIO

from shair.local.conn import ContextConn
from shair.local.header import Header
from shair.progress import ProgressSink, ProgressWriter

_CHUNK = 32 * 1024


class Sender:
    """Sends files over one connection, stopping when ``cancel`` is set."""

    def __init__(
        self, cancel: threading.Event, conn: socket.socket, files: Sequence[BinaryIO]
    ) -> None:
        self.conn = ContextConn(cancel, conn)
        self.files = list(files)

    def write_header(self, header: Header) -> int:
        """Send the encoded header; return the number of bytes written."""
        data = header.encode()
        try:
            return self.conn.write(data)
        except CancelledError as exc:
            raise CancelledError(f"context cancelled while sending header: {exc}") from exc
        except OSError as exc:
            raise OSError(f"can't send the header: {exc}") from exc

    def send_files(self, progress: ProgressSink) -> None:
        """Send every file, then put None on ``progress``; close the connection."""
        try:
            for index in range(len(self.files)):
                self.send_file(index, progress)
        finally:
            self.conn.conn.close()
        progress.put(None)

    def send_file(self, index: int, progress: ProgressSink) -> int:
        """Send one file, reporting each chunk; return the bytes sent."""
        file = self.files[index]
        name = getattr(file, "name", str(index))
        reporter = ProgressWriter(progress)
        sent = 0
        try:
            while chunk := file.read(_CHUNK):
                self.conn.write(chunk)
                reporter.write(chunk)
                sent += len(chunk)
        except CancelledError as exc:
            raise CancelledError(f"context cancelled while sending file {name}: {exc}") from exc
        except (BrokenPipeError, ConnectionResetError) as exc:
            raise ConnectionError(f"connection closed while sending file {name}: {exc}") from exc
        except OSError as exc:
            raise OSError(f"can't send file {name}: {exc}") from exc
        return sent