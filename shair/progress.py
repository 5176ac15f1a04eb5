"""Report the number of bytes passing through a stream to a queue."""

from __future__ import annotations

from typing import Protocol


class ProgressSink(Protocol):
    """Anything that accepts byte counts, such as a queue."""

    def put(self, item: int) -> None:
        """Accept one byte count."""


class ProgressWriter:
    """A writer that forwards the length of every chunk to a progress sink.

    It is meant to sit beside a real writer: if the sink blocks, the copy
    feeding both blocks too.
    """

    def __init__(self, progress: ProgressSink) -> None:
        self.progress = progress

    def write(self, data: bytes) -> int:
        size = len(data)
        self.progress.put(size)
        return size