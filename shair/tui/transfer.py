"""Pages shown while files are being received or sent."""

from __future__ import annotations

import queue
from collections.abc import Sequence
from typing import Optional

import humanize

from shair.model import Device, FilePreview
from shair.tui.messages import (
    Cmd,
    DownloadProgressMsg,
    ReceivingDoneMsg,
    UploadProgressMsg,
)


def render_file_list(title: str, previews: Sequence[FilePreview]) -> str:
    """Render a titled, numbered list of files with their sizes."""
    parts = [f"{title}\n\n"]
    if not previews:
        parts.append("No files to display.\n")
        return "".join(parts)
    for number, preview in enumerate(previews, start=1):
        size = humanize.naturalsize(preview.size)
        parts.append(f"  {number:2d}. {preview.name:<30} {size:>10}\n")
    parts.append("\n")
    parts.append(f"Total files: {len(previews)}\n")
    return "".join(parts)


class ReceivingModel:
    """Tracks the bytes of an incoming transfer until its progress queue ends."""

    def __init__(
        self,
        sender: Optional[Device],
        file_previews: Sequence[FilePreview],
        progress: queue.Queue,
    ) -> None:
        self.sender = sender
        self.file_previews = list(file_previews)
        self.progress = progress
        self.received = 0
        self.done = False
        self._listening = False

    def _listen(self) -> object:
        size = self.progress.get()
        if size is None:
            self.done = True
            return ReceivingDoneMsg(received=self.received)
        self.received += size
        return DownloadProgressMsg(size)

    def init(self) -> Optional[Cmd]:
        self._listening = True
        return self._listen

    def update(self, msg: object) -> Optional[Cmd]:
        if self.done:
            return None
        if isinstance(msg, DownloadProgressMsg) or not self._listening:
            self._listening = True
            return self._listen
        return None

    def view(self) -> str:
        return render_file_list("Receiving Files", self.file_previews)


class SendingModel:
    """Tracks the bytes of an outgoing transfer until its progress queue ends."""

    def __init__(
        self,
        receiver: Optional[Device],
        file_previews: Sequence[FilePreview],
        progress: queue.Queue,
    ) -> None:
        self.receiver = receiver
        self.file_previews = list(file_previews)
        self.progress = progress
        self.sent = 0
        self.done = False
        self._listening = False

    def _listen(self) -> object:
        size = self.progress.get()
        if size is None:
            self.done = True
            return None
        self.sent += size
        return UploadProgressMsg(size)

    def init(self) -> Optional[Cmd]:
        self._listening = True
        return self._listen

    def update(self, msg: object) -> Optional[Cmd]:
        if self.done:
            return None
        if isinstance(msg, UploadProgressMsg) or not self._listening:
            self._listening = True
            return self._listen
        return None

    def view(self) -> str:
        return render_file_list("Sending Files", self.file_previews)