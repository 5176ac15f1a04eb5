"""Messages exchanged between the UI models, and command batching.

A command is a callable taking no arguments that returns a message (or
None when it has nothing to report), or a tuple of commands that are to be
run concurrently.
"""

from __future__ import annotations

import queue
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from shair.model import Device, FilePreview, PeerStatus, PeerUpdate, TransferRequest

Cmd = Union[Callable[[], Any], Tuple[Callable[[], Any], ...]]


def batch(*args: Optional[Cmd]) -> Optional[Cmd]:
    """Combine commands into one, dropping None and flattening batches."""
    cmds: list[Callable[[], Any]] = []
    for cmd in args:
        if cmd is None:
            continue
        if isinstance(cmd, tuple):
            cmds.extend(c for c in cmd if c is not None)
        else:
            cmds.append(cmd)
    if not cmds:
        return None
    if len(cmds) == 1:
        return cmds[0]
    return tuple(cmds)


@dataclass(frozen=True)
class KeyMsg:
    """A key press, named like "esc", "enter", "tab", "up" or a single character."""

    key: str

    def __str__(self) -> str:
        return self.key


@dataclass
class PeerUpdateMsg:
    """A peer was discovered or removed by the backend."""

    update: PeerUpdate

    @property
    def peer(self) -> Device:
        return self.update.peer

    @property
    def status(self) -> PeerStatus:
        return self.update.status


@dataclass
class TransferRequestMsg:
    """A remote device asks to send files."""

    request: TransferRequest


@dataclass
class ErrMsg:
    """A send operation failed."""

    error: BaseException

    def __str__(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class SendingDoneMsg:
    """All files were sent."""


@dataclass
class ReceivingDoneMsg:
    """The incoming transfer ended; ``expected`` is filled in by the root model."""

    received: int
    expected: int = 0


@dataclass(frozen=True)
class DownloadProgressMsg:
    size: int


@dataclass(frozen=True)
class UploadProgressMsg:
    size: int


@dataclass
class ValidateFilepathsMsg:
    """The outcome of checking user-entered paths.

    ``files`` holds previews of the valid paths, ``invalids`` the indexes
    of the invalid ones in ``paths``.
    """

    invalid: bool
    paths: list[str] = field(default_factory=list)
    files: list[FilePreview] = field(default_factory=list)
    invalids: list[int] = field(default_factory=list)


@dataclass
class ChangePageListToInputMsg:
    dest: Device


@dataclass
class ChangePageListToReceivingMsg:
    file_previews: list[FilePreview]
    progress: Optional[queue.Queue]
    sender: Optional[Device]


@dataclass
class ChangePageInputToSendingMsg:
    file_previews: list[FilePreview]
    file_paths: list[str]


@dataclass(frozen=True)
class QuitMsg:
    """Ask the program to exit."""