"""The root UI model that switches between pages and holds shared state."""

from __future__ import annotations

import enum
import queue
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, Protocol

from shair.model import Device
from shair.tui.input import FileInputModel
from shair.tui.messages import (
    ChangePageInputToSendingMsg,
    ChangePageListToInputMsg,
    ChangePageListToReceivingMsg,
    Cmd,
    ErrMsg,
    KeyMsg,
    PeerUpdateMsg,
    QuitMsg,
    ReceivingDoneMsg,
    SendingDoneMsg,
    TransferRequestMsg,
    batch,
)
from shair.tui.peers import ListModel
from shair.tui.transfer import ReceivingModel, SendingModel


class FileSender(Protocol):
    def send_files(
        self,
        cancel: threading.Event,
        target: Device,
        progress: queue.Queue,
        filepaths: Sequence[str],
    ) -> None: ...


class Quitter(Protocol):
    def stop(self) -> None: ...


class State(enum.Enum):
    LIST = enum.auto()
    FILE_INPUT = enum.auto()
    RECEIVING = enum.auto()
    SENDING = enum.auto()
    QUIT = enum.auto()


@dataclass
class Store:
    """State shared between pages.

    ``dest_for_send`` is chosen on the peer list and used once the paths
    are validated; ``transfer_request_tot_size`` is the byte total of an
    accepted request, compared with what was received at the end.
    """

    dest_for_send: Optional[Device] = None
    transfer_request_tot_size: int = 0


class QuitModel:
    """The closing page: stops the backend and asks the program to exit."""

    def __init__(self, quitter: Quitter) -> None:
        self.quitter = quitter

    def _quit(self) -> QuitMsg:
        self.quitter.stop()
        return QuitMsg()

    def init(self) -> Optional[Cmd]:
        """Starting this page means quitting: return the quit command."""
        return self._quit

    def update(self, msg: object) -> Optional[Cmd]:
        return self._quit

    def view(self) -> str:
        return "quitting..."


class RootModel:
    """Routes messages to the current page and moves between pages."""

    def __init__(self, sender: FileSender, quitter: Quitter) -> None:
        self.sender = sender
        self.state = State.LIST
        self.models: dict[State, object] = {
            State.LIST: ListModel(),
            State.FILE_INPUT: FileInputModel(),
            State.QUIT: QuitModel(quitter),
        }
        self.store = Store()

    def _send_files_cmd(
        self, progress: queue.Queue, dest: Optional[Device], paths: Sequence[str]
    ) -> Cmd:
        paths = list(paths)

        def cmd() -> object:
            try:
                self.sender.send_files(threading.Event(), dest, progress, paths)
            except Exception as exc:  # reported to the user on the peer list
                return ErrMsg(exc)
            return SendingDoneMsg()

        return cmd

    def init(self) -> Optional[Cmd]:
        """Start the current page and return its command."""
        return self.models[self.state].init()

    def update(self, msg: object) -> Optional[Cmd]:
        cmd: Optional[Cmd] = None
        peers = self.models[State.LIST]

        if isinstance(msg, KeyMsg):
            if msg.key == "esc":
                self.state = State.QUIT
        elif isinstance(msg, (PeerUpdateMsg, TransferRequestMsg)):
            return peers.update(msg)
        elif isinstance(msg, ChangePageListToInputMsg):
            self.store.dest_for_send = msg.dest
            self.state = State.FILE_INPUT
        elif isinstance(msg, ChangePageListToReceivingMsg):
            self.store.transfer_request_tot_size = sum(p.size for p in msg.file_previews)
            self.models[State.RECEIVING] = ReceivingModel(
                msg.sender, msg.file_previews, msg.progress
            )
            self.state = State.RECEIVING
        elif isinstance(msg, ChangePageInputToSendingMsg):
            progress: queue.Queue = queue.Queue()
            self.models[State.SENDING] = SendingModel(
                self.store.dest_for_send, msg.file_previews, progress
            )
            self.state = State.SENDING
            cmd = self._send_files_cmd(progress, self.store.dest_for_send, msg.file_paths)
        elif isinstance(msg, (ErrMsg, SendingDoneMsg)):
            cmd = peers.update(msg)
            self.state = State.LIST
            return cmd
        elif isinstance(msg, ReceivingDoneMsg):
            msg.expected = self.store.transfer_request_tot_size
            cmd = peers.update(msg)
            self.state = State.LIST

        page_cmd = self.models[self.state].update(msg)
        return batch(page_cmd, cmd)

    def view(self) -> str:
        return self.models[self.state].view()