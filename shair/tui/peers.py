"""The page listing discovered peers and incoming transfer requests."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Optional

from shair.errors import ErrorCode, ShairError
from shair.model import Device, FilePreview, PeerStatus
from shair.tui.messages import (
    ChangePageListToInputMsg,
    ChangePageListToReceivingMsg,
    Cmd,
    ErrMsg,
    KeyMsg,
    PeerUpdateMsg,
    ReceivingDoneMsg,
    SendingDoneMsg,
    TransferRequestMsg,
)

BASE_FOOTER = "\n(esc) Quit, (enter) Send, (k) Up, (j) Down"


def _row(selected: str, name: str, on: str, ip: str, port: str) -> str:
    return f"{selected:<3} {name:<20} {on:<10} {ip:<15} {port:<5}\n"


@dataclass
class PendingTransfer:
    """An incoming transfer request waiting for the user's answer."""

    accept: Optional[queue.Queue] = None
    progress: Optional[queue.Queue] = None
    file_previews: list[FilePreview] = field(default_factory=list)
    requester: Optional[Device] = None


class ListModel:
    """Shows peers, moves a cursor over them and answers transfer requests."""

    def __init__(self) -> None:
        self.columns = _row(" ", "Device", "On", "IP", "Port")
        self.base_footer = BASE_FOOTER
        self.footer = BASE_FOOTER
        self.additional_msg_footer = ""
        self.cursor = 0
        self.peers: list[Device] = []
        self.transfer_request = PendingTransfer()

    def init(self) -> Optional[Cmd]:
        """Show the base footer when the page starts."""
        self.footer = self.base_footer
        return None

    def _answer(self, accepted: bool) -> PendingTransfer:
        pending = self.transfer_request
        pending.accept.put(accepted)
        self.transfer_request = PendingTransfer(
            None, pending.progress, pending.file_previews, pending.requester
        )
        self.additional_msg_footer = ""
        return pending

    def _handle_key(self, key: str) -> Optional[Cmd]:
        if key in ("k", "ctrl+p", "up"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("j", "ctrl+n", "down"):
            if self.cursor < len(self.peers) - 1:
                self.cursor += 1
        elif key == "enter":
            if self.peers:
                dest = self.peers[self.cursor]
                return lambda: ChangePageListToInputMsg(dest)
        elif key == "y":
            if self.transfer_request.accept is not None:
                pending = self._answer(True)
                previews = list(pending.file_previews)
                return lambda: ChangePageListToReceivingMsg(
                    previews, pending.progress, pending.requester
                )
        elif key == "n":
            if self.transfer_request.accept is not None:
                self._answer(False)
        return None

    def update(self, msg: object) -> Optional[Cmd]:
        if isinstance(msg, KeyMsg):
            return self._handle_key(msg.key)

        if isinstance(msg, PeerUpdateMsg):
            if msg.status == PeerStatus.DISCOVERED:
                self.peers.append(msg.peer)
            else:
                self.peers = [p for p in self.peers if p is not msg.peer]
                self.cursor = max(0, min(self.cursor, len(self.peers) - 1))
        elif isinstance(msg, TransferRequestMsg):
            request = msg.request
            self.transfer_request = PendingTransfer(
                accept=request.accept,
                progress=request.progress,
                file_previews=list(request.file_previews),
                requester=request.sender,
            )
            self.additional_msg_footer = (
                f" (y/n) {request.sender.name} wants to transfer "
                f"{len(self.transfer_request.file_previews)} files"
            )
        elif isinstance(msg, ErrMsg):
            error = msg.error
            if isinstance(error, ShairError) and error.code is ErrorCode.TRANSFER_REJECTED:
                name = self.peers[self.cursor].name if self.cursor < len(self.peers) else "peer"
                self.additional_msg_footer = f" --- {name} didn't accept the files"
            else:
                self.additional_msg_footer = f" --- {error} "
        elif isinstance(msg, SendingDoneMsg):
            self.additional_msg_footer = " --- transfer done"
        elif isinstance(msg, ReceivingDoneMsg):
            if msg.expected != msg.received:
                self.additional_msg_footer = " --- transfer incomplete"
            else:
                self.additional_msg_footer = " --- files received"
        return None

    def view(self) -> str:
        rows = [self.columns]
        for index, peer in enumerate(self.peers):
            selected = ">" if index == self.cursor else " "
            ip = peer.ip if peer.ip else "<nil>"
            rows.append(
                _row(selected, peer.name, str(peer.discovered_on), str(ip), str(peer.svc_port))
            )
        return "".join(rows) + self.footer + self.additional_msg_footer