"""Devices, peer updates, transfer requests and the Shairer interface."""

from __future__ import annotations

import enum
import queue
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field


class SvcType(enum.IntEnum):
    """The service a device was discovered on."""

    BLUETOOTH = 0
    LOCAL = 1
    REMOTE = 2

    def __str__(self) -> str:
        return self.name.capitalize()


class PeerStatus(enum.IntEnum):
    DISCOVERED = 0
    REMOVED = 1


@dataclass
class LocalInfo:
    """Where a device on the local network accepts transfers."""

    ip: str | None = None
    svc_port: int = 0


@dataclass(eq=False)
class Device:
    """A peer. Devices compare and hash by identity so they can key maps."""

    name: str = ""
    discovered_on: SvcType = SvcType.BLUETOOTH
    local_info: LocalInfo = field(default_factory=LocalInfo)

    @property
    def ip(self) -> str | None:
        return self.local_info.ip

    @property
    def svc_port(self) -> int:
        return self.local_info.svc_port


@dataclass
class PeerUpdate:
    peer: Device
    status: PeerStatus


@dataclass(frozen=True)
class FilePreview:
    name: str
    size: int


@dataclass
class TransferRequest:
    """An incoming transfer awaiting the user's answer.

    The answer (True or False) goes on ``accept``. Received byte counts
    arrive on ``progress``, followed by None once the transfer has ended.
    """

    sender: Device
    file_previews: list[FilePreview]
    accept: queue.Queue = field(default_factory=queue.Queue)
    progress: queue.Queue = field(default_factory=queue.Queue)


class Shairer(ABC):
    """Peer discovery, advertisement of the local device and file transfer."""

    @abstractmethod
    def discover(self, cancel: threading.Event, peer_updates: queue.Queue) -> None:
        """Put a PeerUpdate on ``peer_updates`` for every peer found or lost.

        Runs until ``cancel`` is set or an error occurs.
        """

    @abstractmethod
    def announce(
        self,
        cancel: threading.Event,
        local_device_name: str,
        save_dir: str,
        transfer_requests: queue.Queue,
    ) -> None:
        """Advertise the local device and receive files into ``save_dir``.

        Every incoming request is put on ``transfer_requests``. Runs until
        ``cancel`` is set or an error occurs.
        """

    @abstractmethod
    def send_files(
        self,
        cancel: threading.Event,
        target: Device,
        progress: queue.Queue,
        filepaths: Sequence[str],
    ) -> None:
        """Send the files to ``target``; raise ShairError on failure."""