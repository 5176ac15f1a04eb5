"""The application object that runs a Shairer and serves the UI."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Sequence

from shair.model import Device, Shairer


class Application:
    """Runs a Shairer's discovery and announcement and manages their lifetime."""

    def __init__(
        self,
        local_device_name: str,
        save_dir: str,
        shairer: Shairer,
        logger: logging.Logger | None = None,
    ) -> None:
        self.local_device_name = local_device_name
        self.save_dir = save_dir
        self.shairer = shairer
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._cancel: threading.Event | None = None
        self._threads: list[threading.Thread] = []

    def start(self, peer_updates: queue.Queue, transfer_requests: queue.Queue) -> None:
        """Discover peers and accept transfers until stop() is called.

        Peer updates go to ``peer_updates``; incoming requests go to
        ``transfer_requests``. Blocks until both services have finished.
        """
        cancel = threading.Event()
        threads = [
            threading.Thread(
                target=self.shairer.discover,
                args=(cancel, peer_updates),
                name="shair-discover",
                daemon=True,
            ),
            threading.Thread(
                target=self.shairer.announce,
                args=(cancel, self.local_device_name, self.save_dir, transfer_requests),
                name="shair-announce",
                daemon=True,
            ),
        ]
        with self._lock:
            self._cancel = cancel
            self._threads = threads
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    def stop(self) -> None:
        """Cancel the running services and wait for them to finish."""
        with self._lock:
            cancel, threads = self._cancel, list(self._threads)
        if cancel is None:
            return
        cancel.set()
        current = threading.current_thread()
        for thread in threads:
            if thread is not current and thread.ident is not None:
                thread.join()

    def send_files(
        self,
        cancel: threading.Event,
        target: Device,
        progress: queue.Queue,
        filepaths: Sequence[str],
    ) -> None:
        self.shairer.send_files(cancel, target, progress, filepaths)