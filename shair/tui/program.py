"""The terminal event loop and the command that starts the application."""

from __future__ import annotations

import argparse
import logging
import os
import queue
import socket
import sys
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Optional, Protocol

from shair.app import Application
from shair.local.shairer import LocalShairer
from shair.tui.messages import Cmd, KeyMsg, PeerUpdateMsg, QuitMsg, TransferRequestMsg
from shair.tui.root import RootModel

try:
    import termios
    import tty
except ImportError:  # not available on every platform
    termios = None
    tty = None

DEFAULT_PORT = 8085

_SEQUENCES = {"A": "up", "B": "down", "C": "right", "D": "left"}
_SPECIAL = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
}


class Model(Protocol):
    def init(self) -> Optional[Cmd]:
        """Return the first command to run."""

    def update(self, msg: object) -> Optional[Cmd]:
        """Apply a message and return a command to run."""

    def view(self) -> str:
        """Render the model."""


def _parse_keys(text: str) -> list[str]:
    """Turn raw terminal input into key names."""
    keys: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\x1b":
            if i + 2 < len(text) and text[i + 1] in "[O" and text[i + 2] in _SEQUENCES:
                keys.append(_SEQUENCES[text[i + 2]])
                i += 3
                continue
            keys.append("esc")
        elif ch in _SPECIAL:
            keys.append(_SPECIAL[ch])
        elif "\x01" <= ch <= "\x1a":
            keys.append(f"ctrl+{chr(ord(ch) + 96)}")
        else:
            keys.append(ch)
        i += 1
    return keys


def _tty_fileno(stream: object) -> Optional[int]:
    try:
        fd = stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError):
        return None
    return fd if os.isatty(fd) else None


@contextmanager
def _cbreak(stream: object) -> Iterator[None]:
    fd = _tty_fileno(stream)
    if fd is None or termios is None or tty is None:
        yield
        return
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class Program:
    """Feeds key presses and backend events to a model and renders its view."""

    def __init__(
        self,
        model: Model,
        input: Optional[IO[str]] = None,
        output: Optional[IO[str]] = None,
    ) -> None:
        self.model = model
        self.input = input if input is not None else sys.stdin
        self.output = output if output is not None else sys.stdout
        self._inbox: queue.Queue = queue.Queue()
        self._done = threading.Event()
        self._clear = _tty_fileno(self.output) is not None

    def send(self, msg: object) -> None:
        """Queue a message for the model; safe from any thread."""
        self._inbox.put(msg)

    def dispatch(self, msg: object) -> bool:
        """Apply one message; return False once the program has quit."""
        if self._done.is_set():
            return False
        if isinstance(msg, QuitMsg):
            self._done.set()
            return False
        self._execute(self.model.update(msg))
        return True

    def _execute(self, cmd: Optional[Cmd]) -> None:
        if cmd is None:
            return
        if isinstance(cmd, tuple):
            for sub in cmd:
                self._execute(sub)
            return
        threading.Thread(target=self._run_cmd, args=(cmd,), daemon=True).start()

    def _run_cmd(self, cmd) -> None:
        result = cmd()
        if result is not None:
            self.send(result)

    def _read_input(self) -> None:
        fd = _tty_fileno(self.input)
        while not self._done.is_set():
            try:
                if fd is not None:
                    data = os.read(fd, 64).decode("utf-8", "replace")
                else:
                    data = self.input.read(64)
            except (OSError, ValueError):
                return
            if not data:
                return
            for key in _parse_keys(data):
                self.send(KeyMsg(key))

    def _render(self) -> None:
        if self._clear:
            self.output.write("\x1b[H\x1b[2J")
        self.output.write(self.model.view())
        self.output.flush()

    def run(self) -> Model:
        """Run until a QuitMsg arrives; return the model."""
        with _cbreak(self.input):
            threading.Thread(target=self._read_input, daemon=True).start()
            self._execute(self.model.init())
            self._render()
            while not self._done.is_set():
                if self.dispatch(self._inbox.get()):
                    self._render()
        return self.model


def forward_peer_updates(program: Program, peer_updates: queue.Queue) -> None:
    """Forward peer updates to the program until None is received."""
    while (update := peer_updates.get()) is not None:
        program.send(PeerUpdateMsg(update))


def forward_transfer_requests(program: Program, transfer_requests: queue.Queue) -> None:
    """Forward transfer requests to the program until None is received."""
    while (request := transfer_requests.get()) is not None:
        program.send(TransferRequestMsg(request))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the application and its terminal interface."""
    parser = argparse.ArgumentParser(prog="shair", description="Share files on the local network.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="TCP port for transfers")
    parser.add_argument("--save-dir", default=None, help="where received files are saved")
    args = parser.parse_args(argv)

    logger = logging.getLogger("shair")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False

    save_dir = args.save_dir or str(Path.home())
    app = Application(socket.gethostname(), save_dir, LocalShairer(args.port, logger), logger)
    program = Program(RootModel(app, app))

    peer_updates: queue.Queue = queue.Queue()
    transfer_requests: queue.Queue = queue.Queue()
    workers = (
        (app.start, (peer_updates, transfer_requests)),
        (forward_peer_updates, (program, peer_updates)),
        (forward_transfer_requests, (program, transfer_requests)),
    )
    for target, targs in workers:
        threading.Thread(target=target, args=targs, daemon=True).start()

    try:
        program.run()
    except Exception as exc:
        print("Error running program:", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())