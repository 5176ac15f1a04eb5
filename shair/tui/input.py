"""The page where the user enters the paths of the files to send."""

from __future__ import annotations

import os
import stat
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from shair.model import FilePreview
from shair.tui.messages import (
    ChangePageInputToSendingMsg,
    Cmd,
    KeyMsg,
    ValidateFilepathsMsg,
)

_KEY_TEXT = {"enter": "\n", "space": " "}


class TextArea:
    """A minimal multi-line text input."""

    def __init__(self, placeholder: str = "", focused: bool = False) -> None:
        self.placeholder = placeholder
        self.focused = focused
        self._text = ""

    def focus(self) -> None:
        self.focused = True

    def blur(self) -> None:
        self.focused = False

    def insert(self, text: str) -> None:
        self._text += text

    def backspace(self) -> None:
        self._text = self._text[:-1]

    def value(self) -> str:
        return self._text

    def handle_key(self, key: str) -> None:
        """Apply a key press when focused; unknown keys are ignored."""
        if not self.focused:
            return
        if key == "backspace":
            self.backspace()
        elif key in _KEY_TEXT:
            self.insert(_KEY_TEXT[key])
        elif len(key) == 1:
            self.insert(key)

    def view(self) -> str:
        if not self._text:
            return f"┃ {self.placeholder}"
        return "\n".join(f"┃ {line}" for line in self._text.split("\n"))


def validate_filepaths(paths: Sequence[str]) -> tuple[list[FilePreview], list[int]]:
    """Stat each path; return previews of the regular files and indexes of the rest.

    Missing paths and directories count as invalid.
    """
    files: list[FilePreview] = []
    invalids: list[int] = []
    for index, path in enumerate(paths):
        try:
            info = os.stat(path)
        except (OSError, ValueError):
            invalids.append(index)
            continue
        if stat.S_ISDIR(info.st_mode):
            invalids.append(index)
        else:
            files.append(FilePreview(Path(path).name, info.st_size))
    return files, invalids


def validate_filepaths_cmd(paths: Sequence[str]) -> Cmd:
    """A command that validates ``paths`` and reports a ValidateFilepathsMsg."""
    paths = list(paths)

    def cmd() -> ValidateFilepathsMsg:
        files, invalids = validate_filepaths(paths)
        return ValidateFilepathsMsg(
            invalid=bool(invalids), paths=paths, files=files, invalids=invalids
        )

    return cmd


class FileInputModel:
    """Collects one path per line; tab validates them and moves on to sending."""

    def __init__(self) -> None:
        self.textarea = TextArea(placeholder="/home/foo/...", focused=True)
        self.invalid_filepaths: list[str] = []
        self.input_paths: list[str] = []

    def init(self) -> Optional[Cmd]:
        """Give the text area the focus when the page starts."""
        self.textarea.focus()
        return None

    def update(self, msg: object) -> Optional[Cmd]:
        if isinstance(msg, KeyMsg):
            if msg.key == "tab":
                self.input_paths = self.textarea.value().split("\n")
                return validate_filepaths_cmd(self.input_paths)
            self.textarea.handle_key(msg.key)
            return None

        if isinstance(msg, ValidateFilepathsMsg):
            if msg.invalid:
                self.invalid_filepaths = [msg.paths[i] for i in msg.invalids]
                return None
            self.invalid_filepaths = []
            previews = list(msg.files)
            paths = list(msg.paths)
            return lambda: ChangePageInputToSendingMsg(previews, paths)

        return None

    def view(self) -> str:
        footer = "(esc) quit (tab) send"
        if self.invalid_filepaths:
            footer += f"   ---   cannot find files: [{' '.join(self.invalid_filepaths)}]"
        return f"Pick files to send\n\n{self.textarea.view()}\n\n{footer}\n\n"