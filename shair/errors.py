"""Error codes and the exception raised by transfer operations."""

from __future__ import annotations

import enum


class ErrorCode(enum.Enum):
    """Kinds of failure a transfer can end with."""

    STAT_FILE = "Received an invalid file path"
    SEND_FILE = "Failed to send file"
    CONNECTION_DROPPED = "Tcp connexion dropped"
    TRANSFER_REJECTED = "Target rejected the file transfer"
    UNEXPECTED = "Something unexpected happened"

    def __str__(self) -> str:
        return self.value


class ShairError(Exception):
    """A failure tagged with an ErrorCode, a message and the error behind it."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        underlying: BaseException | None = None,
    ) -> None:
        super().__init__(code, message, underlying)
        self.code = code
        self.message = message
        self.underlying = underlying

    def __str__(self) -> str:
        if self.underlying is None:
            return self.message
        return f"{self.message}: {self.underlying}"