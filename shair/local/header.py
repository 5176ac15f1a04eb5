"""The header sent ahead of the files in a transfer.

Layout: total header size (u16, big endian), number of files (u16, big
endian), one byte per file holding the byte length of its name, the names,
then each file size as a zig-zag varint.
"""

from __future__ import annotations

import os
import struct
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

_MAX_VARINT_LEN = 10
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_PREFIX = struct.Struct(">HH")


def encode_varint(value: int) -> bytes:
    """Encode a signed 64-bit integer as a zig-zag varint."""
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of int64 range: {value}")
    ux = value << 1 if value >= 0 else ~(value << 1)
    out = bytearray()
    while ux >= 0x80:
        out.append((ux & 0x7F) | 0x80)
        ux >>= 7
    out.append(ux)
    return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a zig-zag varint at ``offset``; return the value and next offset."""
    result = 0
    shift = 0
    for i, byte in enumerate(data[offset:offset + _MAX_VARINT_LEN]):
        if i == _MAX_VARINT_LEN - 1 and byte > 1:
            raise ValueError("varint overflows 64 bits")
        result |= (byte & 0x7F) << shift
        if byte < 0x80:
            value = result >> 1
            if result & 1:
                value = ~value
            return value, offset + i + 1
        shift += 7
    raise ValueError("truncated varint")


def _encode_name(name: str) -> bytes:
    return name.encode("utf-8", "surrogateescape")


@dataclass(frozen=True)
class Header:
    """Names and sizes of the files in a transfer."""

    names: tuple[str, ...]
    sizes: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        object.__setattr__(self, "sizes", tuple(self.sizes))
        if len(self.names) != len(self.sizes):
            raise ValueError("names and sizes differ in length")
        if len(self.names) > 0xFFFF:
            raise ValueError("too many files for one header")
        for name in self.names:
            if len(_encode_name(name)) > 0xFF:
                raise ValueError(f"file name longer than 255 bytes: {name!r}")

    @classmethod
    def from_paths(cls, paths: Iterable[str | os.PathLike]) -> Header:
        """Build a header from files on disk, using their base names."""
        names, sizes = [], []
        for path in paths:
            p = Path(path)
            names.append(p.name)
            sizes.append(p.stat().st_size)
        return cls(tuple(names), tuple(sizes))

    @property
    def num_files(self) -> int:
        return len(self.names)

    @property
    def name_lengths(self) -> tuple[int, ...]:
        return tuple(len(_encode_name(n)) for n in self.names)

    @property
    def header_size(self) -> int:
        return len(self.encode())

    def encode(self) -> bytes:
        encoded_names = [_encode_name(n) for n in self.names]
        body = bytearray(len(n) for n in encoded_names)
        for name in encoded_names:
            body += name
        for size in self.sizes:
            body += encode_varint(size)
        total = _PREFIX.size + len(body)
        if total > 0xFFFF:
            raise ValueError("header exceeds 65535 bytes")
        return _PREFIX.pack(total, self.num_files) + bytes(body)

    @classmethod
    def decode(cls, data: bytes) -> Header:
        """Parse an encoded header; raise ValueError if it is malformed."""
        data = bytes(data)
        if len(data) < _PREFIX.size:
            raise ValueError("header too short")
        _, num_files = _PREFIX.unpack_from(data)
        offset = _PREFIX.size
        lengths = data[offset:offset + num_files]
        if len(lengths) != num_files:
            raise ValueError("truncated name lengths")
        offset += num_files
        names = []
        for length in lengths:
            raw = data[offset:offset + length]
            if len(raw) != length:
                raise ValueError("truncated file name")
            names.append(raw.decode("utf-8", "surrogateescape"))
            offset += length
        sizes = []
        for _ in range(num_files):
            size, offset = decode_varint(data, offset)
            sizes.append(size)
        return cls(tuple(names), tuple(sizes))