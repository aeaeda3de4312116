"""Reading little-endian values written by the binary generator."""

from __future__ import annotations

import struct


class BinaryReader:
    """Reads values one after another from a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self._buf = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        """Bytes not read yet."""
        return len(self._buf) - self._pos

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise EOFError(f"need {size} bytes, {self.remaining} left")
        chunk = self._buf[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def _unpack(self, fmt: str):
        return struct.unpack(fmt, self._take(struct.calcsize(fmt)))[0]

    def read_bool(self) -> bool:
        return self._take(1)[0] != 0

    def read_uint16(self) -> int:
        return self._unpack("<H")

    def read_uint32(self) -> int:
        return self._unpack("<I")

    def read_uint64(self) -> int:
        return self._unpack("<Q")

    def read_bytes(self) -> bytes:
        """A uint16 length followed by that many bytes."""
        return self._take(self.read_uint16())

    def read_int16(self) -> int:
        return self._unpack("<h")

    def read_int32(self) -> int:
        return self._unpack("<i")

    def read_int64(self) -> int:
        return self._unpack("<q")