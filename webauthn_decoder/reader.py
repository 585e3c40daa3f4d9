"""Bounds-checked reading of binary records."""
from __future__ import annotations

import struct
from typing import Union

from .errors import Truncation

__all__ = ["ByteReader"]


class ByteReader:
    """Reads fields from a borrowed buffer while tracking an offset.

    The source buffer is never modified or copied; :attr:`source` always
    returns the buffer exactly as it was handed in, and :meth:`remainder`
    returns only the unread part. Reads past the end raise
    :class:`~webauthn_decoder.errors.Truncation` naming the field.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._source = bytes(data)
        self._view = memoryview(self._source)
        self._offset = 0

    @property
    def source(self) -> bytes:
        return self._source

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._view) - self._offset

    def read(self, length: int, field: str) -> bytes:
        if length < 0:
            raise ValueError("length must not be negative")
        if length > self.remaining:
            raise Truncation(field, length, self.remaining)
        start = self._offset
        self._offset += length
        return bytes(self._view[start : self._offset])

    def _unpack(self, fmt: str, field: str) -> int:
        return struct.unpack(fmt, self.read(struct.calcsize(fmt), field))[0]

    def read_u8(self, field: str) -> int:
        return self._unpack(">B", field)

    def read_u16(self, field: str) -> int:
        return self._unpack(">H", field)

    def read_u32(self, field: str) -> int:
        return self._unpack(">I", field)

    def peek(self) -> bytes:
        """Return the unread bytes without consuming them."""
        return bytes(self._view[self._offset :])

    def remainder(self) -> bytes:
        """Consume and return every byte not yet read."""
        return self.read(self.remaining, "remainder")

    def skip(self, length: int, field: str) -> None:
        self.read(length, field)
