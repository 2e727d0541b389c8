"""Bounded byte readers and writers used by the packet codecs."""

from __future__ import annotations

from .errors import BufferOverflowError, DataUnderflowError, InvalidFormatError


class BytesIn:
    """Sequential reader over a byte string."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        """Number of bytes consumed so far."""
        return self._offset

    def _left(self) -> int:
        return len(self._data) - self._offset

    def is_empty(self) -> bool:
        return self._offset == len(self._data)

    def byte(self) -> int:
        """Read a single byte."""
        return self.arr(1)[0]

    def slice(self, length: int) -> bytes:
        """Read exactly ``length`` bytes."""
        if length < 0:
            raise ValueError("length must not be negative")
        if length > self._left():
            raise DataUnderflowError()
        chunk = self._data[self._offset : self._offset + length]
        self._offset += length
        return chunk

    def arr(self, n: int) -> bytes:
        """Read exactly ``n`` bytes."""
        return self.slice(n)

    def remaining(self) -> bytes:
        """Read everything that is left."""
        return self.slice(self._left())

    def remaining_byte(self) -> int:
        """Read the last byte; fails if more than one byte is left."""
        return self.remaining_arr(1)[0]

    def remaining_arr(self, n: int) -> bytes:
        """Read the last ``n`` bytes; fails if more than ``n`` bytes are left."""
        if self._left() > n:
            raise InvalidFormatError()
        return self.arr(n)


class BytesOut:
    """Writer that refuses to grow beyond a fixed capacity."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def is_empty(self) -> bool:
        return not self._buf

    def byte(self, value: int) -> BytesOut:
        """Append a single byte."""
        return self.push(bytes((value,)))

    def push(self, data: bytes | bytearray | memoryview) -> BytesOut:
        """Append ``data`` if it fits."""
        if len(data) > self._capacity - len(self._buf):
            raise BufferOverflowError()
        self._buf.extend(data)
        return self

    def getvalue(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf)