"""WebSocket frame types and frame header encoding and decoding."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar


class FrameKind(enum.Enum):
    """The kind of a WebSocket frame."""

    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"
    CONTINUE = "continue"


_OPCODES = {
    FrameKind.CONTINUE: 0,
    FrameKind.TEXT: 1,
    FrameKind.BINARY: 2,
    FrameKind.CLOSE: 8,
    FrameKind.PING: 9,
    FrameKind.PONG: 10,
}


@dataclass(frozen=True)
class FrameType:
    """A frame kind together with its fragmentation flag.

    For text and binary frames ``flag`` tells whether the frame is
    fragmented; for continuation frames it tells whether the frame is the
    final one. Control frames ignore it.
    """

    kind: FrameKind
    flag: bool = False

    @classmethod
    def text(cls, fragmented: bool = False) -> FrameType:
        return cls(FrameKind.TEXT, bool(fragmented))

    @classmethod
    def binary(cls, fragmented: bool = False) -> FrameType:
        return cls(FrameKind.BINARY, bool(fragmented))

    @classmethod
    def ping(cls) -> FrameType:
        return cls(FrameKind.PING)

    @classmethod
    def pong(cls) -> FrameType:
        return cls(FrameKind.PONG)

    @classmethod
    def close(cls) -> FrameType:
        return cls(FrameKind.CLOSE)

    @classmethod
    def continuation(cls, final: bool) -> FrameType:
        return cls(FrameKind.CONTINUE, bool(final))

    def is_fragmented(self) -> bool:
        """Whether the frame is part of a fragmented message."""
        if self.kind in (FrameKind.TEXT, FrameKind.BINARY):
            return self.flag
        return self.kind is FrameKind.CONTINUE

    def is_final(self) -> bool:
        """Whether the frame ends its message."""
        if self.kind in (FrameKind.TEXT, FrameKind.BINARY):
            return not self.flag
        if self.kind is FrameKind.CONTINUE:
            return self.flag
        return True

    def __str__(self) -> str:
        if self.kind is FrameKind.TEXT:
            return "Text" + (" (fragmented)" if self.flag else "")
        if self.kind is FrameKind.BINARY:
            return "Binary" + (" (fragmented)" if self.flag else "")
        if self.kind is FrameKind.CONTINUE:
            return "Continue" + (" (final)" if self.flag else "")
        return self.kind.name.capitalize()


class WsError(Exception):
    """Base class for WebSocket framing errors."""

    message = "WebSocket error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class IncompleteError(WsError):
    """More bytes are needed to decode a frame header."""

    def __init__(self, missing: int) -> None:
        self.missing = missing
        super().__init__(f"Incomplete: {missing} bytes missing")


class InvalidFrameError(WsError):
    """The frame is malformed or the stream ended inside it."""

    message = "Invalid"


class BufferOverflowError(WsError):
    """The payload is larger than the space allowed for it."""

    message = "Buffer overflow"


class InvalidLenError(WsError):
    """A length does not agree with the frame header."""

    message = "Invalid length"


@dataclass
class FrameHeader:
    """A WebSocket frame header."""

    frame_type: FrameType
    payload_len: int
    mask_key: int | None = None

    MIN_LEN: ClassVar[int] = 2
    MAX_LEN: ClassVar[int] = 14

    def __post_init__(self) -> None:
        if not 0 <= self.payload_len < 1 << 64:
            raise ValueError("payload_len must fit into 64 bits")
        if self.mask_key is not None and not 0 <= self.mask_key < 1 << 32:
            raise ValueError("mask_key must fit into 32 bits")

    @classmethod
    def deserialize(cls, buf: bytes | bytearray | memoryview) -> tuple[FrameHeader, int]:
        """Decode a header, returning it and the number of bytes it took.

        Raises :class:`IncompleteError` with the number of missing bytes when
        ``buf`` is too short.
        """
        buf = bytes(buf)
        expected = 2
        if len(buf) < expected:
            raise IncompleteError(expected - len(buf))

        final = bool(buf[0] & 0x80)
        if buf[0] & 0x70:
            raise InvalidFrameError()

        opcode = buf[0] & 0x0F
        if 3 <= opcode <= 7 or opcode >= 11:
            raise InvalidFrameError()

        payload_len = buf[1] & 0x7F
        offset = 2

        if payload_len in (126, 127):
            size = 2 if payload_len == 126 else 8
            expected += size
            if len(buf) < expected:
                raise IncompleteError(expected - len(buf))
            payload_len = int.from_bytes(buf[offset : offset + size], "big")
            offset += size

        mask_key = None
        if buf[1] & 0x80:
            expected += 4
            if len(buf) < expected:
                raise IncompleteError(expected - len(buf))
            mask_key = int.from_bytes(buf[offset : offset + 4], "big")
            offset += 4

        frame_type = {
            0: lambda: FrameType.continuation(final),
            1: lambda: FrameType.text(not final),
            2: lambda: FrameType.binary(not final),
            8: FrameType.close,
            9: FrameType.ping,
            10: FrameType.pong,
        }[opcode]()

        return cls(frame_type, payload_len, mask_key), offset

    def serialized_len(self) -> int:
        """Number of bytes :meth:`serialize` produces."""
        if self.payload_len >= 65536:
            len_len = 8
        elif self.payload_len >= 126:
            len_len = 2
        else:
            len_len = 0
        return 2 + (4 if self.mask_key is not None else 0) + len_len

    def serialize(self) -> bytes:
        """Encode the header."""
        first = _OPCODES[self.frame_type.kind]
        if self.frame_type.is_final():
            first |= 0x80

        out = bytearray((first, 0))
        if self.payload_len < 126:
            out[1] = self.payload_len
        elif self.payload_len < 65536:
            out[1] = 126
            out += self.payload_len.to_bytes(2, "big")
        else:
            out[1] = 127
            out += self.payload_len.to_bytes(8, "big")

        if self.mask_key is not None:
            out[1] |= 0x80
            out += self.mask_key.to_bytes(4, "big")

        return bytes(out)

    def mask(self, data: bytes | bytearray | memoryview, payload_offset: int = 0) -> bytes:
        """Mask or unmask ``data`` found at ``payload_offset`` within the payload."""
        return self.mask_with(data, self.mask_key, payload_offset)

    @staticmethod
    def mask_with(
        data: bytes | bytearray | memoryview, mask_key: int | None, payload_offset: int = 0
    ) -> bytes:
        """Mask or unmask ``data`` with ``mask_key``; ``None`` leaves it unchanged."""
        if mask_key is None:
            return bytes(data)
        key = mask_key.to_bytes(4, "big")
        return bytes(
            byte ^ key[(payload_offset + index) % 4] for index, byte in enumerate(bytes(data))
        )

    def __str__(self) -> str:
        return (
            f"Frame {{ {self.frame_type}, payload len {self.payload_len}, "
            f"mask {self.mask_key} }}"
        )