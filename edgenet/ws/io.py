"""Sending and receiving WebSocket frames over asynchronous streams.

Readers provide ``async readexactly(n)`` and writers provide ``write(data)``
and ``async drain()``, as :mod:`asyncio` streams do.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from .frame import (
    BufferOverflowError,
    FrameHeader,
    FrameType,
    IncompleteError,
    InvalidFrameError,
    InvalidLenError,
)


async def _read_exact(reader: Any, n: int) -> bytes:
    try:
        return await reader.readexactly(n)
    except asyncio.IncompleteReadError as exc:
        raise InvalidFrameError() from exc


async def recv_header(reader: Any) -> FrameHeader:
    """Read a frame header, pulling only as many bytes as it needs."""
    buf = bytearray()
    need = FrameHeader.MIN_LEN
    while True:
        buf += await _read_exact(reader, need)
        try:
            header, _ = FrameHeader.deserialize(buf)
        except IncompleteError as exc:
            need = exc.missing
        else:
            return header


async def send_header(writer: Any, header: FrameHeader) -> None:
    """Write a frame header."""
    writer.write(header.serialize())
    await writer.drain()


async def recv_payload(reader: Any, header: FrameHeader, max_len: int | None = None) -> bytes:
    """Read and unmask the payload that follows ``header``.

    Raises :class:`BufferOverflowError` if the payload exceeds ``max_len``.
    """
    if max_len is not None and max_len < header.payload_len:
        raise BufferOverflowError()
    if header.payload_len == 0:
        return b""
    payload = await _read_exact(reader, header.payload_len)
    return header.mask(payload, 0)


async def send_payload(writer: Any, header: FrameHeader, payload: bytes) -> None:
    """Mask (if the header says so) and write the payload of ``header``."""
    if len(payload) != header.payload_len:
        raise InvalidLenError()
    if not payload:
        return
    writer.write(header.mask(payload, 0))
    await writer.drain()


async def recv(reader: Any, max_len: int | None = None) -> tuple[FrameType, bytes]:
    """Read a whole frame, returning its type and unmasked payload."""
    header = await recv_header(reader)
    payload = await recv_payload(reader, header, max_len)
    return header.frame_type, payload


async def send(writer: Any, frame_type: FrameType, mask_key: int | None, data: bytes) -> None:
    """Write a whole frame carrying ``data``."""
    header = FrameHeader(frame_type, len(data), mask_key)
    await send_header(writer, header)
    await send_payload(writer, header, data)


class WsConnection:
    """A WebSocket connection over a reader and writer pair.

    ``mask_gen`` supplies the mask key of every outgoing frame; clients
    return a fresh key, servers return ``None``.
    """

    def __init__(
        self,
        reader: Any,
        writer: Any,
        mask_gen: Callable[[], int | None] | None = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self._mask_gen = mask_gen or (lambda: None)

    async def recv(self, max_len: int | None = None) -> tuple[FrameType, bytes]:
        """Receive one frame."""
        return await recv(self.reader, max_len)

    async def send(self, frame_type: FrameType, data: bytes) -> None:
        """Send one frame, masked with a key from the mask generator."""
        await send(self.writer, frame_type, self._mask_gen(), data)