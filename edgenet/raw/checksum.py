"""Internet (ones' complement) checksum helpers."""

from __future__ import annotations

import struct


def checksum_accumulate(data: bytes | bytearray | memoryview, checksum_word: int | None = None) -> int:
    """Sum the 16-bit big-endian words of ``data``.

    The word at index ``checksum_word`` (the checksum field itself) counts as
    zero. An odd trailing byte is padded with a zero byte.
    """
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    return sum(
        word
        for index, (word,) in enumerate(struct.iter_unpack("!H", data))
        if index != checksum_word
    )


def checksum_finish(total: int) -> int:
    """Fold carries into 16 bits and return the ones' complement."""
    while total >> 16:
        total = (total >> 16) + (total & 0xFFFF)
    return ~total & 0xFFFF