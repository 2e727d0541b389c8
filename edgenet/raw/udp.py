"""UDP packet header encoding and decoding."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import ClassVar

from .bytes import BytesIn, BytesOut
from .checksum import checksum_accumulate, checksum_finish
from .errors import BufferOverflowError, DataUnderflowError, InvalidChecksumError


def _u16(reader: BytesIn) -> int:
    return int.from_bytes(reader.arr(2), "big")


@dataclass
class UdpPacketHeader:
    """A parsed UDP header."""

    src: int
    dst: int
    length: int = 0
    csum: int = 0

    PROTO: ClassVar[int] = 17
    SIZE: ClassVar[int] = 8
    CHECKSUM_WORD: ClassVar[int] = 3

    @classmethod
    def decode(cls, data: bytes) -> UdpPacketHeader:
        """Decode the 8-byte header."""
        reader = BytesIn(data)
        return cls(
            src=_u16(reader),
            dst=_u16(reader),
            length=_u16(reader),
            csum=_u16(reader),
        )

    def encode(self) -> bytes:
        """Encode the 8-byte header."""
        writer = BytesOut(self.SIZE)
        for field in (self.src, self.dst, self.length, self.csum):
            writer.push(field.to_bytes(2, "big"))
        return writer.getvalue()

    def encode_with_payload(self, payload: bytes, src, dst, capacity: int | None = None) -> bytes:
        """Encode the header followed by ``payload``, updating length and checksum.

        ``src`` and ``dst`` are the IP addresses of the pseudo header;
        ``capacity`` limits the size of the whole UDP packet.
        """
        if capacity is not None and (capacity < self.SIZE or len(payload) > capacity - self.SIZE):
            raise BufferOverflowError()

        total = self.SIZE + len(payload)
        if total > 0xFFFF:
            raise BufferOverflowError()
        self.length = total

        packet = self.encode() + bytes(payload)
        self.csum = self.checksum(packet, src, dst)
        return self.inject_checksum(packet, self.csum)

    @classmethod
    def decode_with_payload(
        cls,
        packet: bytes,
        src,
        dst,
        filter_src: int | None = None,
        filter_dst: int | None = None,
    ) -> tuple[UdpPacketHeader, bytes] | None:
        """Decode a packet, returning ``None`` if its ports do not match the filters."""
        hdr = cls.decode(packet)

        if filter_src is not None and filter_src != hdr.src:
            return None
        if filter_dst is not None and filter_dst != hdr.dst:
            return None

        if len(packet) < hdr.length:
            raise DataUnderflowError()
        packet = bytes(packet[: hdr.length])

        if cls.checksum(packet, src, dst) != hdr.csum:
            raise InvalidChecksumError()

        return hdr, packet[cls.SIZE :]

    @staticmethod
    def inject_checksum(packet: bytes, checksum: int) -> bytes:
        """Return ``packet`` with ``checksum`` written into its checksum field."""
        offset = UdpPacketHeader.CHECKSUM_WORD << 1
        if len(packet) < offset + 2:
            raise DataUnderflowError()
        return bytes(packet[:offset]) + checksum.to_bytes(2, "big") + bytes(packet[offset + 2 :])

    @staticmethod
    def checksum(packet: bytes, src, dst) -> int:
        """Compute the checksum of an encoded packet, including the pseudo header."""
        pseudo = (
            IPv4Address(src).packed
            + IPv4Address(dst).packed
            + bytes((0, UdpPacketHeader.PROTO))
            + (len(packet) & 0xFFFF).to_bytes(2, "big")
        )
        total = checksum_accumulate(pseudo) + checksum_accumulate(
            packet, UdpPacketHeader.CHECKSUM_WORD
        )
        return checksum_finish(total)


def decode(
    src,
    dst,
    packet: bytes,
    filter_src: int | None = None,
    filter_dst: int | None = None,
) -> tuple[tuple[str, int], tuple[str, int], bytes] | None:
    """Decode a UDP packet into ``((src_host, src_port), (dst_host, dst_port), payload)``."""
    decoded = UdpPacketHeader.decode_with_payload(packet, src, dst, filter_src, filter_dst)
    if decoded is None:
        return None
    hdr, payload = decoded
    return (str(IPv4Address(src)), hdr.src), (str(IPv4Address(dst)), hdr.dst), payload


def encode(
    src: tuple[str, int],
    dst: tuple[str, int],
    payload: bytes,
    capacity: int | None = None,
) -> bytes:
    """Encode a UDP packet between two ``(host, port)`` addresses."""
    src_host, src_port = src
    dst_host, dst_port = dst
    return UdpPacketHeader(src_port, dst_port).encode_with_payload(
        payload, src_host, dst_host, capacity
    )