"""IPv4 packet header encoding and decoding."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import ClassVar

from .bytes import BytesIn, BytesOut
from .checksum import checksum_accumulate, checksum_finish
from .errors import BufferOverflowError, DataUnderflowError, InvalidChecksumError, InvalidFormatError

_UNSPECIFIED = IPv4Address(0)
_BROADCAST = IPv4Address("255.255.255.255")


def _u16(reader: BytesIn) -> int:
    return int.from_bytes(reader.arr(2), "big")


@dataclass
class Ipv4PacketHeader:
    """A parsed IPv4 header."""

    src: IPv4Address
    dst: IPv4Address
    proto: int
    version: int = 4
    hlen: int = 20
    tos: int = 0
    length: int = 20
    ident: int = 0
    off: int = 0
    ttl: int = 64
    csum: int = 0

    MIN_SIZE: ClassVar[int] = 20
    CHECKSUM_WORD: ClassVar[int] = 5
    IP_DF: ClassVar[int] = 0x4000
    IP_MF: ClassVar[int] = 0x2000

    def __post_init__(self) -> None:
        self.src = IPv4Address(self.src)
        self.dst = IPv4Address(self.dst)

    @classmethod
    def new(cls, src, dst, proto: int) -> Ipv4PacketHeader:
        """Create a header with default fields."""
        return cls(src=src, dst=dst, proto=proto)

    @classmethod
    def decode(cls, data: bytes) -> Ipv4PacketHeader:
        """Decode the fixed part of a header."""
        reader = BytesIn(data)
        vhl = reader.byte()
        return cls(
            version=vhl >> 4,
            hlen=(vhl & 0x0F) * 4,
            tos=reader.byte(),
            length=_u16(reader),
            ident=_u16(reader),
            off=_u16(reader),
            ttl=reader.byte(),
            proto=reader.byte(),
            csum=_u16(reader),
            src=IPv4Address(reader.arr(4)),
            dst=IPv4Address(reader.arr(4)),
        )

    def encode(self) -> bytes:
        """Encode the fixed 20-byte part of the header."""
        words = self.hlen // 4 + (1 if self.hlen % 4 else 0)
        writer = BytesOut(self.MIN_SIZE)
        (
            writer.byte(((self.version << 4) | words) & 0xFF)
            .byte(self.tos)
            .push(self.length.to_bytes(2, "big"))
            .push(self.ident.to_bytes(2, "big"))
            .push(self.off.to_bytes(2, "big"))
            .byte(self.ttl)
            .byte(self.proto)
            .push(self.csum.to_bytes(2, "big"))
            .push(self.src.packed)
            .push(self.dst.packed)
        )
        return writer.getvalue()

    def encode_with_payload(self, payload: bytes, capacity: int | None = None) -> bytes:
        """Encode the header followed by ``payload``, updating length and checksum.

        ``capacity`` limits the size of the whole packet.
        """
        hdr_len = self.hlen
        if hdr_len < self.MIN_SIZE or (capacity is not None and capacity < hdr_len):
            raise BufferOverflowError()
        if capacity is not None and len(payload) > capacity - hdr_len:
            raise BufferOverflowError()

        total = hdr_len + len(payload)
        if total > 0xFFFF:
            raise BufferOverflowError()
        self.length = total

        header = self.encode() + bytes(hdr_len - self.MIN_SIZE)
        self.csum = self.checksum(header)
        return self.inject_checksum(header, self.csum) + bytes(payload)

    @classmethod
    def decode_with_payload(
        cls,
        packet: bytes,
        filter_src=None,
        filter_dst=None,
        filter_proto: int | None = None,
    ) -> tuple[Ipv4PacketHeader, bytes] | None:
        """Decode a packet, returning ``None`` if it does not match the filters.

        Unspecified (or ``None``) address filters match anything; broadcast
        addresses in the packet always match.
        """
        filter_src = _UNSPECIFIED if filter_src is None else IPv4Address(filter_src)
        filter_dst = _UNSPECIFIED if filter_dst is None else IPv4Address(filter_dst)

        hdr = cls.decode(packet)
        if hdr.version != 4:
            raise InvalidFormatError()

        if filter_src != _UNSPECIFIED and hdr.src != _BROADCAST and filter_src != hdr.src:
            return None
        if filter_dst != _UNSPECIFIED and hdr.dst != _BROADCAST and filter_dst != hdr.dst:
            return None
        if filter_proto is not None and filter_proto != hdr.proto:
            return None

        if len(packet) < hdr.length:
            raise DataUnderflowError()
        packet = bytes(packet[: hdr.length])

        if cls.checksum(packet) != hdr.csum:
            raise InvalidChecksumError()
        if len(packet) < hdr.hlen:
            raise DataUnderflowError()

        return hdr, packet[hdr.hlen :]

    @staticmethod
    def inject_checksum(packet: bytes, checksum: int) -> bytes:
        """Return ``packet`` with ``checksum`` written into its checksum field."""
        offset = Ipv4PacketHeader.CHECKSUM_WORD << 1
        if len(packet) < offset + 2:
            raise DataUnderflowError()
        return bytes(packet[:offset]) + checksum.to_bytes(2, "big") + bytes(packet[offset + 2 :])

    @staticmethod
    def checksum(packet: bytes) -> int:
        """Compute the header checksum of an encoded packet."""
        hlen = (packet[0] & 0x0F) * 4
        total = checksum_accumulate(packet[:hlen], Ipv4PacketHeader.CHECKSUM_WORD)
        return checksum_finish(total)


def decode(
    packet: bytes,
    filter_src=None,
    filter_dst=None,
    filter_proto: int | None = None,
) -> tuple[IPv4Address, IPv4Address, int, bytes] | None:
    """Decode an IPv4 packet into ``(src, dst, proto, payload)``."""
    decoded = Ipv4PacketHeader.decode_with_payload(packet, filter_src, filter_dst, filter_proto)
    if decoded is None:
        return None
    hdr, payload = decoded
    return hdr.src, hdr.dst, hdr.proto, payload


def encode(src, dst, proto: int, payload: bytes, capacity: int | None = None) -> bytes:
    """Encode an IPv4 packet carrying ``payload``."""
    return Ipv4PacketHeader.new(src, dst, proto).encode_with_payload(payload, capacity)