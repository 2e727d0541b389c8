"""Combined IPv4 + UDP packet encoding and decoding."""

from __future__ import annotations

from . import ip, udp
from .udp import UdpPacketHeader


def ip_udp_decode(
    packet: bytes,
    filter_src: tuple[str, int] | None = None,
    filter_dst: tuple[str, int] | None = None,
) -> tuple[tuple[str, int], tuple[str, int], bytes] | None:
    """Decode an IPv4 packet and its UDP payload.

    Returns ``(src, dst, payload)`` with ``(host, port)`` addresses, or ``None``
    if the packet is not UDP or does not match the filters. An unspecified
    filter host matches any address.
    """
    decoded = ip.decode(
        packet,
        filter_src[0] if filter_src else None,
        filter_dst[0] if filter_dst else None,
        UdpPacketHeader.PROTO,
    )
    if decoded is None:
        return None
    src, dst, _proto, udp_packet = decoded
    return udp.decode(
        src,
        dst,
        udp_packet,
        filter_src[1] if filter_src else None,
        filter_dst[1] if filter_dst else None,
    )


def ip_udp_encode(
    src: tuple[str, int],
    dst: tuple[str, int],
    payload: bytes,
    capacity: int | None = None,
) -> bytes:
    """Encode ``payload`` as a UDP datagram inside an IPv4 packet.

    ``capacity`` limits the size of the whole IP packet.
    """
    udp_capacity = None if capacity is None else capacity - ip.Ipv4PacketHeader.MIN_SIZE
    udp_packet = udp.encode(src, dst, payload, udp_capacity)
    return ip.encode(src[0], dst[0], UdpPacketHeader.PROTO, udp_packet, capacity)