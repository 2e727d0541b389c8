import pytest

from edgenet.raw import ip
from edgenet.raw.errors import BufferOverflowError, InvalidChecksumError
from edgenet.raw.ip import Ipv4PacketHeader
from edgenet.raw.packet import ip_udp_decode, ip_udp_encode
from edgenet.raw.udp import UdpPacketHeader

CLIENT = ("192.168.0.50", 68)
SERVER = ("192.168.0.1", 67)
OVERHEAD = Ipv4PacketHeader.MIN_SIZE + UdpPacketHeader.SIZE


def test_round_trip():
    packet = ip_udp_encode(CLIENT, SERVER, b"discover")
    assert len(packet) == OVERHEAD + len(b"discover")
    assert ip_udp_decode(packet) == (CLIENT, SERVER, b"discover")


def test_protocol_field_is_udp():
    packet = ip_udp_encode(CLIENT, SERVER, b"x")
    assert Ipv4PacketHeader.decode(packet).proto == UdpPacketHeader.PROTO


def test_matching_filters():
    packet = ip_udp_encode(CLIENT, SERVER, b"offer")
    assert ip_udp_decode(packet, CLIENT, SERVER) == (CLIENT, SERVER, b"offer")
    assert ip_udp_decode(packet, ("0.0.0.0", 68), ("0.0.0.0", 67)) == (
        CLIENT,
        SERVER,
        b"offer",
    )


def test_mismatching_filters():
    packet = ip_udp_encode(CLIENT, SERVER, b"offer")
    assert ip_udp_decode(packet, ("0.0.0.0", 69), None) is None
    assert ip_udp_decode(packet, None, ("0.0.0.0", 68)) is None
    assert ip_udp_decode(packet, ("10.9.9.9", 68), None) is None


def test_broadcast_destination_passes_host_filter():
    broadcast = ("255.255.255.255", 67)
    packet = ip_udp_encode(CLIENT, broadcast, b"request")
    assert ip_udp_decode(packet, None, ("192.168.0.1", 67)) == (CLIENT, broadcast, b"request")


def test_non_udp_packet_is_skipped():
    packet = ip.encode(CLIENT[0], SERVER[0], 6, b"tcp segment")
    assert ip_udp_decode(packet) is None


def test_corrupted_udp_payload_fails_checksum():
    packet = bytearray(ip_udp_encode(CLIENT, SERVER, b"payload"))
    packet[-2] ^= 0x55
    with pytest.raises(InvalidChecksumError):
        ip_udp_decode(bytes(packet))


def test_capacity_limits():
    payload = b"0123456789"
    exact = OVERHEAD + len(payload)
    assert len(ip_udp_encode(CLIENT, SERVER, payload, capacity=exact)) == exact
    with pytest.raises(BufferOverflowError):
        ip_udp_encode(CLIENT, SERVER, payload, capacity=exact - 1)
    with pytest.raises(BufferOverflowError):
        ip_udp_encode(CLIENT, SERVER, b"", capacity=Ipv4PacketHeader.MIN_SIZE - 1)