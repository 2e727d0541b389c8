import pytest

from edgenet.raw.errors import BufferOverflowError, DataUnderflowError
from edgenet.raw.io import (
    RawSocket2Udp,
    UnsupportedProtocolError,
    udp_receive,
    udp_send,
)
from edgenet.raw.packet import ip_udp_decode, ip_udp_encode

PEER_MAC = b"\x02\x00\x00\x00\x00\x01"
BROADCAST_MAC = b"\xff" * 6


class FakeRawSocket:
    def __init__(self, incoming=()):
        self.incoming = list(incoming)
        self.sent = []
        self.readable_calls = 0

    async def send(self, mac, frame):
        self.sent.append((mac, frame))

    async def receive(self, bufsize):
        frame, mac = self.incoming.pop(0)
        return frame[:bufsize], mac

    async def readable(self):
        self.readable_calls += 1

    def split(self):
        return FakeRawSocket(self.incoming), FakeRawSocket()


class FailingSocket:
    async def receive(self, bufsize):
        raise OSError("link down")

    async def send(self, mac, frame):
        raise OSError("link down")


CLIENT = ("10.0.0.2", 68)
SERVER = ("10.0.0.1", 67)


@pytest.mark.asyncio
async def test_udp_send_round_trips():
    sock = FakeRawSocket()
    await udp_send(sock, SERVER, CLIENT, PEER_MAC, b"hello")
    assert len(sock.sent) == 1
    mac, frame = sock.sent[0]
    assert mac == PEER_MAC
    assert ip_udp_decode(frame) == (SERVER, CLIENT, b"hello")


@pytest.mark.asyncio
async def test_udp_send_rejects_ipv6():
    sock = FakeRawSocket()
    with pytest.raises(UnsupportedProtocolError):
        await udp_send(sock, ("::1", 67), CLIENT, PEER_MAC, b"x")
    assert sock.sent == []


@pytest.mark.asyncio
async def test_udp_send_overflows_small_mtu():
    sock = FakeRawSocket()
    with pytest.raises(BufferOverflowError):
        await udp_send(sock, SERVER, CLIENT, PEER_MAC, b"x" * 100, mtu=64)
    assert sock.sent == []


@pytest.mark.asyncio
async def test_udp_send_io_error_propagates():
    with pytest.raises(OSError):
        await udp_send(FailingSocket(), SERVER, CLIENT, PEER_MAC, b"x")


@pytest.mark.asyncio
async def test_udp_receive_skips_unmatched_and_broken_frames():
    good = ip_udp_encode(CLIENT, SERVER, b"payload")
    wrong_port = ip_udp_encode(CLIENT, ("10.0.0.1", 99), b"other")
    bad_checksum = good[:-1] + bytes([good[-1] ^ 0xFF])
    not_v4 = bytes([0x65]) + good[1:]
    sock = FakeRawSocket(
        [
            (wrong_port, PEER_MAC),
            (bad_checksum, PEER_MAC),
            (not_v4, PEER_MAC),
            (good, PEER_MAC),
        ]
    )
    payload, local, remote, mac = await udp_receive(sock, SERVER, CLIENT)
    assert payload == b"payload"
    assert local == SERVER
    assert remote == CLIENT
    assert mac == PEER_MAC
    assert sock.incoming == []


@pytest.mark.asyncio
async def test_udp_receive_payload_too_large():
    frame = ip_udp_encode(CLIENT, SERVER, b"x" * 10)
    sock = FakeRawSocket([(frame, PEER_MAC)])
    with pytest.raises(BufferOverflowError):
        await udp_receive(sock, None, None, bufsize=4)


@pytest.mark.asyncio
async def test_udp_receive_truncated_frame_raises():
    sock = FakeRawSocket([(b"\x45\x00\x00", PEER_MAC)])
    with pytest.raises(DataUnderflowError):
        await udp_receive(sock)


@pytest.mark.asyncio
async def test_udp_receive_io_error_propagates():
    with pytest.raises(OSError):
        await udp_receive(FailingSocket())


@pytest.mark.asyncio
async def test_socket_send_uses_unspecified_local_and_mac():
    sock = FakeRawSocket()
    udp = RawSocket2Udp(sock, None, None, BROADCAST_MAC)
    await udp.send(("255.255.255.255", 68), b"discover")
    mac, frame = sock.sent[0]
    assert mac == BROADCAST_MAC
    assert ip_udp_decode(frame) == (("0.0.0.0", 0), ("255.255.255.255", 68), b"discover")


@pytest.mark.asyncio
async def test_socket_send_uses_filter_local():
    sock = FakeRawSocket()
    udp = RawSocket2Udp(sock, SERVER, None, PEER_MAC)
    await udp.send(CLIENT, b"offer")
    _, frame = sock.sent[0]
    src, dst, payload = ip_udp_decode(frame)
    assert src == SERVER
    assert dst == CLIENT
    assert payload == b"offer"


@pytest.mark.asyncio
async def test_socket_send_rejects_ipv6_remote():
    udp = RawSocket2Udp(FakeRawSocket(), None, None, PEER_MAC)
    with pytest.raises(UnsupportedProtocolError):
        await udp.send(("fe80::1", 68), b"x")


def test_socket_rejects_ipv6_filter():
    with pytest.raises(UnsupportedProtocolError):
        RawSocket2Udp(FakeRawSocket(), ("::", 67), None, PEER_MAC)


@pytest.mark.asyncio
async def test_socket_receive_returns_payload_and_remote():
    frame = ip_udp_encode(CLIENT, SERVER, b"request")
    sock = FakeRawSocket([(frame, PEER_MAC)])
    udp = RawSocket2Udp(sock, ("0.0.0.0", 67), ("0.0.0.0", 68), BROADCAST_MAC)
    assert await udp.receive() == (b"request", CLIENT)


@pytest.mark.asyncio
async def test_socket_readable_delegates():
    sock = FakeRawSocket()
    udp = RawSocket2Udp(sock, None, None, PEER_MAC)
    await udp.readable()
    assert sock.readable_calls == 1


@pytest.mark.asyncio
async def test_split_halves_keep_configuration():
    frame = ip_udp_encode(CLIENT, SERVER, b"ping")
    sock = FakeRawSocket([(frame, PEER_MAC)])
    udp = RawSocket2Udp(sock, SERVER, None, PEER_MAC, mtu=576)
    receiver, sender = udp.split()

    assert receiver.filter_local == SERVER
    assert sender.remote_mac == PEER_MAC
    assert sender.mtu == 576

    assert await receiver.receive() == (b"ping", CLIENT)
    await sender.send(CLIENT, b"pong")
    mac, out = sender.socket.sent[0]
    assert mac == PEER_MAC
    assert ip_udp_decode(out) == (SERVER, CLIENT, b"pong")