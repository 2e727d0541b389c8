"""Sending and receiving UDP datagrams over a raw (link-layer) socket.

A raw socket is any object with ``async send(mac, frame)`` and
``async receive(bufsize) -> (frame, mac)``. Optionally it provides
``async readable()`` and ``split() -> (receive_half, send_half)``.
Addresses are ``(host, port)`` tuples holding IPv4 hosts.
"""

from __future__ import annotations

from ipaddress import ip_address
from typing import Any

from .errors import BufferOverflowError, InvalidChecksumError, InvalidFormatError, RawError
from .packet import ip_udp_decode, ip_udp_encode

DEFAULT_MTU = 1500

_ANY_ADDR = ("0.0.0.0", 0)


class UnsupportedProtocolError(RawError):
    """The address is not an IPv4 socket address."""

    message = "Unsupported protocol"


def _ipv4(addr: tuple) -> tuple[str, int]:
    if len(addr) != 2:
        raise UnsupportedProtocolError()
    host, port = addr
    ip = ip_address(host)
    if ip.version != 4:
        raise UnsupportedProtocolError()
    return str(ip), int(port)


async def udp_send(
    socket: Any,
    local: tuple,
    remote: tuple,
    remote_mac: bytes,
    data: bytes,
    mtu: int = DEFAULT_MTU,
) -> None:
    """Send ``data`` as a UDP datagram to the peer with MAC ``remote_mac``.

    The whole IP packet must fit into ``mtu`` bytes.
    """
    local = _ipv4(local)
    remote = _ipv4(remote)
    packet = ip_udp_encode(local, remote, bytes(data), mtu)
    await socket.send(remote_mac, packet)


async def udp_receive(
    socket: Any,
    filter_local: tuple | None = None,
    filter_remote: tuple | None = None,
    bufsize: int = DEFAULT_MTU,
    mtu: int = DEFAULT_MTU,
) -> tuple[bytes, tuple[str, int], tuple[str, int], bytes]:
    """Receive the next UDP datagram that matches the filters.

    Returns ``(payload, local, remote, remote_mac)``. Frames that are not
    UDP over IPv4, do not match the filters, are malformed or fail their
    checksum are skipped. A payload longer than ``bufsize`` raises
    :class:`BufferOverflowError`.
    """
    while True:
        frame, remote_mac = await socket.receive(mtu)
        try:
            decoded = ip_udp_decode(bytes(frame), filter_remote, filter_local)
        except (InvalidFormatError, InvalidChecksumError):
            continue
        if decoded is None:
            continue

        remote, local, payload = decoded
        if len(payload) > bufsize:
            raise BufferOverflowError()
        return payload, local, remote, remote_mac


class RawSocket2Udp:
    """A UDP socket built on a raw socket.

    Outgoing datagrams go to the fixed ``remote_mac``, so peers without an
    IP address yet (as in DHCP) can still be reached. Incoming datagrams are
    filtered by ``filter_local`` and ``filter_remote``; an unspecified host
    or a ``None`` filter matches anything.
    """

    def __init__(
        self,
        socket: Any,
        filter_local: tuple | None,
        filter_remote: tuple | None,
        remote_mac: bytes,
        mtu: int = DEFAULT_MTU,
    ) -> None:
        self.socket = socket
        self.filter_local = None if filter_local is None else _ipv4(filter_local)
        self.filter_remote = None if filter_remote is None else _ipv4(filter_remote)
        self.remote_mac = bytes(remote_mac)
        self.mtu = mtu

    async def receive(self, bufsize: int = DEFAULT_MTU) -> tuple[bytes, tuple[str, int]]:
        """Receive one datagram, returning ``(payload, remote_address)``."""
        payload, _local, remote, _mac = await udp_receive(
            self.socket, self.filter_local, self.filter_remote, bufsize, self.mtu
        )
        return payload, remote

    async def readable(self) -> None:
        """Wait until the underlying socket has data."""
        await self.socket.readable()

    async def send(self, remote: tuple, data: bytes) -> None:
        """Send ``data`` to ``remote`` through the configured MAC address."""
        remote = _ipv4(remote)
        await udp_send(
            self.socket,
            self.filter_local or _ANY_ADDR,
            remote,
            self.remote_mac,
            data,
            self.mtu,
        )

    def split(self) -> tuple[RawSocket2Udp, RawSocket2Udp]:
        """Split into a receiving half and a sending half."""
        receive, send = self.socket.split()
        return (
            RawSocket2Udp(receive, self.filter_local, self.filter_remote, self.remote_mac, self.mtu),
            RawSocket2Udp(send, self.filter_local, self.filter_remote, self.remote_mac, self.mtu),
        )