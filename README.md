# edgenet

Small, dependency-free building blocks for low-level networking:

- `edgenet.raw`: build and parse IPv4 packets that carry UDP, with checksums
  and address/port filtering, plus UDP-style sending and receiving over a
  raw (link-layer) socket object that you supply.
- `edgenet.ws`: WebSocket frame headers, payload masking and async frame I/O
  over asyncio streams.

## Installation

```
pip install edgenet
```

To run the test suite as well:

```
pip install "edgenet[test]"
pytest
```

## Raw IPv4/UDP packets

Addresses are `(host, port)` tuples with IPv4 hosts.

```python
from edgenet.raw.packet import ip_udp_decode, ip_udp_encode

src = ("192.168.0.1", 67)
dst = ("255.255.255.255", 68)

packet = ip_udp_encode(src, dst, b"hello", 1500)

decoded = ip_udp_decode(packet, None, None)
if decoded is not None:
    remote, local, payload = decoded
    assert payload == b"hello"
```

`ip_udp_encode` takes an optional `capacity` that limits the size of the
whole IP packet. `ip_udp_decode` returns `None` when the packet is not UDP
or does not match the given filters. A filter host of `0.0.0.0` matches any
address, and a broadcast address in the packet matches any filter host.
Malformed data raises a subclass of `edgenet.raw.errors.RawError`:

- `DataUnderflowError`
- `BufferOverflowError`
- `InvalidFormatError`
- `InvalidChecksumError`

The lower layers can be used on their own:

- `edgenet.raw.ip`: `Ipv4PacketHeader`, `encode`, `decode`
- `edgenet.raw.udp`: `UdpPacketHeader`, `encode`, `decode`
- `edgenet.raw.checksum`: `checksum_accumulate`, `checksum_finish`
- `edgenet.raw.bytes`: `BytesIn` (a bounded reader) and `BytesOut` (a
  writer with a fixed capacity)

### UDP over a raw socket

`edgenet.raw.io` works with any object that has `async send(mac, frame)`
and `async receive(bufsize) -> (frame, mac)`; `readable()` and `split()`
are used only if you call them.

```python
from edgenet.raw.io import RawSocket2Udp

udp = RawSocket2Udp(
    raw_socket,
    ("0.0.0.0", 68),        # local filter
    ("0.0.0.0", 67),        # remote filter
    b"\xff" * 6,            # send to the broadcast MAC
)

await udp.send(("255.255.255.255", 67), b"request")
payload, remote = await udp.receive()
```

Outgoing datagrams always go to the fixed remote MAC address, so a peer
without an IP address can still be reached. On receive, frames that are not
IPv4/UDP, do not match the filters, are malformed or fail their checksum
are skipped; a payload longer than `bufsize` raises `BufferOverflowError`.
IPv6 addresses raise `UnsupportedProtocolError`. The module-level functions
`udp_send` and `udp_receive` do the same work without the wrapper.

## WebSocket frames

```python
from edgenet.ws.frame import FrameHeader, FrameType

header = FrameHeader(FrameType.text(False), 5, 0x12345678)
wire = header.serialize()
parsed, offset = FrameHeader.deserialize(wire)
masked = header.mask(b"hello")
```

`FrameType` has the constructors `text`, `binary`, `ping`, `pong`, `close`
and `continuation`, and the checks `is_fragmented` and `is_final`.
`FrameHeader.deserialize` raises `IncompleteError` (with the number of
missing bytes in `missing`) when given too few bytes.

Over an established connection, where `reader` and `writer` are an asyncio
stream pair:

```python
from edgenet.ws.io import recv, send
from edgenet.ws.frame import FrameType

await send(writer, FrameType.text(False), None, b"Hello world!")
frame_type, payload = await recv(reader, 8192)
```

`recv_header`, `send_header`, `recv_payload` and `send_payload` handle the
two parts separately. `WsConnection` bundles a reader, a writer and a
mask-key generator (return a fresh key on clients, `None` on servers); its
`send` and `recv` work the same way. Errors derive from
`edgenet.ws.frame.WsError`: `IncompleteError`, `InvalidFrameError` (also
raised when the stream ends inside a frame), `BufferOverflowError` and
`InvalidLenError`.

## What this package does not do

- It opens no sockets. The raw socket and the asyncio streams come from you.
- It has no DHCP, DNS, mDNS or HTTP implementation, and no command-line
  programs.
- It does not perform the WebSocket opening handshake; the `ws` functions
  start from a connection that has already been upgraded. Fragmented
  messages are not reassembled and control frames are not answered
  automatically.