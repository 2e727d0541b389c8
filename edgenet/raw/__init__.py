"""IPv4 and UDP packet encoding, decoding and UDP over raw sockets."""

__all__ = ["bytes", "checksum", "errors", "io", "ip", "packet", "udp"]