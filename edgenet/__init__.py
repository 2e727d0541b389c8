"""Raw IPv4/UDP packet handling and WebSocket framing."""

__version__ = "0.6.0"