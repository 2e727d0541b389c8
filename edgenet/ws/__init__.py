"""WebSocket frame headers and asynchronous frame I/O."""

__all__ = ["frame", "io"]