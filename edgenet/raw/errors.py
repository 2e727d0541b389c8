"""Errors raised while encoding and decoding IP and UDP packets."""


class RawError(Exception):
    """Base class for IP and UDP packet errors."""

    message = "Raw packet error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class DataUnderflowError(RawError):
    """The input ended before the structure being decoded was complete."""

    message = "Data underflow"


class BufferOverflowError(RawError):
    """The output does not fit into the available space."""

    message = "Buffer overflow"


class InvalidFormatError(RawError):
    """The input is not laid out the way the format requires."""

    message = "Invalid format"


class InvalidChecksumError(RawError):
    """The checksum carried by a packet does not match its contents."""

    message = "Invalid checksum"