"""Exceptions raised while scanning, reifying and decoding s-expressions."""


class ReadError(RuntimeError):
    """A fatal condition inside one decode call.

    Raised anywhere below the public API and converted into a
    DecodeError, with the lexer position attached, at the boundary.
    """


class ScanError(ReadError):
    pass


class UnknownTypeError(ReadError):
    def __init__(self, descriptor: str, reason: str = "unknown type"):
        super().__init__(f"{reason} {descriptor!r}")
        self.descriptor = descriptor


class DepthExceeded(ReadError):
    pass


class DecodeError(ValueError):
    """A decode call failed. ``position`` is where the input went wrong."""

    def __init__(self, message: str, position):
        super().__init__(f"error at {position}: {message}")
        self.message = message
        self.position = position
