# filename: huffman_errors.py


class CorruptContainerError(ValueError):
    """Raised when a compressed container cannot be decoded."""


class MalformedContainerError(CorruptContainerError):
    """Tree section or length field is missing, short, or inconsistent."""


class TruncatedBitstreamError(CorruptContainerError):
    """Payload bits ran out before the stored number of symbols was decoded."""

    def __init__(self, decoded, expected):
        super().__init__(
            f"bitstream ended after {decoded} of {expected} symbols"
        )
        self.decoded = decoded
        self.expected = expected


class UnreachableSymbolError(CorruptContainerError):
    """A payload bit selected a branch that holds no node."""
