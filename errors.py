class GolayError(Exception):
    """Base class for every error raised by the Golay codec."""


class InvalidInput(GolayError, ValueError):
    """A string or sequence expected to be binary holds another symbol."""


class InvalidBit(InvalidInput):
    """A GF(2) primitive received a value other than 0 or 1."""


class InvalidLength(GolayError, ValueError):
    """A length is not the required (positive) multiple."""


class DimensionMismatch(GolayError, ValueError):
    """Vector length does not match the matrix row count."""


class LengthMismatch(GolayError, ValueError):
    """Two vectors that must be combined have different lengths."""


class InvalidProbability(GolayError, ValueError):
    """A channel probability outside [0, 1]."""


class RetransmissionRequired(GolayError):
    """A received block has more errors than the code can correct."""

    def __init__(self, block_index: int | None = None):
        self.block_index = block_index
        if block_index is None:
            message = "Retransmission is needed."
        else:
            message = f"Retransmission is needed for block {block_index}."
        super().__init__(message)
