import numpy as np
from numpy.typing import NDArray

from errors import InvalidInput
from framing import join_blocks, pad_end, split_fixed
from gf2 import as_bits, is_binary, multiply, to_bit_string, weight

DATA_LENGTH = 12
CODE_LENGTH = 23
EXTENDED_LENGTH = 24
MAX_CORRECTABLE = 3


def _frozen(m: np.ndarray) -> np.ndarray:
    m.setflags(write=False)
    return m


IDENTITY_MATRIX = _frozen(np.eye(DATA_LENGTH, dtype=int))

# Symmetric and self-inverse over GF(2): B = B^T, B @ B = I (mod 2).
GOLAY_B_MATRIX = _frozen(np.array([
    [1, 1, 0, 1, 1, 1, 0, 0, 0, 1, 0, 1],
    [1, 0, 1, 1, 1, 0, 0, 0, 1, 0, 1, 1],
    [0, 1, 1, 1, 0, 0, 0, 1, 0, 1, 1, 1],
    [1, 1, 1, 0, 0, 0, 1, 0, 1, 1, 0, 1],
    [1, 1, 0, 0, 0, 1, 0, 1, 1, 0, 1, 1],
    [1, 0, 0, 0, 1, 0, 1, 1, 0, 1, 1, 1],
    [0, 0, 0, 1, 0, 1, 1, 0, 1, 1, 1, 1],
    [0, 0, 1, 0, 1, 1, 0, 1, 1, 1, 0, 1],
    [0, 1, 0, 1, 1, 0, 1, 1, 1, 0, 0, 1],
    [1, 0, 1, 1, 0, 1, 1, 1, 0, 0, 0, 1],
    [0, 1, 1, 0, 1, 1, 1, 0, 0, 0, 1, 1],
    [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0],
], dtype=int))

# [I | B'] with B' = B minus its last column (12x23)
GENERATOR_MATRIX = _frozen(np.hstack((IDENTITY_MATRIX, GOLAY_B_MATRIX[:, :-1])))

# I stacked on B (24x12)
CONTROL_MATRIX = _frozen(np.vstack((IDENTITY_MATRIX, GOLAY_B_MATRIX)))


class LinearBlockCode:
    def __init__(self, n: int, k: int, name: str = "Generic Code"):
        self.n = n  # Codeword length
        self.k = k  # Information length
        self.name = name
        self.field_order = 2
        self.G = None
        self.H = None
        self.t = None  # Error correction capability

    def encode(self, u: np.ndarray) -> np.ndarray:
        return multiply(u, self.G)

    def extract_info(self, c: np.ndarray) -> np.ndarray:
        return np.asarray(c)[:self.k]

    def syndrome(self, c: np.ndarray) -> np.ndarray:
        return multiply(c, self.H)

    def is_codeword(self, c: np.ndarray) -> bool:
        return not np.any(self.syndrome(c))

    def generate_messages(self, num_blocks: int, rng: np.random.Generator | None = None) -> NDArray:
        rng = rng if rng is not None else np.random.default_rng()
        return rng.integers(0, self.field_order, size=(num_blocks, self.k), dtype=np.int64)


class Golay23(LinearBlockCode):
    """
    Binary Golay (23,12) code in systematic form.

    Codewords are the extended (24,12) code [I | B] with the overall-parity
    coordinate dropped. Syndromes are computed on 24-bit words, so `H` is the
    24x12 control matrix [I ; B] rather than an (n-k) x n parity check.
    """

    def __init__(self):
        super().__init__(CODE_LENGTH, DATA_LENGTH, "Golay(23,12)")
        self.B = GOLAY_B_MATRIX
        self.G = GENERATOR_MATRIX
        self.H = CONTROL_MATRIX
        self.t = MAX_CORRECTABLE

    def extend(self, word: np.ndarray, odd: bool = True) -> np.ndarray:
        """
        Append the overall-parity bit of the extended code.

        With odd=True the appended bit makes the 24-bit weight odd, which is
        what the decoder needs: a word with at most 3 errors then sits at odd
        distance <= 3 from an extended codeword.
        """
        w = as_bits(word)
        parity = weight(w) % 2
        bit = 1 - parity if odd else parity
        return np.append(w, bit)

    def is_codeword(self, c: np.ndarray) -> bool:
        return not np.any(self.syndrome(self.extend(c, odd=False)))

    def encode_bits(self, data_bits: str) -> str:
        """
        Encode a binary string into concatenated 23-bit codewords.

        The input is cut into 12-bit chunks; the last one is padded with '0'.
        Padding is not recorded, callers must keep the original length.
        """
        if data_bits and not is_binary(data_bits):
            raise InvalidInput("Input must be a binary string.")

        return join_blocks(
            to_bit_string(self.encode(as_bits(pad_end(chunk, self.k))))
            for chunk in split_fixed(data_bits, self.k)
        )


GOLAY = Golay23()


def encode(data_bits: str) -> str:
    return GOLAY.encode_bits(data_bits)
