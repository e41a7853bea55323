import numpy as np

from errors import DimensionMismatch, InvalidBit, LengthMismatch


def is_binary(value: str) -> bool:
    """True for a non-empty string made only of '0' and '1'."""
    return bool(value) and set(value) <= {"0", "1"}


def as_bits(value) -> np.ndarray:
    """
    Convert a bit string ("0101") or an integer sequence into a 1-D int array.

    Raises InvalidBit if any element is not a bit.
    """
    if isinstance(value, str):
        if value and not is_binary(value):
            raise InvalidBit(f"Non-binary symbol in {value!r}.")
        return np.fromiter((ord(ch) - 48 for ch in value), dtype=int, count=len(value))

    bits = np.asarray(value)
    if bits.ndim != 1:
        raise InvalidBit(f"Expected a 1-D bit vector, got shape {bits.shape}.")
    if bits.size and not np.isin(bits, (0, 1)).all():
        raise InvalidBit("Vector contains values other than 0 and 1.")
    return bits.astype(int)


def to_bit_string(bits: np.ndarray) -> str:
    return "".join("1" if b else "0" for b in np.asarray(bits, dtype=int))


def xor_vectors(a, b) -> np.ndarray:
    """Element-wise sum modulo 2 of two equal-length vectors."""
    if len(a) != len(b):
        raise LengthMismatch(f"Lengths do not match: {len(a)} != {len(b)}.")
    if len(a) == 0:
        return np.zeros(0, dtype=int)
    return as_bits(a) ^ as_bits(b)


def weight(v) -> int:
    """Hamming weight: the number of 1-bits."""
    if isinstance(v, str):
        return v.count("1")
    return int(np.count_nonzero(v))


def multiply(vector, matrix: np.ndarray) -> np.ndarray:
    """
    Row vector times matrix over GF(2).

    result[j] = (sum_i vector[i] * matrix[i][j]) mod 2
    """
    v = as_bits(vector)
    m = np.asarray(matrix)
    if m.ndim != 2:
        raise DimensionMismatch(f"Expected a 2-D matrix, got shape {m.shape}.")
    if m.size and not np.isin(m, (0, 1)).all():
        raise InvalidBit("Matrix contains values other than 0 and 1.")
    if v.shape[0] != m.shape[0]:
        raise DimensionMismatch(
            f"Matrix row count {m.shape[0]} must match vector length {v.shape[0]}."
        )
    return (v @ m.astype(int)) % 2


def flip_bit(v, position: int) -> np.ndarray:
    """
    Copy of v with the bit at `position` set to 1.

    A bit that is already 1 stays 1; this is not a toggle.
    """
    out = as_bits(v).copy()
    if not 0 <= position < out.shape[0]:
        raise IndexError(f"Bit position {position} out of range for length {out.shape[0]}.")
    out[position] = 1
    return out
