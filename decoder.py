import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from codes import EXTENDED_LENGTH, GOLAY, Golay23, LinearBlockCode
from errors import InvalidInput, InvalidLength, RetransmissionRequired
from framing import join_blocks, split_fixed
from gf2 import as_bits, flip_bit, is_binary, multiply, to_bit_string, weight, xor_vectors

logger = logging.getLogger(__name__)


class ChannelDecoder(ABC):
    """Abstract base class for all channel decoders."""

    def __init__(self, code: LinearBlockCode):
        self.code = code

    @abstractmethod
    def decode_to_codeword(self, received_vector: np.ndarray) -> np.ndarray:
        """Decode a received vector and return the estimated codeword."""
        pass


class SearchStage(Enum):
    """Which step of the two-syndrome search located the error pattern."""
    DIRECT = "direct"
    ROW_SCAN = "row_scan"
    SECOND_DIRECT = "second_direct"
    SECOND_ROW_SCAN = "second_row_scan"


class ErrorEstimate(NamedTuple):
    u1: np.ndarray
    u2: np.ndarray
    stage: SearchStage

    @property
    def pattern(self) -> np.ndarray:
        """The 24-bit error pattern u1 | u2."""
        return np.concatenate((self.u1, self.u2))


class GolayDecoder(ChannelDecoder):
    """
    Two-syndrome decoder for the Golay (23,12) code.

    Each received 23-bit block is extended to 24 bits with an odd overall
    parity and decoded in the extended (24,12) code:

        s = w H
        wt(s) <= 3                -> u = [s, 0]
        wt(s + b_i) <= 2          -> u = [s + b_i, e_i]
        s2 = s B
        wt(s2) <= 3               -> u = [0, s2]
        wt(s2 + b_i) <= 2         -> u = [e_i, s2 + b_i]

    where b_i is row i of B and e_i the i-th unit vector. If none of these
    hold the word has more than 3 errors and RetransmissionRequired is raised.
    """

    def __init__(self, code: Golay23 = GOLAY):
        super().__init__(code)
        self.block_length = code.n

    # ---------- syndrome search ----------
    def _search(self, syndrome: np.ndarray, first_pass: bool) -> Optional[ErrorEstimate]:
        k = self.code.k
        zeros = np.zeros(k, dtype=int)

        if weight(syndrome) <= self.code.t:
            stage = SearchStage.DIRECT if first_pass else SearchStage.SECOND_DIRECT
            return ErrorEstimate(syndrome, zeros, stage)

        # first matching row wins
        for i, row in enumerate(self.code.B):
            candidate = xor_vectors(syndrome, row)
            if weight(candidate) <= self.code.t - 1:
                stage = SearchStage.ROW_SCAN if first_pass else SearchStage.SECOND_ROW_SCAN
                return ErrorEstimate(candidate, flip_bit(zeros, i), stage)

        return None

    def search_error_vector(self, word: np.ndarray) -> Optional[ErrorEstimate]:
        """Locate the error pattern of a 24-bit extended word, or return None."""
        syndrome = self.code.syndrome(word)
        found = self._search(syndrome, first_pass=True)
        if found is not None:
            return found

        second = multiply(syndrome, self.code.B)
        found = self._search(second, first_pass=False)
        if found is not None:
            # halves swap roles on the second pass
            return ErrorEstimate(found.u2, found.u1, found.stage)
        return None

    # ---------- per block ----------
    def correct_extended(self, word: np.ndarray, block_index: int | None = None) -> np.ndarray:
        """Return the corrected 24-bit word for a 24-bit extended input."""
        w = as_bits(word)
        estimate = self.search_error_vector(w)
        if estimate is None:
            logger.debug("Uncorrectable block %s: %s", block_index, to_bit_string(w))
            raise RetransmissionRequired(block_index)
        return xor_vectors(w, estimate.pattern)

    def decode_to_codeword(self, y: np.ndarray, block_index: int | None = None) -> np.ndarray:
        """Return the corrected 23-bit codeword for a 23-bit received block."""
        w = as_bits(y)
        if w.shape[0] != self.block_length:
            raise InvalidLength(
                f"Block length {w.shape[0]} does not match n={self.block_length}."
            )
        corrected = self.correct_extended(self.code.extend(w), block_index)
        return corrected[:self.block_length]

    def decode_block(self, y: np.ndarray, block_index: int | None = None) -> np.ndarray:
        return self.code.extract_info(self.decode_to_codeword(y, block_index))

    # ---------- binary strings ----------
    def _check(self, received: str, block_length: int) -> None:
        if len(received) == 0 or len(received) % block_length != 0:
            raise InvalidLength(
                f"Invalid encoded string length. Must be a multiple of {block_length}."
            )
        if not is_binary(received):
            raise InvalidInput("Input must be a binary string.")

    def decode(self, received: str) -> str:
        """
        Decode concatenated 23-bit blocks into concatenated 12-bit data.

        Fails on the first uncorrectable block. Encoder padding is not removed.
        """
        self._check(received, self.block_length)
        return join_blocks(
            to_bit_string(self.decode_block(as_bits(block), idx))
            for idx, block in enumerate(split_fixed(received, self.block_length))
        )

    def decode_extended(self, received: str) -> str:
        """Decode concatenated 24-bit blocks that already carry their parity bit."""
        self._check(received, EXTENDED_LENGTH)
        return join_blocks(
            to_bit_string(self.code.extract_info(self.correct_extended(as_bits(block), idx)))
            for idx, block in enumerate(split_fixed(received, EXTENDED_LENGTH))
        )


DECODER = GolayDecoder()


def decode(received: str) -> str:
    return DECODER.decode(received)
