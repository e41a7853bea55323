from abc import ABC, abstractmethod

import numpy as np

from errors import InvalidInput, InvalidProbability
from gf2 import as_bits, is_binary, to_bit_string


class Channel(ABC):
    """Abstract base class for memoryless channels."""

    @abstractmethod
    def transmit(self, c: np.ndarray) -> np.ndarray:
        """Transmit a codeword c through the channel and return the received vector."""
        pass

    def perturb(self, bits: str) -> str:
        """Send a bit string through the channel and return the received string."""
        if not bits:
            return bits
        if not is_binary(bits):
            raise InvalidInput("Input must be a binary string.")
        return to_bit_string(self.transmit(as_bits(bits)))


class BSCChannel(Channel):
    """Binary Symmetric Channel (BSC) with hard-decision output."""

    def __init__(self, p: float, force_errors: list[int] | None = None, seed: int | None = None):
        """
        Parameters
        ----------
        p : float
            Crossover probability, in [0, 1].
        force_errors : list[int] | None
            Optional list of bit positions that are forced to be flipped (debug mode).
        seed : int | None
            Seed for the channel's random generator.
        """
        p = float(p)
        if not 0.0 <= p <= 1.0:
            raise InvalidProbability(f"Distortion must be between 0 and 1, got {p}.")
        self.p = p
        self.force_errors = force_errors
        self.rng = np.random.default_rng(seed)

    def transmit(self, c: np.ndarray) -> np.ndarray:
        y = np.asarray(c).copy().astype(int)
        if self.force_errors is not None:
            # Debug mode: force specific positions to be in error
            y[self.force_errors] ^= 1
        else:
            # Random error pattern according to BSC(p)
            noise = (self.rng.random(size=y.shape) < self.p).astype(int)
            y ^= noise
        return y


def perturb(bits: str, flip_probability: float, seed: int | None = None) -> str:
    return BSCChannel(flip_probability, seed=seed).perturb(bits)
