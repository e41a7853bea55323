from typing import Iterable, List


def split_fixed(s: str, n: int) -> List[str]:
    """
    Split s left to right into blocks of n characters.

    The last block is shorter when len(s) is not a multiple of n.
    """
    if n < 1:
        raise ValueError(f"Block size must be positive, got {n}.")
    return [s[i:i + n] for i in range(0, len(s), n)]


def pad_end(s: str, n: int) -> str:
    """Right-pad s with '0' up to length n."""
    return s.ljust(n, "0")


def join_blocks(blocks: Iterable[str]) -> str:
    return "".join(blocks)
