import pytest

from framing import join_blocks, pad_end, split_fixed


def test_split_fixed_exact_multiple():
    assert split_fixed("000111000111", 3) == ["000", "111", "000", "111"]


def test_split_fixed_short_last_block():
    assert split_fixed("10101", 2) == ["10", "10", "1"]


def test_split_fixed_empty():
    assert split_fixed("", 12) == []


def test_split_fixed_rejects_non_positive_size():
    with pytest.raises(ValueError):
        split_fixed("101", 0)


def test_pad_end():
    assert pad_end("101", 6) == "101000"
    assert pad_end("101", 3) == "101"
    assert pad_end("10101", 3) == "10101"


def test_join_blocks_preserves_order():
    assert join_blocks(split_fixed("1100101", 3)) == "1100101"
