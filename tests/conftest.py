import struct

import pytest


def build_bmp(pixels: bytes) -> bytes:
    """Minimal 24-bit BMP: 14-byte file header, 40-byte DIB header, raw pixels."""
    offset = 54
    header = b"BM" + struct.pack("<IHHI", offset + len(pixels), 0, 0, offset)
    dib = struct.pack("<IiiHHIIiiII", 40, 2, 2, 1, 24, 0, len(pixels), 2835, 2835, 0, 0)
    return header + dib + pixels


@pytest.fixture
def make_bmp():
    return build_bmp
