import pytest

from conversions import (
    ImageFileData,
    SupportedImageFileFormat,
    bits_to_bytes,
    bits_to_text,
    bytes_to_bits,
    data_to_image,
    image_to_data,
    read_image,
    text_to_bits,
    write_image,
)
from errors import InvalidInput


def test_text_to_bits():
    assert text_to_bits("A") == "01000001"
    assert text_to_bits("") == ""


@pytest.mark.parametrize("text", ["Hello, Golay!", "zażółć gęślą jaźń", "€"])
def test_text_round_trip(text):
    assert bits_to_text(text_to_bits(text)) == text


def test_bits_to_text_pads_partial_byte():
    assert bits_to_text("0100000") == "@"


def test_bits_to_text_replaces_invalid_utf8():
    assert bits_to_text("11111111") == "�"


def test_bytes_bits_round_trip():
    data = bytes(range(256))
    assert bits_to_bytes(bytes_to_bits(data)) == data
    assert bits_to_bytes("") == b""


def test_image_split_keeps_header(make_bmp):
    pixels = bytes([0, 255, 17, 34, 51, 68, 85, 102, 119, 136, 153, 170, 187, 204, 221, 238])
    raw = make_bmp(pixels)
    data = image_to_data(raw, SupportedImageFileFormat.BMP)
    assert data.header == raw[:54]
    assert data.binary_string == bytes_to_bits(pixels)
    assert data.mime_type == "image/bmp"
    assert data_to_image(data) == raw


def test_image_rejects_missing_signature(make_bmp):
    with pytest.raises(InvalidInput):
        image_to_data(b"XX" + make_bmp(b"\x00")[2:])


def test_image_rejects_unsupported_format(make_bmp):
    with pytest.raises(InvalidInput):
        image_to_data(make_bmp(b"\x00"), "image/png")
    with pytest.raises(InvalidInput):
        data_to_image(ImageFileData(b"", "0101", "image/png"))


def test_image_rejects_non_binary_payload():
    with pytest.raises(InvalidInput):
        data_to_image(ImageFileData(b"BM", "01x1", "image/bmp"))


def test_read_write_image(tmp_path, make_bmp):
    raw = make_bmp(b"\x01\x02\x03\x04" * 3)
    src = tmp_path / "in.bmp"
    dst = tmp_path / "out.bmp"
    src.write_bytes(raw)
    write_image(dst, read_image(src))
    assert dst.read_bytes() == raw
