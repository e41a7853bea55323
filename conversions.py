import struct
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import numpy as np

from errors import InvalidInput
from framing import pad_end
from gf2 import as_bits, is_binary, to_bit_string


def bytes_to_bits(data: bytes) -> str:
    """Render bytes as a bit string, 8 bits per byte, most significant first."""
    return to_bit_string(np.unpackbits(np.frombuffer(data, dtype=np.uint8)))


def bits_to_bytes(bits: str) -> bytes:
    """Pack a bit string into bytes; a trailing partial byte is zero-padded."""
    if not bits:
        return b""
    return np.packbits(as_bits(bits).astype(np.uint8)).tobytes()


def text_to_bits(text: str) -> str:
    return bytes_to_bits(text.encode("utf-8"))


def bits_to_text(bits: str) -> str:
    """Decode a bit string as UTF-8; invalid sequences become U+FFFD."""
    padded = pad_end(bits, -(-len(bits) // 8) * 8)
    return bits_to_bytes(padded).decode("utf-8", errors="replace")


class SupportedImageFileFormat(str, Enum):
    BMP = "image/bmp"


@dataclass
class ImageFileData:
    """An image split into its untouched header and its content as bits."""
    header: bytes
    binary_string: str
    mime_type: str


def _unsupported(mime_type: str) -> InvalidInput:
    names = ", ".join(f.name for f in SupportedImageFileFormat)
    return InvalidInput(f"Only {names} images are currently supported, got {mime_type!r}.")


def image_to_data(raw: bytes, mime_type: str = SupportedImageFileFormat.BMP) -> ImageFileData:
    """
    Split an image file into header and content bits.

    For BMP the header runs up to the pixel-array offset stored at byte 10.
    """
    if mime_type != SupportedImageFileFormat.BMP:
        raise _unsupported(mime_type)
    if len(raw) < 14 or raw[:2] != b"BM":
        raise InvalidInput("BMP header not found.")

    (offset,) = struct.unpack_from("<I", raw, 10)
    if offset > len(raw):
        raise InvalidInput(f"BMP pixel offset {offset} is beyond the end of the file.")
    return ImageFileData(
        header=bytes(raw[:offset]),
        binary_string=bytes_to_bits(raw[offset:]),
        mime_type=SupportedImageFileFormat.BMP.value,
    )


def data_to_image(data: ImageFileData) -> bytes:
    """Reassemble an image file from its header and content bits."""
    if data.binary_string and not is_binary(data.binary_string):
        raise InvalidInput("Received an unexpected non-binary string.")
    if data.mime_type != SupportedImageFileFormat.BMP:
        raise _unsupported(data.mime_type)
    return data.header + bits_to_bytes(data.binary_string)


def read_image(path: str | Path, mime_type: str = SupportedImageFileFormat.BMP) -> ImageFileData:
    return image_to_data(Path(path).read_bytes(), mime_type)


def write_image(path: str | Path, data: ImageFileData) -> None:
    Path(path).write_bytes(data_to_image(data))
