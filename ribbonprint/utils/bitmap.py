"""Bit-level helpers for palette-indexed bitmap data.

This module provides the BMP layout constants and the stateless arithmetic
used to address bit-packed pixels: row stride calculation, pixel lookup and
row packing.
"""

from __future__ import annotations

import struct
from typing import Sequence


# BMP file layout
BMP_SIGNATURE = b"BM"
FILE_HEADER = struct.Struct("<2sIHHI")  # signature, file size, reserved x2, data offset
DIB_HEADER = struct.Struct("<IiiHHIIiiII")  # BITMAPINFOHEADER
PALETTE_ENTRY_SIZE = 4  # blue, green, red, reserved

COMPRESSION_RGB = 0
MAX_BITS_PER_PIXEL = 4
MAX_PALETTE_COLORS = 1 << MAX_BITS_PER_PIXEL


def row_stride(bpp: int, width: int) -> int:
    """Calculate the size of one stored pixel row.

    Args:
        bpp: Bits per pixel
        width: Image width in pixels

    Returns:
        Row size in bytes, padded to a 4-byte boundary
    """
    return ((bpp * width + 31) // 32) * 4


def pixel_at(buffer: bytes, stride: int, bpp: int, x: int, row: int) -> int:
    """Extract the palette index of a single pixel.

    Pixels are packed most-significant-bit first, ``bpp`` bits at a time. A
    field may straddle two bytes when ``bpp`` does not divide 8.

    Args:
        buffer: Pixel data
        stride: Row size in bytes
        bpp: Bits per pixel
        x: Column, 0 = left
        row: Physical row index inside ``buffer`` (not the visual row)

    Returns:
        Palette index
    """
    bit_offset = x * bpp
    index = row * stride + bit_offset // 8
    window = buffer[index] << 8
    if index + 1 < len(buffer):
        window |= buffer[index + 1]
    shift = 16 - (bit_offset % 8) - bpp
    return (window >> shift) & ((1 << bpp) - 1)


def pack_row(indices: Sequence[int], bpp: int) -> bytes:
    """Pack palette indices into one padded row, MSB first.

    Args:
        indices: Palette index for each column
        bpp: Bits per pixel

    Returns:
        Packed row of ``row_stride(bpp, len(indices))`` bytes

    Raises:
        ValueError: If an index does not fit in ``bpp`` bits
    """
    limit = 1 << bpp
    value = 0
    for index in indices:
        if not 0 <= index < limit:
            raise ValueError(f"Palette index {index} does not fit in {bpp} bits")
        value = (value << bpp) | index

    stride = row_stride(bpp, len(indices))
    value <<= stride * 8 - len(indices) * bpp
    return value.to_bytes(stride, "big")
