"""Service layer for reading and writing palette bitmaps.

This service handles all bitmap I/O for the graphics pipeline:
- Decoding uncompressed 1-4 bpp BMP files from a seekable source
- Encoding bitmaps back to BMP files
- Packing Pillow palette images into bitmaps
- Drawing the built-in color test pattern
"""

from __future__ import annotations

import logging
import struct
from io import BytesIO
from typing import BinaryIO

from PIL import Image, ImageDraw
from pydantic import ValidationError

from ribbonprint.exceptions import FormatError
from ribbonprint.models.bitmap import BitmapImage
from ribbonprint.models.color import CANONICAL_RGB, RibbonColor
from ribbonprint.utils.bitmap import (
    BMP_SIGNATURE,
    COMPRESSION_RGB,
    DIB_HEADER,
    FILE_HEADER,
    MAX_BITS_PER_PIXEL,
    MAX_PALETTE_COLORS,
    PALETTE_ENTRY_SIZE,
    pack_row,
    row_stride,
)

logger = logging.getLogger(__name__)

_PIXELS_PER_METER = 2835  # 72 DPI


def _read_at(source: BinaryIO, offset: int, size: int, what: str) -> bytes:
    try:
        source.seek(offset)
        chunk = source.read(size)
    except (OSError, ValueError) as e:
        raise FormatError(f"Could not read {what}: {e}") from e
    if chunk is None or len(chunk) != size:
        raise FormatError(f"Could not read {what}")
    return chunk


class BitmapService:
    """Service for decoding and producing palette bitmaps."""

    @staticmethod
    def decode(source: BinaryIO) -> BitmapImage:
        """Decode a palette-indexed BMP file.

        Only the first ``min(declared size, 40)`` bytes of the DIB header are
        trusted; fields beyond the declared size read as zero.

        Args:
            source: Seekable binary stream positioned anywhere

        Returns:
            Decoded bitmap

        Raises:
            FormatError: If the file is malformed, truncated or uses an
                unsupported compression or depth
        """
        file_head = _read_at(source, 0, FILE_HEADER.size, "file header")
        signature, _file_size, _, _, data_offset = FILE_HEADER.unpack(file_head)
        if signature != BMP_SIGNATURE:
            raise FormatError(f"Invalid signature: {signature!r}")

        (dib_size,) = struct.unpack("<I", _read_at(source, FILE_HEADER.size, 4, "DIB size"))
        if dib_size == 0:
            raise FormatError("Could not read DIB size")
        trusted = min(dib_size, DIB_HEADER.size)
        dib_head = _read_at(source, FILE_HEADER.size, trusted, "DIB header")
        dib_head = dib_head.ljust(DIB_HEADER.size, b"\x00")
        (
            _,
            width,
            height,
            _planes,
            bpp,
            compression,
            _image_size,
            _h_ppm,
            _v_ppm,
            n_colors,
            _important,
        ) = DIB_HEADER.unpack(dib_head)

        if compression != COMPRESSION_RGB:
            raise FormatError(f"Unsupported compression value: {compression}")
        if bpp > MAX_BITS_PER_PIXEL:
            raise FormatError(f"Unsupported bits-per-pixel value: {bpp}")
        if bpp == 0:
            raise FormatError("Bits-per-pixel must be at least 1")
        if width <= 0:
            raise FormatError(f"Width must be positive, got {width}")
        if height < 0:
            raise FormatError("Top-down bitmaps are not supported")
        if height == 0:
            raise FormatError("Height must be positive, got 0")
        if n_colors == 0:
            n_colors = 1 << bpp

        raw_palette = _read_at(
            source,
            FILE_HEADER.size + dib_size,
            n_colors * PALETTE_ENTRY_SIZE,
            "palette",
        )
        palette = tuple(
            (raw_palette[i + 2], raw_palette[i + 1], raw_palette[i])
            for i in range(0, len(raw_palette), PALETTE_ENTRY_SIZE)
        )

        data_size = row_stride(bpp, width) * height
        data = _read_at(source, data_offset, data_size, "pixel data")

        logger.info(f"Decoded {width}x{height} bitmap, {bpp} bpp, {n_colors} colors")
        return BitmapImage(width=width, height=height, bpp=bpp, palette=palette, data=data)

    @staticmethod
    def load(data: bytes) -> BitmapImage:
        """Decode a BMP file held in memory."""
        return BitmapService.decode(BytesIO(data))

    @staticmethod
    def encode_bitmap(image: BitmapImage) -> bytes:
        """Encode a bitmap as a BMP file with a 40-byte DIB header.

        Args:
            image: Bitmap to encode

        Returns:
            Complete BMP file contents
        """
        palette = b"".join(bytes((blue, green, red, 0)) for red, green, blue in image.palette)
        data_offset = FILE_HEADER.size + DIB_HEADER.size + len(palette)
        file_size = data_offset + len(image.data)

        file_head = FILE_HEADER.pack(BMP_SIGNATURE, file_size, 0, 0, data_offset)
        dib_head = DIB_HEADER.pack(
            DIB_HEADER.size,
            image.width,
            image.height,
            1,
            image.bpp,
            COMPRESSION_RGB,
            len(image.data),
            _PIXELS_PER_METER,
            _PIXELS_PER_METER,
            image.n_colors,
            0,
        )
        return file_head + dib_head + palette + image.data

    @staticmethod
    def from_pil(img: Image.Image) -> BitmapImage:
        """Pack a Pillow palette image into a 4 bpp bitmap.

        The image is taken as-is: no resampling, quantization or dithering.

        Args:
            img: Pillow image in ``P`` mode using at most 16 palette entries

        Returns:
            Bitmap holding the same palette indices

        Raises:
            FormatError: If the image is not a palette image or uses too many colors
        """
        if img.mode != "P":
            raise FormatError(f"Expected a palette image, got mode {img.mode}")
        flat_palette = img.getpalette()
        if not flat_palette:
            raise FormatError("Palette image has no palette")

        width, height = img.size
        if width == 0 or height == 0:
            raise FormatError("Image is empty")
        _, highest = img.getextrema()
        n_colors = highest + 1
        if n_colors > MAX_PALETTE_COLORS:
            raise FormatError(f"Too many colors: {n_colors}")
        if len(flat_palette) < n_colors * 3:
            raise FormatError("Pixel data references entries beyond the palette")

        palette = tuple(
            (flat_palette[i * 3], flat_palette[i * 3 + 1], flat_palette[i * 3 + 2])
            for i in range(n_colors)
        )
        bpp = MAX_BITS_PER_PIXEL
        rows = [
            pack_row([img.getpixel((x, y)) for x in range(width)], bpp)
            for y in reversed(range(height))
        ]
        try:
            return BitmapImage(width=width, height=height, bpp=bpp, palette=palette, data=b"".join(rows))
        except ValidationError as e:
            raise FormatError(f"Invalid image: {e}") from e

    @staticmethod
    def create_test_pattern(cell: int = 1) -> Image.Image:
        """Draw the 8x8 diagonal color ramp used to check ribbon alignment.

        Square ``(column, row)`` is filled with color index
        ``column // 2 + row // 2``, which walks through every ink from black
        to purple.

        Args:
            cell: Size of each square in pixels

        Returns:
            Pillow palette image whose palette indices are ribbon color codes

        Raises:
            ValueError: If cell is not positive
        """
        if cell <= 0:
            raise ValueError(f"Cell size must be positive, got {cell}")

        img = Image.new("P", (8 * cell, 8 * cell), color=int(RibbonColor.WHITE))
        img.putpalette([channel for color in RibbonColor for channel in CANONICAL_RGB[color]])

        draw = ImageDraw.Draw(img)
        for row in range(8):
            for column in range(8):
                left, top = column * cell, row * cell
                draw.rectangle(
                    (left, top, left + cell - 1, top + cell - 1),
                    fill=column // 2 + row // 2,
                )
        return img
