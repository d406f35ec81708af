"""Pydantic models for decoded palette bitmaps."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ribbonprint.exceptions import PixelOutOfRange
from ribbonprint.utils.bitmap import COMPRESSION_RGB, pixel_at, row_stride


RGB = tuple[int, int, int]


class BitmapImage(BaseModel):
    """An uncompressed, bottom-up, palette-indexed bitmap held in memory."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Image width in pixels")
    height: int = Field(..., gt=0, description="Image height in pixels")
    bpp: int = Field(..., ge=1, le=4, description="Bits per pixel")
    palette: tuple[RGB, ...] = Field(..., min_length=1, description="RGB entry per palette index")
    data: bytes = Field(..., repr=False, description="Pixel rows, bottom row first, 4-byte padded")
    compression: int = COMPRESSION_RGB

    @model_validator(mode="after")
    def _check_data_size(self) -> "BitmapImage":
        if len(self.data) != self.data_size:
            raise ValueError(
                f"Pixel data is {len(self.data)} bytes, expected {self.data_size}"
            )
        return self

    @property
    def n_colors(self) -> int:
        return len(self.palette)

    @property
    def row_stride(self) -> int:
        return row_stride(self.bpp, self.width)

    @property
    def data_size(self) -> int:
        return self.row_stride * self.height

    def get_pixel(self, x: int, y: int) -> int:
        """Return the palette index at ``(x, y)``, with ``(0, 0)`` at the top left.

        Raises:
            PixelOutOfRange: If the coordinate lies outside the image
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise PixelOutOfRange(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} image"
            )
        return pixel_at(self.data, self.row_stride, self.bpp, x, self.height - 1 - y)
