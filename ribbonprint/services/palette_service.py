"""Service layer mapping bitmap palettes onto ribbon colors."""

from __future__ import annotations

from typing import Sequence

from ribbonprint.exceptions import FormatError, UnsupportedPaletteEntry
from ribbonprint.models.bitmap import RGB, BitmapImage
from ribbonprint.models.color import RibbonColor, color_for_rgb
from ribbonprint.utils.bitmap import MAX_PALETTE_COLORS


PaletteMap = tuple[RibbonColor, ...]


class PaletteService:
    """Service for validating palettes and resolving pixels to ribbon colors."""

    @staticmethod
    def resolve(palette: Sequence[RGB]) -> PaletteMap:
        """Map every palette entry to the ribbon color with the same RGB value.

        Encoders such as ImageMagick declare 16 entries even when only 8 are
        used, so up to 16 are accepted as long as every one of them matches.

        Args:
            palette: RGB triple per palette index

        Returns:
            Ribbon color per palette index

        Raises:
            FormatError: If the palette has more than 16 entries
            UnsupportedPaletteEntry: If any entry is not an exact ribbon color
        """
        if len(palette) > MAX_PALETTE_COLORS:
            raise FormatError(f"Too many colors: {len(palette)}")

        resolved = []
        for index, rgb in enumerate(palette):
            color = color_for_rgb(tuple(rgb))
            if color is None:
                raise UnsupportedPaletteEntry(index, tuple(rgb))
            resolved.append(color)
        return tuple(resolved)

    @staticmethod
    def resolve_pixels(image: BitmapImage, palette_map: PaletteMap) -> list[list[RibbonColor]]:
        """Resolve the whole image to ribbon colors, top row first.

        Raises:
            FormatError: If a pixel references an index beyond the palette
        """
        rows = []
        for y in range(image.height):
            row = []
            for x in range(image.width):
                index = image.get_pixel(x, y)
                if index >= len(palette_map):
                    raise FormatError(
                        f"Bad pixel: ({x}, {y}) -> {index}, palette has {len(palette_map)} entries"
                    )
                row.append(palette_map[index])
            rows.append(row)
        return rows

    @staticmethod
    def rows_from_indices(pixels: Sequence[int], width: int, height: int) -> list[list[RibbonColor]]:
        """Split row-major ribbon color codes into rows, top row first.

        Raises:
            FormatError: If the data does not match the size or holds unknown codes
        """
        if width <= 0 or height <= 0:
            raise FormatError(f"Image size must be positive, got {width}x{height}")
        if len(pixels) != width * height:
            raise FormatError(f"Expected {width * height} pixels, got {len(pixels)}")

        try:
            colors = [RibbonColor(value) for value in pixels]
        except ValueError as e:
            raise FormatError(f"Unknown ribbon color: {e}") from e
        return [colors[y * width:(y + 1) * width] for y in range(height)]
