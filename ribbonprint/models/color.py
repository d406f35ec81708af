"""Ribbon colors and the ink mixing rules of the four-color ribbon."""

from __future__ import annotations

from enum import IntEnum


class RibbonColor(IntEnum):
    """Colors the printer can produce. The value is the device color code."""

    BLACK = 0
    YELLOW = 1
    RED = 2
    BLUE = 3
    ORANGE = 4
    GREEN = 5
    PURPLE = 6
    WHITE = 7  # no ink, never sent to the device

    @property
    def rgb(self) -> tuple[int, int, int]:
        return CANONICAL_RGB[self]


CANONICAL_RGB: dict[RibbonColor, tuple[int, int, int]] = {
    RibbonColor.BLACK: (0x00, 0x00, 0x00),
    RibbonColor.YELLOW: (0xD6, 0xD4, 0x26),
    RibbonColor.RED: (0xB8, 0x00, 0x00),
    RibbonColor.BLUE: (0x00, 0x5B, 0xFF),
    RibbonColor.ORANGE: (0xFF, 0x5D, 0x00),
    RibbonColor.GREEN: (0x0D, 0x89, 0x00),
    RibbonColor.PURPLE: (0x88, 0x00, 0x4C),
    RibbonColor.WHITE: (0xFF, 0xFF, 0xFF),
}

# Yellow goes first so the yellow band of the ribbon is not stained by the others.
PASS_ORDER: tuple[RibbonColor, ...] = (
    RibbonColor.YELLOW,
    RibbonColor.RED,
    RibbonColor.BLUE,
    RibbonColor.BLACK,
)

# Physical ribbons fired for each printable color.
INK_MIX: dict[RibbonColor, frozenset[RibbonColor]] = {
    RibbonColor.BLACK: frozenset({RibbonColor.BLACK}),
    RibbonColor.YELLOW: frozenset({RibbonColor.YELLOW}),
    RibbonColor.RED: frozenset({RibbonColor.RED}),
    RibbonColor.BLUE: frozenset({RibbonColor.BLUE}),
    RibbonColor.ORANGE: frozenset({RibbonColor.YELLOW, RibbonColor.RED}),
    RibbonColor.GREEN: frozenset({RibbonColor.YELLOW, RibbonColor.BLUE}),
    RibbonColor.PURPLE: frozenset({RibbonColor.RED, RibbonColor.BLUE}),
    RibbonColor.WHITE: frozenset(),
}


def uses_ribbon(ribbon: RibbonColor, color: RibbonColor) -> bool:
    """Return True if printing ``color`` needs a pass of ``ribbon``."""
    return ribbon in INK_MIX[color]


def color_for_rgb(rgb: tuple[int, int, int]) -> RibbonColor | None:
    for color, canonical in CANONICAL_RGB.items():
        if canonical == rgb:
            return color
    return None
