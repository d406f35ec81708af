"""Service layer splitting color strips into per-ribbon dot-column bitplanes.

Each byte of a bitplane is one vertical dot column for the print head, with
bit 0 driving the top pin. A strip is printed as one pass per ribbon, in the
order yellow, red, blue, black.

At 144 vertical DPI a strip is 16 rows tall and every ribbon is printed in
two half-passes: phase 0 carries rows 0, 2, 4, ... and phase 1 carries rows
1, 3, 5, ... after the paper has been fed down by 1/144 inch.
"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from ribbonprint.exceptions import ProtocolLimitExceeded
from ribbonprint.models.color import PASS_ORDER, RibbonColor, uses_ribbon


PINS_PER_PASS = 8


class Bitplane(BaseModel):
    """Dot columns for one ribbon over one strip (or one half-pass)."""

    model_config = ConfigDict(frozen=True)

    ribbon: RibbonColor
    phase: int = Field(0, ge=0, le=1, description="Half-pass index at double density")
    columns: bytes = Field(..., repr=False, description="One byte per image column")
    start: int | None = Field(None, description="First column with ink")
    end: int | None = Field(None, description="Last column with ink")

    @property
    def is_empty(self) -> bool:
        return self.start is None

    @property
    def segment(self) -> bytes:
        """The columns from the first to the last inked one, inclusive."""
        if self.start is None or self.end is None:
            return b""
        return self.columns[self.start:self.end + 1]


def _build_bitplane(
    ribbon: RibbonColor,
    rows: Sequence[Sequence[RibbonColor]],
    width: int,
    phase: int = 0,
) -> Bitplane:
    columns = bytearray(width)
    start = end = None
    for x in range(width):
        value = 0
        for bit, row in enumerate(rows):
            if uses_ribbon(ribbon, row[x]):
                value |= 1 << bit
        if value:
            if start is None:
                start = x
            end = x
        columns[x] = value
    return Bitplane(ribbon=ribbon, phase=phase, columns=bytes(columns), start=start, end=end)


class SeparatorService:
    """Service for ribbon color separation of image strips."""

    @staticmethod
    def separate(
        strip: Sequence[Sequence[RibbonColor]], width: int, double_density: bool = False
    ) -> list[Bitplane]:
        """Separate a strip into bitplanes in print order.

        Empty bitplanes are included so callers can keep track of head
        movement between half-passes; they must not be printed.

        Args:
            strip: Rows of ribbon colors, top row first
            width: Number of columns in every row
            double_density: Use 16-row strips printed as 8 half-passes

        Returns:
            4 bitplanes (standard) or 8 bitplanes (double density)

        Raises:
            ProtocolLimitExceeded: If the strip is taller than one print line
            ValueError: If a row does not have ``width`` columns
        """
        limit = PINS_PER_PASS * 2 if double_density else PINS_PER_PASS
        if len(strip) > limit:
            raise ProtocolLimitExceeded(f"Strip of {len(strip)} rows exceeds {limit} rows")
        for row in strip:
            if len(row) != width:
                raise ValueError(f"Row has {len(row)} columns, expected {width}")

        if double_density:
            return SeparatorService.separate_double(strip, width)
        return SeparatorService.separate_standard(strip, width)

    @staticmethod
    def separate_standard(strip: Sequence[Sequence[RibbonColor]], width: int) -> list[Bitplane]:
        return [_build_bitplane(ribbon, strip, width) for ribbon in PASS_ORDER]

    @staticmethod
    def separate_double(strip: Sequence[Sequence[RibbonColor]], width: int) -> list[Bitplane]:
        planes = []
        for index in range(len(PASS_ORDER) * 2):
            phase = index % 2
            planes.append(_build_bitplane(PASS_ORDER[index // 2], strip[phase::2], width, phase))
        return planes
