"""Pydantic models describing graphics rendering configuration and results."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PrinterFont(str, Enum):
    """Printer fonts. The value is the character following ESC in the select command."""

    EXTENDED = "n"
    PICA = "N"
    ELITE = "E"
    SEMICONDENSED = "e"
    CONDENSED = "q"
    ULTRACONDENSED = "Q"
    PROPORTIONAL_PICA = "p"
    PROPORTIONAL_ELITE = "P"


# Horizontal dot pitch follows the character pitch of the selected font.
DPI_FONTS: dict[int, PrinterFont] = {
    72: PrinterFont.EXTENDED,
    80: PrinterFont.PICA,
    96: PrinterFont.ELITE,
    107: PrinterFont.SEMICONDENSED,
    120: PrinterFont.CONDENSED,
    136: PrinterFont.ULTRACONDENSED,
    144: PrinterFont.PICA,
    160: PrinterFont.EXTENDED,
}

VERTICAL_DPIS = (72, 144)


class GfxConfig(BaseModel):
    """Rendering configuration, fixed for the lifetime of a session."""

    model_config = ConfigDict(frozen=True)

    h_dpi: int = Field(72, description="Horizontal dots per inch, selects the printer font")
    v_dpi: int = Field(72, description="Vertical dots per inch, 72 native or 144 interleaved")
    h_pos: int = Field(0, ge=0, le=9999, description="Horizontal dot offset from the left margin")
    return_to_top: bool = Field(False, description="Move back to the top of the image when done")

    @field_validator("h_dpi")
    @classmethod
    def _validate_h_dpi(cls, value: int) -> int:
        if value not in DPI_FONTS:
            allowed = ", ".join(str(dpi) for dpi in DPI_FONTS)
            raise ValueError(f"Horizontal DPI must be one of {allowed}, got {value}")
        return value

    @field_validator("v_dpi")
    @classmethod
    def _validate_v_dpi(cls, value: int) -> int:
        if value not in VERTICAL_DPIS:
            raise ValueError(f"Vertical DPI must be 72 or 144, got {value}")
        return value

    @property
    def font(self) -> PrinterFont:
        return DPI_FONTS[self.h_dpi]

    @property
    def double_density(self) -> bool:
        return self.v_dpi == 144

    @property
    def rows_per_strip(self) -> int:
        return 16 if self.double_density else 8


class PrintResult(BaseModel):
    """Response returned after an image was sent to the printer."""

    status: Literal["printed"] = "printed"
    width: int = Field(..., description="Image width in pixels")
    height: int = Field(..., description="Image height in pixels")
    bytes_written: int = Field(..., description="Number of bytes written to the device")


class FontEntry(BaseModel):
    """One row of the horizontal DPI to font table."""

    h_dpi: int
    font: PrinterFont
