"""Device command emitter for the color dot-matrix printer.

All numeric fields are sent as fixed-width ASCII decimal. Line spacing is
expressed in 1/144 inch; the base spacing of 16 advances exactly one 8-dot
print line at 72 DPI.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from ribbonprint.exceptions import ProtocolLimitExceeded
from ribbonprint.models.color import RibbonColor
from ribbonprint.models.gfx import GfxConfig, PrinterFont
from ribbonprint.services.separator_service import Bitplane

logger = logging.getLogger(__name__)

ESC = b"\x1b"
CR = b"\r"
LF = b"\n"

BASE_LINE_SPACING = 16
MAX_FIELD_VALUE = 9999


def _check_field(value: int, what: str) -> None:
    if not 0 <= value <= MAX_FIELD_VALUE:
        raise ProtocolLimitExceeded(f"{what} {value} does not fit in 4 digits")


class DeviceEmitter:
    """Writes printer commands for graphics output to a byte sink."""

    def __init__(self, sink: BinaryIO, config: GfxConfig) -> None:
        self._sink = sink
        self._config = config
        self.bytes_written = 0

    def _write(self, data: bytes) -> None:
        self._sink.write(data)
        self.bytes_written += len(data)

    def begin(self) -> None:
        """Select the font matching the horizontal DPI and the base line spacing."""
        self.select_font(self._config.font)
        self.set_line_spacing(BASE_LINE_SPACING)

    def select_font(self, font: PrinterFont) -> None:
        self._write(ESC + font.value.encode("ascii"))

    def set_line_spacing(self, spacing: int) -> None:
        if not 1 <= spacing <= 99:
            raise ProtocolLimitExceeded(f"Line spacing {spacing} must be between 1 and 99")
        self._write(ESC + b"T%02d" % spacing)

    def set_color(self, color: RibbonColor) -> None:
        if color is RibbonColor.WHITE:
            raise ValueError("White is the absence of ink and cannot be selected")
        self._write(ESC + b"K%d" % int(color))

    def position(self, column: int) -> None:
        """Return the carriage and place it at an absolute dot column."""
        _check_field(column, "Carriage position")
        self._write(CR + ESC + b"F%04d" % column)

    def graphics(self, columns: bytes) -> None:
        """Print dot columns at the current position."""
        _check_field(len(columns), "Graphics length")
        self._write(ESC + b"G%04d" % len(columns) + columns)

    def emit_pass(self, plane: Bitplane) -> bool:
        """Print the inked segment of a bitplane.

        Returns:
            False if the bitplane is empty and nothing was written

        Raises:
            ProtocolLimitExceeded: If the position or length does not fit,
                checked before anything is written
        """
        if plane.is_empty:
            return False

        segment = plane.segment
        column = self._config.h_pos + plane.start
        _check_field(column, "Carriage position")
        _check_field(len(segment), "Graphics length")

        logger.debug(f"Printing {plane.ribbon.name.lower()} columns {plane.start}-{plane.end} at {column}")
        self.set_color(plane.ribbon)
        self.position(column)
        self.graphics(segment)
        return True

    def end_line(self) -> None:
        self._write(CR + LF)

    def line_feed(self) -> None:
        self._write(LF)

    def move_up(self, lines: int) -> None:
        """Reverse-feed the paper by ``lines`` lines at the current spacing."""
        if lines <= 0:
            return
        self._write(ESC + b"r" + LF * lines + ESC + b"f")

    def nudge_down(self) -> None:
        """Feed the paper by a single 1/144 inch step."""
        self.set_line_spacing(1)
        self.line_feed()
        self.set_line_spacing(BASE_LINE_SPACING)

    def nudge_up(self) -> None:
        """Reverse-feed the paper by a single 1/144 inch step."""
        self.set_line_spacing(1)
        self.move_up(1)
        self.set_line_spacing(BASE_LINE_SPACING)
