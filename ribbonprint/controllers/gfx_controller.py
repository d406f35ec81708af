"""Session control for rendering images to the printer stream."""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from enum import Enum
from typing import BinaryIO, Generator, Sequence

from ribbonprint.exceptions import GfxSessionError
from ribbonprint.models.bitmap import BitmapImage
from ribbonprint.models.color import RibbonColor
from ribbonprint.models.gfx import GfxConfig
from ribbonprint.services import BitmapService, PaletteService, SeparatorService
from ribbonprint.services.device_service import DeviceEmitter


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


class GfxSession:
    """Renders images for one printer sink with a fixed configuration.

    ``start()`` selects the font and line spacing, after which any number of
    images can be printed. A failure leaves the session in the FAILED state;
    whatever reached the printer before the failure stays there.
    """

    def __init__(self, sink: BinaryIO, config: GfxConfig) -> None:
        self._config = config
        self._emitter = DeviceEmitter(sink, config)
        self._state = SessionState.UNINITIALIZED
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> GfxConfig:
        return self._config

    @property
    def bytes_written(self) -> int:
        return self._emitter.bytes_written

    def start(self) -> None:
        """Send the font and base line spacing for the configured DPI."""
        if self._state is not SessionState.UNINITIALIZED:
            raise GfxSessionError(f"Session already started ({self._state.value})")
        try:
            self._emitter.begin()
        except Exception:
            self._state = SessionState.FAILED
            raise
        self._state = SessionState.READY
        self._logger.debug(
            f"Session ready: {self._config.h_dpi}x{self._config.v_dpi} dpi, "
            f"font {self._config.font.name.lower()}"
        )

    @contextmanager
    def _rendering(self) -> Generator[None, None, None]:
        if self._state not in (SessionState.READY, SessionState.DONE):
            raise GfxSessionError(f"Cannot render in state {self._state.value}")
        self._state = SessionState.RENDERING
        try:
            yield
        except Exception as e:
            self._state = SessionState.FAILED
            self._logger.warning(f"Rendering failed: {e}")
            raise
        self._state = SessionState.DONE

    def print_bitmap(self, source: BinaryIO) -> BitmapImage:
        """Decode a BMP file and print it.

        The palette and every pixel are validated before the first image byte
        is sent.

        Args:
            source: Seekable binary stream holding the BMP file

        Returns:
            The decoded bitmap
        """
        with self._rendering():
            image = BitmapService.decode(source)
            self._print_decoded(image)
        return image

    def print_bitmap_image(self, image: BitmapImage) -> None:
        """Print an already decoded bitmap."""
        with self._rendering():
            self._print_decoded(image)

    def print_image(self, pixels: Sequence[int], width: int, height: int) -> None:
        """Print ribbon color codes given row-major, top row first."""
        with self._rendering():
            rows = PaletteService.rows_from_indices(pixels, width, height)
            self._render(rows, width, height)

    def print_test_pattern(self, cell: int = 1) -> BitmapImage:
        """Print the built-in diagonal color ramp."""
        with self._rendering():
            image = BitmapService.from_pil(BitmapService.create_test_pattern(cell))
            self._print_decoded(image)
        return image

    def _print_decoded(self, image: BitmapImage) -> None:
        palette_map = PaletteService.resolve(image.palette)
        rows = PaletteService.resolve_pixels(image, palette_map)
        self._render(rows, image.width, image.height)

    def _render(self, rows: Sequence[Sequence[RibbonColor]], width: int, height: int) -> None:
        rows_per_strip = self._config.rows_per_strip
        double_density = self._config.double_density
        emitter = self._emitter

        for top in range(0, height, rows_per_strip):
            strip = rows[top:top + rows_per_strip]
            self._logger.debug(f"Strip rows {top}-{top + len(strip) - 1} of {height}")
            for plane in SeparatorService.separate(strip, width, double_density):
                emitter.emit_pass(plane)
                if double_density:
                    if plane.phase == 0:
                        emitter.nudge_down()
                    else:
                        emitter.nudge_up()
            emitter.end_line()

        if self._config.return_to_top:
            emitter.move_up(math.ceil(height / rows_per_strip))

        self._logger.info(f"Printed {width}x{height} image, {emitter.bytes_written} bytes so far")


def render_bitmap(source: BinaryIO, sink: BinaryIO, config: GfxConfig) -> tuple[GfxSession, BitmapImage]:
    """Start a session on ``sink`` and print the BMP read from ``source``."""
    session = GfxSession(sink, config)
    session.start()
    image = session.print_bitmap(source)
    return session, image


def render_test_pattern(sink: BinaryIO, config: GfxConfig, cell: int = 1) -> tuple[GfxSession, BitmapImage]:
    """Start a session on ``sink`` and print the built-in test pattern."""
    session = GfxSession(sink, config)
    session.start()
    image = session.print_test_pattern(cell)
    return session, image
