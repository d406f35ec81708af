"""Pytest configuration for the RibbonPrint server tests."""

from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import Callable, Generator, Sequence

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ribbonprint import config  # noqa: E402
from ribbonprint.main import create_app  # noqa: E402
from ribbonprint.models.color import CANONICAL_RGB, RibbonColor  # noqa: E402

# Palette index == ribbon color code
RIBBON_PALETTE = [CANONICAL_RGB[color] for color in RibbonColor]


def _pack_row(row: Sequence[int], bpp: int, stride: int) -> bytes:
    bits = "".join(format(value, f"0{bpp}b") for value in row).ljust(stride * 8, "0")
    return int(bits, 2).to_bytes(stride, "big")


def build_bmp(
    pixels: Sequence[Sequence[int]],
    palette: Sequence[tuple[int, int, int]] = RIBBON_PALETTE,
    bpp: int = 4,
    *,
    signature: bytes = b"BM",
    compression: int = 0,
    dib_size: int = 40,
    n_colors: int | None = None,
    height: int | None = None,
    data: bytes | None = None,
    truncate: int = 0,
) -> bytes:
    """Build a BMP file from palette indices given top row first."""
    width = len(pixels[0]) if pixels else 0
    rows = len(pixels) if height is None else height
    stride = ((bpp * width + 31) // 32) * 4
    if data is None:
        data = b"".join(_pack_row(row, bpp, stride) for row in reversed(pixels))

    dib = struct.pack(
        "<IiiHHIIiiII",
        dib_size,
        width,
        rows,
        1,
        bpp,
        compression,
        len(data),
        2835,
        2835,
        len(palette) if n_colors is None else n_colors,
        0,
    )[:dib_size].ljust(dib_size, b"\x00")
    raw_palette = b"".join(bytes((blue, green, red, 0)) for red, green, blue in palette)
    offset = 14 + len(dib) + len(raw_palette)
    head = struct.pack("<2sIHHI", signature, offset + len(data), 0, 0, offset)

    blob = head + dib + raw_palette + data
    return blob[:len(blob) - truncate] if truncate else blob


@pytest.fixture()
def make_bmp() -> Callable[..., bytes]:
    return build_bmp


@pytest.fixture()
def device_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "printer.bin"
    monkeypatch.setenv("RIBBONPRINT_DEVICE_PATH", str(path))
    monkeypatch.setattr(config, "_settings", None)
    return path


@pytest.fixture()
def client(device_path: Path) -> Generator[TestClient, None, None]:
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
