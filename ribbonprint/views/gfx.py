"""API endpoints for rendering and printing color graphics."""

from __future__ import annotations

import asyncio
from io import BytesIO

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import ValidationError

from ribbonprint.config import get_settings
from ribbonprint.controllers.gfx_controller import render_bitmap, render_test_pattern
from ribbonprint.exceptions import FormatError, ProtocolLimitExceeded
from ribbonprint.models.gfx import DPI_FONTS, FontEntry, GfxConfig, PrintResult
from ribbonprint.services import BitmapService

router = APIRouter(prefix="/api/gfx", tags=["gfx"])


def _gfx_config(
    h_dpi: int | None,
    v_dpi: int | None,
    h_pos: int | None,
    return_to_top: bool | None,
) -> GfxConfig:
    try:
        return get_settings().gfx_config(
            h_dpi=h_dpi, v_dpi=v_dpi, h_pos=h_pos, return_to_top=return_to_top
        )
    except ValidationError as exc:
        detail = "; ".join(error["msg"] for error in exc.errors())
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid graphics configuration: {detail}",
        ) from exc


async def _read_upload(file: UploadFile) -> bytes:
    limit = get_settings().max_upload_size
    payload = await file.read(limit + 1)
    if len(payload) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds maximum size of {limit} bytes",
        )
    return payload


async def _render(payload: bytes, config: GfxConfig) -> tuple[bytes, int, int]:
    stream = BytesIO()
    try:
        _, image = await asyncio.to_thread(render_bitmap, BytesIO(payload), stream, config)
    except (FormatError, ProtocolLimitExceeded) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return stream.getvalue(), image.width, image.height


def _write_device(data: bytes) -> None:
    with open(get_settings().device_path, "wb") as device:
        device.write(data)


async def _send_to_device(data: bytes) -> None:
    try:
        await asyncio.to_thread(_write_device, data)
    except OSError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Printer unavailable: {exc}",
        ) from exc


@router.post("/render")
async def render_bitmap_endpoint(
    file: UploadFile = File(..., description="Uncompressed 1-4 bpp BMP using ribbon colors"),
    h_dpi: int | None = Query(None),
    v_dpi: int | None = Query(None),
    h_pos: int | None = Query(None),
    return_to_top: bool | None = Query(None),
) -> Response:
    """HTTP endpoint returning the printer stream for an uploaded bitmap.

    Returns:
    - 200: Printer stream as application/octet-stream
    - 413: Upload too large
    - 422: Unsupported bitmap, palette or configuration
    """
    config = _gfx_config(h_dpi, v_dpi, h_pos, return_to_top)
    payload = await _read_upload(file)
    data, width, height = await _render(payload, config)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"X-Image-Width": str(width), "X-Image-Height": str(height)},
    )


@router.post("/print", response_model=PrintResult)
async def print_bitmap_endpoint(
    file: UploadFile = File(..., description="Uncompressed 1-4 bpp BMP using ribbon colors"),
    h_dpi: int | None = Query(None),
    v_dpi: int | None = Query(None),
    h_pos: int | None = Query(None),
    return_to_top: bool | None = Query(None),
) -> PrintResult:
    """HTTP endpoint printing an uploaded bitmap on the configured device.

    The image is fully rendered before the device is opened, so a rejected
    bitmap never reaches the printer.
    """
    config = _gfx_config(h_dpi, v_dpi, h_pos, return_to_top)
    payload = await _read_upload(file)
    data, width, height = await _render(payload, config)
    await _send_to_device(data)
    return PrintResult(width=width, height=height, bytes_written=len(data))


@router.get("/test-pattern")
async def test_pattern_endpoint(cell: int = Query(8, ge=1, le=64)) -> Response:
    """HTTP endpoint returning the built-in color test pattern as a BMP file."""
    image = BitmapService.from_pil(BitmapService.create_test_pattern(cell))
    return Response(content=BitmapService.encode_bitmap(image), media_type="image/bmp")


@router.post("/print-test", response_model=PrintResult)
async def print_test_endpoint(cell: int = Query(1, ge=1, le=64)) -> PrintResult:
    """HTTP endpoint printing the built-in color test pattern."""
    config = _gfx_config(None, None, None, None)
    stream = BytesIO()
    _, image = await asyncio.to_thread(render_test_pattern, stream, config, cell)
    data = stream.getvalue()
    await _send_to_device(data)
    return PrintResult(width=image.width, height=image.height, bytes_written=len(data))


@router.get("/fonts")
async def list_fonts() -> list[FontEntry]:
    """HTTP endpoint listing the supported horizontal DPIs and their fonts."""
    return [FontEntry(h_dpi=dpi, font=font) for dpi, font in DPI_FONTS.items()]
