"""Service layer for the RibbonPrint graphics pipeline."""

from ribbonprint.services.bitmap_service import BitmapService
from ribbonprint.services.palette_service import PaletteService
from ribbonprint.services.separator_service import SeparatorService

__all__ = ["BitmapService", "PaletteService", "SeparatorService"]
