"""Custom exceptions for the RibbonPrint graphics service."""


class RibbonPrintError(RuntimeError):
    """Base class for every error raised while rendering an image."""


class FormatError(RibbonPrintError):
    """Raised when a bitmap cannot be decoded or uses an unsupported layout."""


class UnsupportedPaletteEntry(FormatError):
    """Raised when a palette entry matches none of the ribbon colors."""

    def __init__(self, index: int, rgb: tuple[int, int, int]) -> None:
        self.index = index
        self.rgb = rgb
        red, green, blue = rgb
        super().__init__(
            f"Unsupported palette entry {index}: #{red:02x}{green:02x}{blue:02x} "
            f"(r: {red}, g: {green}, b: {blue})"
        )


class PixelOutOfRange(RibbonPrintError):
    """Raised when a pixel lookup falls outside the image bounds."""


class ProtocolLimitExceeded(RibbonPrintError):
    """Raised when a value does not fit in a fixed-width device field."""


class GfxSessionError(RibbonPrintError):
    """Raised when a session operation is not allowed in its current state."""
