"""View layer (routing) for the RibbonPrint graphics service."""


from .health import router as health_router
from .gfx import router as gfx_router


__all__ = [
    "health_router",
    "gfx_router",
]
