"""
Pixel surface module.

Owned RGBA8 buffers and the shared/exclusive leases that grant access to
them.
"""

from rasterkit.surface.pixel_surface import (
    LeaseReleasedError,
    PixelIndex,
    Surface,
    SurfaceAccessError,
    SurfaceBusyError,
    SurfaceMutView,
    SurfaceView,
)

__all__ = [
    "LeaseReleasedError",
    "PixelIndex",
    "Surface",
    "SurfaceAccessError",
    "SurfaceBusyError",
    "SurfaceMutView",
    "SurfaceView",
]
