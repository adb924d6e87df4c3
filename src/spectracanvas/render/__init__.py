"""Raster surface and compositing."""

from spectracanvas.render.canvas import (
    BlendMode,
    Canvas,
    LinearGradient,
    RadialGradient,
    SurfaceUnavailableError,
)

__all__ = [
    "BlendMode",
    "Canvas",
    "LinearGradient",
    "RadialGradient",
    "SurfaceUnavailableError",
]
