"""
Rasterization module.

Graphics draws pixels, lines, rects, polygons, triangles, circles and
resampled images onto a SurfaceMutView. Lines use Bresenham stepping and
filled triangles use flat-top / flat-bottom scanline decomposition.
"""

from rasterkit.graphics.graphics import Graphics
from rasterkit.graphics.lines import bresenham
from rasterkit.graphics.tri_rasterizer import get_line_x, raster_tri

__all__ = ["Graphics", "bresenham", "get_line_x", "raster_tri"]
