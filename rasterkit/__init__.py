"""rasterkit: CPU-side 2D software rasterization.

This package converts vector primitives (lines, rectangles, polygons,
triangles, circles, resampled images) into writes on a raw RGBA8 pixel
buffer, triangulates simple polygons by ear clipping, and flattens quadratic
glyph outlines into polygons.

Architecture layers (strict one-way dependency):
    scripts/ → rasterkit/{scene,tessellation,graphics,surface}/ → rasterkit/utils/

Key invariants:
    - Top-left origin, +Y down, integer pixel coordinates
    - Pixels are RGBA8, one little-endian 32-bit word per pixel
    - Writes always overwrite all 4 bytes (no blending)
    - Polygons and triangles are clockwise in screen space
    - One write lease OR any number of read leases per surface
    - YAML-only configs
"""

__version__ = "0.4.0"
