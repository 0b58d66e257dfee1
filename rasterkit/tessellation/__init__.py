"""
Tessellation module.

Ear-clipping triangulation of clockwise polygons and flattening of
quadratic glyph outlines into point rings.
"""

from rasterkit.tessellation.outline import OutlineFlattener, OutlinePen, UnsupportedCurveError
from rasterkit.tessellation.text import build_text, load_font
from rasterkit.tessellation.triangulation import (
    TriangulationError,
    TriangulationFailure,
    triangulate,
    triangulate_indices,
)

__all__ = [
    "OutlineFlattener",
    "OutlinePen",
    "TriangulationError",
    "TriangulationFailure",
    "UnsupportedCurveError",
    "build_text",
    "load_font",
    "triangulate",
    "triangulate_indices",
]
