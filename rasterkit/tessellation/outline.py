"""Glyph outline flattening: path events → integer point rings.

OutlineFlattener consumes path-construction events (move, line, quadratic
curve, close) in glyph-local coordinates and accumulates closed rings in
pixel space. OutlinePen adapts it to the fontTools pen protocol so any
glyph set can draw straight into it.

Flattening:
    - Coordinates are truncated toward zero, then the current glyph offset
      is added
    - Quadratic curves are sampled at t = 0, 0.5, 1 by nested integer lerps
      (start→control, control→end, then between the two)
    - Cubic curves raise UnsupportedCurveError (TrueType outlines only)

finish() drops empty rings and removes every repeated point from each
ring, keeping the first occurrence.
"""

from __future__ import annotations

from typing import List, Tuple

from fontTools.pens.basePen import BasePen

from rasterkit.utils.geometry import PointLike, Poly, remove_dup_points
from rasterkit.utils.vectors import Vec2

QUAD_STEP = 0.5


class UnsupportedCurveError(NotImplementedError):
    """Cubic outline segments cannot be flattened (CFF fonts)."""

    pass


def _lerp(a: Vec2, b: Vec2, t: float) -> Vec2:
    return Vec2(a.x + int((b.x - a.x) * t), a.y + int((b.y - a.y) * t))


class OutlineFlattener:
    """Accumulates flattened outline rings.

    Usage:
        flat = OutlineFlattener()
        flat.set_glyph_offset(Vec2(40, 80))
        flat.move_to(0, 0)
        flat.line_to(10, 0)
        flat.quad_to(10, 10, 0, 10)
        flat.close()
        polys = flat.finish()
    """

    def __init__(self):
        self._rings: List[List[Vec2]] = [[]]
        self._pos = Vec2(0, 0)
        self._offset = Vec2(0, 0)

    @property
    def glyph_offset(self) -> Vec2:
        return self._offset

    def set_glyph_offset(self, offset: PointLike) -> None:
        """Pixel offset added to every subsequent vertex."""
        self._offset = Vec2.of(offset).as_int()

    def _vertex(self, p: Vec2) -> None:
        self._rings[-1].append(p + self._offset)

    def move_to(self, x: float, y: float) -> None:
        if self._rings[-1]:
            # Previous contour was left open
            self._rings.append([])
        self._pos = Vec2(int(x), int(y))
        self._vertex(self._pos)

    def line_to(self, x: float, y: float) -> None:
        self._pos = Vec2(int(x), int(y))
        self._vertex(self._pos)

    def quad_to(self, cx: float, cy: float, x: float, y: float) -> None:
        start = self._pos
        control = Vec2(int(cx), int(cy))
        end = Vec2(int(x), int(y))

        t = 0.0
        while t <= 1.0:
            self._vertex(_lerp(_lerp(start, control, t), _lerp(control, end, t), t))
            t += QUAD_STEP
        self._pos = end

    def curve_to(self, *args: float) -> None:
        raise UnsupportedCurveError("Cubic curves are not supported; only TrueType (quadratic) outlines")

    def close(self) -> None:
        self._rings.append([])

    def rings(self) -> List[List[Vec2]]:
        """Raw rings so far, including the open one (copies)."""
        return [list(r) for r in self._rings]

    def finish(self) -> List[Poly]:
        """Completed non-empty rings with duplicate points removed."""
        return [Poly(tuple(remove_dup_points(r))) for r in self._rings if r]


class OutlinePen(BasePen):
    """fontTools pen that forwards segments to an OutlineFlattener.

    BasePen decomposes TrueType qCurveTo runs (implied on-curve points)
    into single quadratic segments before they reach _qCurveToOne.
    """

    def __init__(self, flattener: OutlineFlattener, glyphSet=None):
        super().__init__(glyphSet)
        self.flattener = flattener

    def _moveTo(self, pt: Tuple[float, float]) -> None:
        self.flattener.move_to(*pt)

    def _lineTo(self, pt: Tuple[float, float]) -> None:
        self.flattener.line_to(*pt)

    def _qCurveToOne(self, pt1: Tuple[float, float], pt2: Tuple[float, float]) -> None:
        self.flattener.quad_to(pt1[0], pt1[1], pt2[0], pt2[1])

    def _curveToOne(self, pt1, pt2, pt3) -> None:
        self.flattener.curve_to(*pt1, *pt2, *pt3)

    def _closePath(self) -> None:
        self.flattener.close()

    def _endPath(self) -> None:
        self.flattener.close()
