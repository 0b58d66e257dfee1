"""Geometric primitives and queries in integer pixel space.

Provides:
    - Line, Rect, Poly, Tri: immutable shapes over Vec2 points
    - Segment intersection, line intersection, point projection
    - Point containment: triangle (cross-product signs), polygon (even-odd)
    - Ring cleanup (remove_dup_points) and winding classification (poly_area)

Used by:
    - Graphics: line/rect/poly/tri drawing
    - Triangulation: ear test via Tri.contains_point
    - Outline flattening: duplicate removal on finished rings

Winding convention:
    Polygons and triangles are listed clockwise in y-down screen space,
    i.e. the shoelace sum is positive. Tri.contains_point and the ear
    clipper rely on it; a counter-clockwise input silently flips results
    instead of raising.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .vectors import Vec2

PointLike = Union[Vec2, Tuple[int, int]]


def _points(points: Iterable[PointLike]) -> Tuple[Vec2, ...]:
    return tuple(Vec2.of(p) for p in points)


# ============================================================================
# LINE
# ============================================================================

@dataclass(frozen=True, slots=True)
class Line:
    """Ordered pair of points.

    Direction matters for rasterization (Bresenham steps from ``start`` to
    ``end``) but not for intersection queries.
    """

    start: Vec2
    end: Vec2

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", Vec2.of(self.start))
        object.__setattr__(self, "end", Vec2.of(self.end))

    def min_x(self) -> int:
        return min(self.start.x, self.end.x)

    def max_x(self) -> int:
        return max(self.start.x, self.end.x)

    def min_y(self) -> int:
        return min(self.start.y, self.end.y)

    def max_y(self) -> int:
        return max(self.start.y, self.end.y)

    def reversed(self) -> "Line":
        return Line(self.end, self.start)

    def intersects(self, other: "Line") -> bool:
        return lines_intersect(self, other)

    def intersection(self, other: "Line") -> Optional[Vec2]:
        return line_intersection(self, other)


def lines_intersect(a: Line, b: Line) -> bool:
    """Test whether two segments cross strictly inside both.

    Parameters
    ----------
    a, b : Line
        Segments

    Returns
    -------
    bool
        True if the crossing parameters are both in the open interval (0, 1).
        Parallel or collinear segments, and segments touching only at an
        endpoint, return False.
    """
    d1 = a.end - a.start
    d2 = b.end - b.start
    det = d1.cross(d2)
    if det == 0:
        return False

    offset = b.start - a.start
    lam = offset.cross(d2) / det
    gamma = offset.cross(d1) / det
    return 0.0 < lam < 1.0 and 0.0 < gamma < 1.0


def line_intersection(a: Line, b: Line) -> Optional[Vec2]:
    """Intersection of the infinite lines through two segments.

    Returns
    -------
    Vec2 or None
        Intersection truncated toward zero, or None when the lines are
        parallel (including collinear).
    """
    d1 = a.end - a.start
    d2 = b.end - b.start
    det = d1.cross(d2)
    if det == 0:
        return None

    t = (b.start - a.start).cross(d2) / det
    return Vec2(a.start.x + d1.x * t, a.start.y + d1.y * t).as_int()


def project_point_onto_line(p: PointLike, line: Line) -> Vec2:
    """Orthogonal projection of ``p`` onto the infinite line through ``line``.

    The result is truncated toward zero. A degenerate line (both endpoints
    equal) projects everything onto its single point.
    """
    p = Vec2.of(p)
    e1 = line.end - line.start
    e2 = p - line.start
    len_sq = e1.len_sq()
    if len_sq == 0:
        return line.start

    dp = e1.dot(e2)
    x = line.start.x + (dp * e1.x) / len_sq
    y = line.start.y + (dp * e1.y) / len_sq
    return Vec2(int(x), int(y))


def line_contains_point(line: Line, width: int, point: PointLike) -> bool:
    """Hit-test a thick line.

    A point is on the line when its distance to the projection is at most
    ``width / 2`` and it lies inside the segment's bounding box.
    """
    point = Vec2.of(point)
    max_dist_sq = (width * 0.5) ** 2
    projected = project_point_onto_line(point, line)
    dist_sq = (projected - point).len_sq()

    return (
        dist_sq <= max_dist_sq
        and line.min_x() <= point.x <= line.max_x()
        and line.min_y() <= point.y <= line.max_y()
    )


# ============================================================================
# RECT
# ============================================================================

@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle: origin (x, y) and extent (w, h).

    No sign invariant on w/h. Drawing treats negative spans as empty.
    """

    x: int
    y: int
    w: int
    h: int

    @classmethod
    def from_pos_size(cls, pos: PointLike, size: PointLike) -> "Rect":
        pos, size = Vec2.of(pos), Vec2.of(size)
        return cls(pos.x, pos.y, size.x, size.y)

    @property
    def pos(self) -> Vec2:
        return Vec2(self.x, self.y)

    @property
    def size(self) -> Vec2:
        return Vec2(self.w, self.h)

    @property
    def tl(self) -> Vec2:
        return Vec2(self.x, self.y)

    @property
    def tr(self) -> Vec2:
        return Vec2(self.x + self.w, self.y)

    @property
    def br(self) -> Vec2:
        return Vec2(self.x + self.w, self.y + self.h)

    @property
    def bl(self) -> Vec2:
        return Vec2(self.x, self.y + self.h)

    def contains_point(self, p: PointLike) -> bool:
        p = Vec2.of(p)
        return self.x <= p.x <= self.x + self.w and self.y <= p.y <= self.y + self.h

    def points(self) -> Tuple[Vec2, Vec2, Vec2, Vec2]:
        return (self.tl, self.tr, self.br, self.bl)

    def lines(self) -> Tuple[Line, Line, Line, Line]:
        # TL->TR, TR->BR, BR->BL, BL->TL
        return (
            Line(self.tl, self.tr),
            Line(self.tr, self.br),
            Line(self.br, self.bl),
            Line(self.bl, self.tl),
        )

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)


# ============================================================================
# POLY / TRI
# ============================================================================

class WindingOrder(enum.Enum):
    """Ring orientation in y-down screen space."""

    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter_clockwise"


@dataclass(frozen=True, slots=True)
class Poly:
    """Closed ring of points, clockwise by convention.

    The last point connects back to the first implicitly.
    """

    points: Tuple[Vec2, ...]

    def __post_init__(self) -> None:
        pts = _points(self.points)
        if not pts:
            raise ValueError("Poly requires at least 1 point")
        object.__setattr__(self, "points", pts)

    def __len__(self) -> int:
        return len(self.points)

    def lines(self) -> List[Line]:
        pts = self.points
        lines = [Line(pts[i - 1], pts[i]) for i in range(1, len(pts))]
        lines.append(Line(pts[-1], pts[0]))
        return lines

    def contains_point(self, p: PointLike) -> bool:
        """Even-odd containment (boundary handling is unspecified)."""
        p = Vec2.of(p)
        inside = False
        pts = self.points
        j = len(pts) - 1
        for i in range(len(pts)):
            a, b = pts[i], pts[j]
            if (a.y > p.y) != (b.y > p.y):
                x_cross = a.x + (p.y - a.y) * (b.x - a.x) / (b.y - a.y)
                if p.x < x_cross:
                    inside = not inside
            j = i
        return inside

    def winding(self) -> WindingOrder:
        return poly_area(self.points)[1]


@dataclass(frozen=True, slots=True)
class Tri:
    """Triangle, clockwise in y-down space."""

    a: Vec2
    b: Vec2
    c: Vec2

    def __post_init__(self) -> None:
        object.__setattr__(self, "a", Vec2.of(self.a))
        object.__setattr__(self, "b", Vec2.of(self.b))
        object.__setattr__(self, "c", Vec2.of(self.c))

    @classmethod
    def from_points(cls, points: Sequence[PointLike]) -> "Tri":
        if len(points) != 3:
            raise ValueError(f"Tri requires exactly 3 points, got {len(points)}")
        return cls(*points)

    def points(self) -> Tuple[Vec2, Vec2, Vec2]:
        return (self.a, self.b, self.c)

    def lines(self) -> Tuple[Line, Line, Line]:
        return (Line(self.a, self.b), Line(self.b, self.c), Line(self.c, self.a))

    def contains_point(self, p: PointLike) -> bool:
        """Inside-or-on-edge test for a clockwise triangle.

        Each edge's cross product with the vector to ``p`` must be >= 0.
        """
        p = Vec2.of(p)
        cross1 = (self.b - self.a).cross(p - self.a)
        cross2 = (self.c - self.b).cross(p - self.b)
        cross3 = (self.a - self.c).cross(p - self.c)
        return cross1 >= 0 and cross2 >= 0 and cross3 >= 0


# ============================================================================
# RING HELPERS
# ============================================================================

def remove_dup_points(points: Iterable[PointLike]) -> List[Vec2]:
    """Drop every point equal to an earlier point of the same ring.

    Not limited to neighbours: a point repeated anywhere in the ring keeps
    only its first occurrence. Order is preserved.
    """
    return list(dict.fromkeys(Vec2.of(p) for p in points))


def poly_area(points: Sequence[PointLike]) -> Tuple[float, WindingOrder]:
    """Area and winding of a ring via the shoelace formula.

    Parameters
    ----------
    points : sequence of Vec2
        Ring vertices (implicitly closed)

    Returns
    -------
    (float, WindingOrder)
        Absolute area in px² and orientation. A zero-area ring reports
        CLOCKWISE.
    """
    pts = _points(points)
    twice_area = 0
    for i in range(len(pts)):
        twice_area += pts[i - 1].cross(pts[i])

    winding = WindingOrder.CLOCKWISE if twice_area >= 0 else WindingOrder.COUNTER_CLOCKWISE
    return abs(twice_area) / 2.0, winding
