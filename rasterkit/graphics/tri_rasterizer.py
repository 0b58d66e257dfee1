"""Scanline triangle fill by flat-top / flat-bottom decomposition.

Expects (0, 0) at the top-left (y grows downward).

A triangle is sorted by y and either filled directly (one edge is already
horizontal) or split at the middle vertex's row into a flat-bottom and a
flat-top triangle. Each flat-edge triangle walks its two slanted edges with
the same Bresenham stepping as line drawing and fills one row per scanline
between them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Tuple

from rasterkit.utils.color import Color
from rasterkit.utils.geometry import PointLike
from rasterkit.utils.vectors import Vec2

from .lines import bresenham

if TYPE_CHECKING:
    from .graphics import Graphics


def raster_tri(g: "Graphics", points: Sequence[PointLike], color: Color) -> None:
    """Fill the triangle given by 3 points in any order."""
    if len(points) != 3:
        raise ValueError(f"Triangle needs exactly 3 points, got {len(points)}")
    ordered = sorted((Vec2.of(p) for p in points), key=lambda p: p.y)
    raster_tri_sorted_y(g, ordered, color)


def raster_tri_sorted_y(g: "Graphics", points: Sequence[Vec2], color: Color) -> None:
    """Fill a triangle whose points are sorted by ascending y."""
    top, mid, bot = points

    if top.y == bot.y:
        # All three on one row
        xs = [top.x, mid.x, bot.x]
        g.fill_row(top.y, min(xs), max(xs), color)
    elif mid.y == bot.y:
        raster_flat_bottom_tri(g, (top, mid, bot), color)
    elif mid.y == top.y:
        raster_flat_top_tri(g, (top, mid, bot), color)
    else:
        # Point on the long edge (top → bot) at the middle vertex's row
        other = Vec2(
            int(top.x + (mid.y - top.y) / (bot.y - top.y) * (bot.x - top.x)),
            mid.y,
        )
        raster_flat_bottom_tri(g, (top, mid, other), color)
        raster_flat_top_tri(g, (mid, other, bot), color)


def raster_flat_bottom_tri(g: "Graphics", points: Sequence[Vec2], color: Color) -> None:
    """Fill (apex, base1, base2) where the base is below the apex on one row."""
    top, b1, b2 = points
    left, right = (b1, b2) if b1.x <= b2.x else (b2, b1)

    xl = get_line_x(top, left)
    xr = get_line_x(top, right)
    assert len(xl) == len(xr), "edges to a flat base must span the same rows"

    for i, ((l_min, _), (_, r_max)) in enumerate(zip(xl, xr)):
        g.fill_row(top.y + i, l_min, r_max, color)


def raster_flat_top_tri(g: "Graphics", points: Sequence[Vec2], color: Color) -> None:
    """Fill (base1, base2, apex) where the base is above the apex on one row."""
    t1, t2, bot = points
    left, right = (t1, t2) if t1.x <= t2.x else (t2, t1)

    xl = get_line_x(bot, left)
    xr = get_line_x(bot, right)
    assert len(xl) == len(xr), "edges to a flat base must span the same rows"

    for i, ((l_min, _), (_, r_max)) in enumerate(zip(xl, xr)):
        g.fill_row(bot.y - i, l_min, r_max, color)


def get_line_x(start: PointLike, end: PointLike) -> List[Tuple[int, int]]:
    """Per-row x extent of the Bresenham path from ``start`` to ``end``.

    Returns
    -------
    list of (min_x, max_x)
        One entry per distinct y, in walk order from ``start.y`` to
        ``end.y`` inclusive (``abs(dy) + 1`` entries).
    """
    spans: List[List[int]] = []
    row = None
    for p in bresenham(start, end):
        if p.y != row:
            spans.append([p.x, p.x])
            row = p.y
        else:
            span = spans[-1]
            if p.x < span[0]:
                span[0] = p.x
            elif p.x > span[1]:
                span[1] = p.x
    return [(lo, hi) for lo, hi in spans]
