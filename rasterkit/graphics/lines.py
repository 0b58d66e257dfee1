"""Integer line stepping shared by line drawing and triangle filling."""

from __future__ import annotations

from typing import Iterator

from rasterkit.utils.geometry import PointLike
from rasterkit.utils.vectors import Vec2


def bresenham(start: PointLike, end: PointLike) -> Iterator[Vec2]:
    """Yield the integer points of a line from ``start`` to ``end``.

    Parameters
    ----------
    start, end : Vec2
        Integer endpoints

    Yields
    ------
    Vec2
        Points in order. Both endpoints are yielded exactly once and
        consecutive points differ by at most 1 on each axis (8-connected).

    Notes
    -----
    err starts at dist_x - dist_y. Per step: if 2·err > -dist_y, step x;
    if 2·err < dist_x, step y. Both may happen in the same step.
    """
    x, y = Vec2.of(start)
    to_x, to_y = Vec2.of(end)

    dist_x = abs(to_x - x)
    dist_y = abs(to_y - y)
    step_x = 1 if x < to_x else -1
    step_y = 1 if y < to_y else -1
    err = dist_x - dist_y

    while True:
        yield Vec2(x, y)
        if x == to_x and y == to_y:
            return
        e2 = err * 2
        if e2 > -dist_y:
            err -= dist_y
            x += step_x
        if e2 < dist_x:
            err += dist_x
            y += step_y
