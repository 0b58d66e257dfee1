"""Graphics: the drawing session over an exclusively leased surface.

Every primitive is a single synchronous pass that overwrites destination
pixels; nothing is blended and no state persists between calls beyond the
surface itself.

Clipping:
    All primitives clip silently against the logical size. Out-of-range
    geometry never raises and never touches memory outside the surface.
    Rect spans are half-open on both axes: [x, x + w) × [y, y + h).

Fast paths:
    Rect fills, circles, full fills and blits write through numpy slices of
    the lease's uint32 word array. The slice bounds come from the clipping
    step, so the slices are in range by construction. Single pixels go
    through the lease's bounds-checked set_pixel().

Usage:
    with surface.mut_view() as view:
        g = view.create_graphics()
        g.fill(Color.BLACK)
        g.draw_line(Line(Vec2(0, 0), Vec2(10, 4)), Color.WHITE)
        g.fill_tri(Tri((5, 5), (20, 8), (9, 20)), Color.RED)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Tuple, Union

import numpy as np

from rasterkit.utils.color import PIXEL_DTYPE, Color
from rasterkit.utils.geometry import Line, PointLike, Poly, Rect, Tri
from rasterkit.utils.vectors import Vec2

from . import tri_rasterizer
from .lines import bresenham

if TYPE_CHECKING:
    from rasterkit.surface.pixel_surface import SurfaceMutView, SurfaceView

logger = logging.getLogger(__name__)

ColorFn = Callable[[Vec2], Color]
VectorColorFn = Callable[[np.ndarray, np.ndarray], np.ndarray]


class Graphics:
    """Rasterizer bound to one SurfaceMutView.

    Parameters
    ----------
    buffer : SurfaceMutView
        Exclusive write lease. The session is valid only while the lease is.
    size : Vec2, optional
        Logical drawable size, tracked separately from the buffer so a
        session can target a smaller area. Defaults to the lease extent.

    Raises
    ------
    ValueError
        If ``size`` is negative or exceeds the lease extent
    """

    def __init__(self, buffer: "SurfaceMutView", size: Optional[PointLike] = None):
        self.buffer = buffer
        size = buffer.size if size is None else Vec2.of(size)
        if size.x < 0 or size.y < 0:
            raise ValueError(f"Graphics size must be non-negative, got {size.as_tuple()}")
        if size.x > buffer.width or size.y > buffer.height:
            raise ValueError(
                f"Graphics size {size.as_tuple()} exceeds buffer extent {buffer.size.as_tuple()}"
            )
        self._size = Vec2(int(size.x), int(size.y))

    @property
    def size(self) -> Vec2:
        return self._size

    @property
    def width(self) -> int:
        return self._size.x

    @property
    def height(self) -> int:
        return self._size.y

    def _words(self) -> np.ndarray:
        """Writable word array limited to the logical size."""
        return self.buffer.pixels[:self._size.y, :self._size.x]

    def _clip(self, rect: Rect) -> Optional[Tuple[int, int, int, int]]:
        """Clip a rect to [0, w) × [0, h); returns (x0, y0, x1, y1) or None."""
        x0 = max(rect.x, 0)
        y0 = max(rect.y, 0)
        x1 = min(rect.x + rect.w, self._size.x)
        y1 = min(rect.y + rect.h, self._size.y)
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    # ------------------------------------------------------------------
    # Pixels
    # ------------------------------------------------------------------

    def draw_pixel(self, pos: PointLike, color: Color) -> None:
        """Write one pixel; out-of-range positions are ignored."""
        x, y = pos
        if 0 <= x < self._size.x and 0 <= y < self._size.y:
            self.buffer.set_pixel((x, y), color)

    def fill(self, color: Color) -> None:
        """Overwrite the whole backing buffer with ``color``."""
        self.buffer.pixels[...] = color.value

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def draw_line(self, line: Line, color: Color) -> None:
        """Bresenham line, both endpoints included."""
        for p in bresenham(line.start, line.end):
            self.draw_pixel(p, color)

    def fill_col(self, col: int, start: int, end: int, color: Color) -> None:
        """Vertical run on column ``col`` from ``start`` to ``end`` inclusive."""
        if not 0 <= col < self._size.x:
            return
        lo, hi = (start, end) if start <= end else (end, start)
        lo = max(lo, 0)
        hi = min(hi, self._size.y - 1)
        if lo > hi:
            return
        self._words()[lo:hi + 1, col] = color.value

    def fill_row(self, row: int, start: int, end: int, color: Color) -> None:
        """Horizontal run on row ``row`` from ``start`` to ``end`` inclusive."""
        if not 0 <= row < self._size.y:
            return
        lo, hi = (start, end) if start <= end else (end, start)
        lo = max(lo, 0)
        hi = min(hi, self._size.x - 1)
        if lo > hi:
            return
        self._words()[row, lo:hi + 1] = color.value

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def draw_rect(self, rect: Rect, color: Color) -> None:
        """Outline with edges on x, x + w, y and y + h."""
        left, top = rect.x, rect.y
        right, bottom = left + rect.w, top + rect.h

        self.fill_col(left, top, bottom, color)
        self.fill_col(right, top, bottom, color)
        self.fill_row(top, left, right, color)
        self.fill_row(bottom, left, right, color)

    def fill_rect(self, rect: Rect, color: Color) -> None:
        """Fill [x, x + w) × [y, y + h) clipped to the surface."""
        clipped = self._clip(rect)
        if clipped is None:
            return
        x0, y0, x1, y1 = clipped
        self._words()[y0:y1, x0:x1] = color.value

    def draw_poly(self, poly: Poly, color: Color) -> None:
        """Edges between consecutive points plus the closing edge."""
        points = poly.points
        if len(points) < 2:
            return
        for i in range(1, len(points)):
            self.draw_line(Line(points[i - 1], points[i]), color)
        self.draw_line(Line(points[-1], points[0]), color)

    def draw_polys(self, polys: Iterable[Poly], color: Color) -> None:
        for poly in polys:
            self.draw_poly(poly, color)

    def draw_tri(self, tri: Tri, color: Color) -> None:
        for line in tri.lines():
            self.draw_line(line, color)

    def fill_tri(self, tri: Tri, color: Color) -> None:
        """Scanline fill (see tri_rasterizer)."""
        tri_rasterizer.raster_tri(self, tri.points(), color)

    def fill_tris(self, tris: Iterable[Tri], color: Color) -> None:
        for tri in tris:
            self.fill_tri(tri, color)

    def fill_circle(self, center: PointLike, radius: int, color: Color) -> None:
        """Fill every pixel whose squared distance to ``center`` is <= radius².

        Brute-force membership test over the inclusive bounding box
        [center - radius, center + radius].
        """
        if radius < 0:
            return
        cx, cy = Vec2.of(center)
        bbox = Rect(cx - radius, cy - radius, 2 * radius + 1, 2 * radius + 1)
        clipped = self._clip(bbox)
        if clipped is None:
            return
        x0, y0, x1, y1 = clipped

        dy = np.arange(y0, y1)[:, None] - cy
        dx = np.arange(x0, x1)[None, :] - cx
        mask = dx * dx + dy * dy <= radius * radius
        self._words()[y0:y1, x0:x1][mask] = color.value

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def draw_pixels(self, raster: "SurfaceView", rect: Rect) -> None:
        """Blit ``raster`` into ``rect``.

        A source whose size equals the session and buffer size, targeted at
        (0, 0, w, h), is copied byte for byte. Anything else is resampled
        with nearest-neighbour sampling through shade_rect():

            src = trunc((pos - rect.pos) / (rect.size - 1) * (raster.size - 1))

        A destination axis of length 1 samples source index 0 on that axis.
        """
        raster_w, raster_h = raster.width, raster.height
        if (
            rect.as_tuple() == (0, 0, raster_w, raster_h)
            and (raster_w, raster_h) == self._size.as_tuple()
            and self.buffer.size == self._size
        ):
            self.draw_raster_1to1(raster)
            return

        if raster_w == 0 or raster_h == 0:
            return

        src = raster.pixels
        # Integer floor division: exact truncation of normal * (extent - 1),
        # offsets are non-negative after clipping.
        span_x = max(rect.w - 1, 1)
        span_y = max(rect.h - 1, 1)
        reach_x = raster_w - 1 if rect.w > 1 else 0
        reach_y = raster_h - 1 if rect.h > 1 else 0

        def sample(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
            img_x = (xs - rect.x) * reach_x // span_x
            img_y = (ys - rect.y) * reach_y // span_y
            return src[img_y, img_x]

        self.shade_rect(rect, sample, vectorized=True)

    def draw_raster_1to1(self, raster: "SurfaceView") -> None:
        """Copy a same-sized raster's bytes over the whole buffer."""
        if raster.size != self.buffer.size:
            raise ValueError(
                f"1:1 blit needs equal sizes, got {raster.size.as_tuple()} vs {self.buffer.size.as_tuple()}"
            )
        np.copyto(self.buffer.bytes, raster.bytes)

    def shade_rect(
        self,
        rect: Rect,
        color_fn: Union[ColorFn, VectorColorFn],
        vectorized: bool = False
    ) -> None:
        """Write ``color_fn(pos)`` to every clipped pixel of ``rect``.

        Parameters
        ----------
        rect : Rect
            Destination, clipped to [0, w) × [0, h)
        color_fn : callable
            - vectorized=False: ``fn(Vec2) -> Color``, called once per pixel
            - vectorized=True: ``fn(xs, ys) -> uint32 words`` where xs/ys are
              broadcastable integer coordinate arrays of the clipped span
        vectorized : bool
            Select the calling convention, default False
        """
        clipped = self._clip(rect)
        if clipped is None:
            return
        x0, y0, x1, y1 = clipped
        target = self._words()[y0:y1, x0:x1]

        if vectorized:
            ys, xs = np.mgrid[y0:y1, x0:x1]
            target[...] = np.asarray(color_fn(xs, ys), dtype=PIXEL_DTYPE)
            return

        for y in range(y0, y1):
            for x in range(x0, x1):
                target[y - y0, x - x0] = color_fn(Vec2(x, y)).value
