"""Scene rendering: validated scene.v1 → Surface.

One write lease is held for the whole scene; shapes are drawn in list order
and each overwrites whatever is below it.

Filled polygons and filled text go through ear clipping. A ring that cannot
be triangulated (wrong winding, self-intersection, glyph counters) is drawn
as an outline instead and logged at WARNING; every other error propagates.

Usage:
    from rasterkit.scene import render_scene
    from rasterkit.utils import validators, fs

    scene = validators.load_scene_config("configs/scenes/demo.v1.yaml")
    surface = render_scene(scene, base_dir="configs/scenes")
    fs.atomic_save_surface(surface, "outputs/demo.png")
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from fontTools.ttLib import TTFont

from rasterkit.graphics.graphics import Graphics
from rasterkit.surface.pixel_surface import Surface
from rasterkit.tessellation.text import build_text, load_font
from rasterkit.tessellation.triangulation import TriangulationError, triangulate
from rasterkit.utils import fs
from rasterkit.utils.geometry import Line, Poly, Rect, Tri
from rasterkit.utils.profiler import timer
from rasterkit.utils.validators import (
    CircleShape,
    ImageShape,
    LineShape,
    PixelShape,
    PolyShape,
    RectShape,
    SceneV1,
    TextShape,
    TriShape,
)

logger = logging.getLogger(__name__)

TimingSink = Callable[[str, float], None]


class _RenderContext:
    """Per-render state: asset directory and loaded fonts."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._fonts: Dict[Path, TTFont] = {}

    def resolve(self, path: str) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.base_dir / p

    def font(self, path: str) -> TTFont:
        resolved = self.resolve(path)
        if resolved not in self._fonts:
            self._fonts[resolved] = load_font(resolved)
        return self._fonts[resolved]


def fill_poly(g: Graphics, poly: Poly, color) -> bool:
    """Fill ``poly`` through ear clipping, falling back to its outline.

    Returns
    -------
    bool
        False when triangulation failed and the outline was drawn instead
    """
    try:
        tris = triangulate(poly.points)
    except TriangulationError as e:
        logger.warning(f"Poly fill failed ({e.reason.value}): {e}; drawing outline")
        g.draw_poly(poly, color)
        return False
    g.fill_tris(tris, color)
    return True


# ============================================================================
# SHAPE DRAWERS
# ============================================================================

def _draw_pixel(g: Graphics, shape: PixelShape, ctx: _RenderContext) -> None:
    g.draw_pixel(shape.pos, shape.color)


def _draw_line(g: Graphics, shape: LineShape, ctx: _RenderContext) -> None:
    g.draw_line(Line(shape.start, shape.end), shape.color)


def _draw_rect(g: Graphics, shape: RectShape, ctx: _RenderContext) -> None:
    rect = Rect(*shape.rect)
    if shape.fill:
        g.fill_rect(rect, shape.color)
    else:
        g.draw_rect(rect, shape.color)


def _draw_circle(g: Graphics, shape: CircleShape, ctx: _RenderContext) -> None:
    g.fill_circle(shape.center, shape.radius, shape.color)


def _draw_poly(g: Graphics, shape: PolyShape, ctx: _RenderContext) -> None:
    poly = Poly(tuple(shape.points))
    if shape.fill:
        fill_poly(g, poly, shape.color)
    else:
        g.draw_poly(poly, shape.color)


def _draw_tri(g: Graphics, shape: TriShape, ctx: _RenderContext) -> None:
    tri = Tri(*shape.points)
    if shape.fill:
        g.fill_tri(tri, shape.color)
    else:
        g.draw_tri(tri, shape.color)


def _draw_image(g: Graphics, shape: ImageShape, ctx: _RenderContext) -> None:
    image = fs.load_image_surface(ctx.resolve(shape.path))
    dest = Rect(*shape.dest) if shape.dest is not None else image.rect_at((0, 0))
    with image.view() as src:
        g.draw_pixels(src, dest)


def _draw_text(g: Graphics, shape: TextShape, ctx: _RenderContext) -> None:
    polys = build_text(shape.text, shape.pos, ctx.font(shape.font), shape.size)
    if not shape.fill:
        g.draw_polys(polys, shape.color)
        return
    for poly in polys:
        fill_poly(g, poly, shape.color)


_DRAWERS = {
    "pixel": _draw_pixel,
    "line": _draw_line,
    "rect": _draw_rect,
    "circle": _draw_circle,
    "poly": _draw_poly,
    "tri": _draw_tri,
    "image": _draw_image,
    "text": _draw_text,
}


# ============================================================================
# ENTRY POINT
# ============================================================================

def render_scene(
    scene: SceneV1,
    base_dir: Optional[Union[str, Path]] = None,
    timings: Optional[TimingSink] = None
) -> Surface:
    """Draw ``scene`` onto a new Surface.

    Parameters
    ----------
    scene : SceneV1
        Validated scene
    base_dir : str or Path, optional
        Directory that relative image/font paths are resolved against,
        default the current directory
    timings : callable, optional
        timer() sink receiving one ``shape[i]:kind`` sample per shape

    Returns
    -------
    Surface
        Rendered surface with no outstanding lease
    """
    ctx = _RenderContext(Path(base_dir) if base_dir is not None else Path.cwd())
    canvas = scene.canvas
    surface = Surface.empty(canvas.width, canvas.height)
    logger.info(
        f"Rendering {canvas.width}x{canvas.height} scene with {len(scene.shapes)} shapes"
    )

    with surface.mut_view() as view:
        g = view.create_graphics()
        g.fill(canvas.background)
        for i, shape in enumerate(scene.shapes):
            with timer(f"shape[{i}]:{shape.kind}", sink=timings):
                _DRAWERS[shape.kind](g, shape, ctx)

    return surface
