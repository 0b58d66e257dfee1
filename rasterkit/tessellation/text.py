"""Text → outline polygons using fontTools.

Glyphs are laid out left to right from ``pos`` (the baseline origin),
scaled from font units to pixels by ``size / unitsPerEm`` and flipped into
y-down space. Each glyph's outline is drawn through a TransformPen into
one shared OutlineFlattener whose glyph offset is moved before every glyph.

A TrueType outer contour (clockwise with y up) stays clockwise after the
flip, so filled glyphs can go straight to triangulate().
"""

import logging
from pathlib import Path
from typing import List, Union

from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont, TTLibError

from rasterkit.utils.geometry import PointLike, Poly
from rasterkit.utils.vectors import Vec2

from .outline import OutlineFlattener, OutlinePen

logger = logging.getLogger(__name__)


def load_font(path: Union[str, Path]) -> TTFont:
    """Open a TrueType/OpenType font file.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    ValueError
        If fontTools cannot parse the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Font file not found: {path}")

    try:
        return TTFont(path)
    except TTLibError as e:
        raise ValueError(f"Failed to load font {path}: {e}") from e


def build_text(text: str, pos: PointLike, font: TTFont, size: float) -> List[Poly]:
    """Flatten the outlines of ``text`` into pixel-space rings.

    Parameters
    ----------
    text : str
        Characters to lay out. Characters missing from the cmap use .notdef.
    pos : Vec2
        Baseline origin of the first glyph in pixels
    font : TTFont
        Font with quadratic outlines (cubic outlines raise
        UnsupportedCurveError)
    size : float
        Pixel size of one em

    Returns
    -------
    list of Poly
        One ring per contour, in glyph order
    """
    pos = Vec2.of(pos)
    scale = size / font["head"].unitsPerEm
    cmap = font.getBestCmap() or {}
    glyph_set = font.getGlyphSet()

    flattener = OutlineFlattener()
    pen = TransformPen(OutlinePen(flattener, glyph_set), (scale, 0, 0, -scale, 0, 0))

    pen_x = float(pos.x)
    for ch in text:
        name = cmap.get(ord(ch), ".notdef")
        if name not in glyph_set:
            logger.debug(f"No glyph for {ch!r}, skipping")
            continue
        glyph = glyph_set[name]
        flattener.set_glyph_offset(Vec2(int(pen_x), pos.y))
        glyph.draw(pen)
        pen_x += glyph.width * scale

    polys = flattener.finish()
    logger.debug(f"Built {len(polys)} rings for {len(text)} characters at size {size}")
    return polys
