"""Shared fixtures.

- font_bytes: in-memory TrueType font (unitsPerEm 1000) built with
  FontBuilder. Glyphs "I" (box, lines only, advance 700) and "D"
  (quadratic bowl, advance 600); .notdef is a box.
"""

from io import BytesIO

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((600, 700))
    pen.lineTo((600, 0))
    pen.closePath()
    return pen.glyph()


def _d_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((300, 700))
    pen.qCurveTo((500, 700), (500, 350))
    pen.qCurveTo((500, 0), (300, 0))
    pen.closePath()
    return pen.glyph()


def build_test_font() -> bytes:
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "I", "D"])
    fb.setupCharacterMap({ord("I"): "I", ord("D"): "D"})
    fb.setupGlyf({".notdef": _box_glyph(), "I": _box_glyph(), "D": _d_glyph()})
    # lsb equals each glyph's xMin
    fb.setupHorizontalMetrics({".notdef": (700, 100), "I": (700, 100), "D": (600, 100)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "RasterkitTest", "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, usWinAscent=800, usWinDescent=200)
    fb.setupPost()
    buf = BytesIO()
    fb.save(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def font_bytes():
    return build_test_font()
