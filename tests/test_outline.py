"""Tests for outline flattening, the fontTools pen adapter and text layout.

Fixtures:
- font: TTFont over the shared in-memory test font (see conftest)
"""

from __future__ import annotations

from io import BytesIO

import pytest
from fontTools.ttLib import TTFont

from rasterkit.tessellation.outline import OutlineFlattener, OutlinePen, UnsupportedCurveError
from rasterkit.tessellation.text import build_text, load_font
from rasterkit.tessellation.triangulation import triangulate
from rasterkit.utils.geometry import WindingOrder, poly_area
from rasterkit.utils.vectors import Vec2


@pytest.fixture
def font(font_bytes):
    return TTFont(BytesIO(font_bytes))


# ---------------------------------------------------------------------------
# OutlineFlattener
# ---------------------------------------------------------------------------


class TestOutlineFlattener:
    def test_lines_with_offset(self) -> None:
        flat = OutlineFlattener()
        flat.set_glyph_offset(Vec2(100, 50))
        flat.move_to(0, 0)
        flat.line_to(10, 0)
        flat.line_to(10, 10)
        flat.close()
        polys = flat.finish()
        assert len(polys) == 1
        assert polys[0].points == (Vec2(100, 50), Vec2(110, 50), Vec2(110, 60))

    def test_truncates_toward_zero(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(-1.7, 2.9)
        flat.line_to(3.99, -0.5)
        assert flat.rings()[0] == [Vec2(-1, 2), Vec2(3, 0)]

    def test_quad_samples_three_points(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        flat.quad_to(10, 0, 10, 10)
        # move vertex, then t = 0, 0.5, 1
        assert flat.rings()[0] == [Vec2(0, 0), Vec2(0, 0), Vec2(7, 2), Vec2(10, 10)]

    def test_quad_continues_from_end(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        flat.quad_to(10, 0, 10, 10)
        flat.line_to(0, 10)
        flat.close()
        assert flat.finish()[0].points == (Vec2(0, 0), Vec2(7, 2), Vec2(10, 10), Vec2(0, 10))

    def test_finish_removes_non_adjacent_duplicates(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        for x, y in [(5, 0), (5, 5), (0, 0), (0, 5)]:
            flat.line_to(x, y)
        flat.close()
        assert flat.finish()[0].points == (Vec2(0, 0), Vec2(5, 0), Vec2(5, 5), Vec2(0, 5))

    def test_close_starts_new_ring(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        flat.line_to(1, 0)
        flat.close()
        flat.move_to(5, 5)
        flat.line_to(6, 5)
        flat.close()
        assert [len(p) for p in flat.finish()] == [2, 2]

    def test_unclosed_contour_split_on_move(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        flat.line_to(1, 0)
        flat.move_to(5, 5)
        assert len(flat.finish()) == 2

    def test_empty_rings_dropped(self) -> None:
        flat = OutlineFlattener()
        flat.close()
        flat.close()
        assert flat.finish() == []

    def test_cubic_fails_fast(self) -> None:
        flat = OutlineFlattener()
        flat.move_to(0, 0)
        with pytest.raises(UnsupportedCurveError, match="Cubic"):
            flat.curve_to(1, 1, 2, 2, 3, 3)

    def test_unsupported_curve_is_not_implemented(self) -> None:
        assert issubclass(UnsupportedCurveError, NotImplementedError)


# ---------------------------------------------------------------------------
# OutlinePen
# ---------------------------------------------------------------------------


class TestOutlinePen:
    def test_forwards_segments(self) -> None:
        flat = OutlineFlattener()
        pen = OutlinePen(flat)
        pen.moveTo((0, 0))
        pen.lineTo((10, 0))
        pen.qCurveTo((10, 10), (0, 10))
        pen.closePath()
        assert flat.finish()[0].points == (Vec2(0, 0), Vec2(10, 0), Vec2(8, 7), Vec2(0, 10))

    def test_implied_on_curve_points(self) -> None:
        flat = OutlineFlattener()
        pen = OutlinePen(flat)
        pen.moveTo((0, 0))
        # Two off-curve points: split at their midpoint (10, 5)
        pen.qCurveTo((10, 0), (10, 10), (0, 10))
        pen.closePath()
        ring = flat.finish()[0].points
        assert ring[0] == Vec2(0, 0)
        assert Vec2(10, 5) in ring
        assert ring[-1] == Vec2(0, 10)

    def test_end_path_closes_ring(self) -> None:
        flat = OutlineFlattener()
        pen = OutlinePen(flat)
        pen.moveTo((0, 0))
        pen.lineTo((4, 4))
        pen.endPath()
        pen.moveTo((9, 9))
        pen.lineTo((8, 8))
        pen.endPath()
        assert len(flat.finish()) == 2

    def test_cubic_segment_raises(self) -> None:
        pen = OutlinePen(OutlineFlattener())
        pen.moveTo((0, 0))
        with pytest.raises(UnsupportedCurveError):
            pen.curveTo((1, 1), (2, 2), (3, 3))


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


class TestBuildText:
    def test_single_glyph_exact(self, font) -> None:
        polys = build_text("I", Vec2(10, 90), font, 100)
        assert len(polys) == 1
        # y flipped around the baseline, scaled by 100 / 1000
        assert polys[0].points == (Vec2(20, 90), Vec2(20, 20), Vec2(70, 20), Vec2(70, 90))

    def test_glyph_rings_are_clockwise(self, font) -> None:
        for poly in build_text("ID", (0, 100), font, 100):
            assert poly_area(poly.points)[1] is WindingOrder.CLOCKWISE

    def test_advance(self, font) -> None:
        first, second = build_text("II", (0, 100), font, 100)
        assert min(p.x for p in second.points) - min(p.x for p in first.points) == 70

    def test_quadratic_glyph_flattened(self, font) -> None:
        (ring,) = build_text("D", (0, 100), font, 100)
        pts = ring.points
        assert len(pts) == len(set(pts))
        assert Vec2(50, 65) in pts  # on-curve (500, 350)
        assert min(p.x for p in pts) == 10 and max(p.x for p in pts) == 50
        assert min(p.y for p in pts) == 30 and max(p.y for p in pts) == 100

    def test_text_triangulates(self, font) -> None:
        for poly in build_text("ID", (0, 100), font, 100):
            assert len(triangulate(poly.points)) == len(poly) - 2

    def test_missing_char_uses_notdef(self, font) -> None:
        assert len(build_text("?", (0, 100), font, 100)) == 1

    def test_empty_text(self, font) -> None:
        assert build_text("", (0, 0), font, 100) == []


class TestLoadFont:
    def test_load_from_file(self, tmp_path, font_bytes) -> None:
        path = tmp_path / "test.ttf"
        path.write_bytes(font_bytes)
        font = load_font(path)
        assert font["head"].unitsPerEm == 1000

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_font(tmp_path / "nope.ttf")

    def test_invalid_file(self, tmp_path) -> None:
        path = tmp_path / "bad.ttf"
        path.write_bytes(b"not a font at all")
        with pytest.raises(ValueError, match="Failed to load font"):
            load_font(path)
