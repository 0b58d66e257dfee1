"""Tests for scene.v1 validation, scene rendering and the render_scene CLI.

Test suites:
1. Schema validation (load_scene_config)
2. Rendering (shape kinds, ordering, lease state, fill fallback)
3. CLI (exit codes, PNG output, JSON logs, timings report)

Fixtures:
- write_scene(): dump a dict as YAML into tmp_path
- reset_logging: undo setup_logging() side effects after CLI tests
"""

import json
import logging
import sys
from pathlib import Path

import numpy as np
import pytest
import yaml
from PIL import Image

from rasterkit.scene import fill_poly, render_scene
from rasterkit.surface.pixel_surface import Surface
from rasterkit.utils import logging_config
from rasterkit.utils.color import Color
from rasterkit.utils.geometry import Poly
from rasterkit.utils.profiler import TimingCollector
from rasterkit.utils.validators import (
    CircleShape,
    PolyShape,
    RectShape,
    SceneV1,
    load_scene_config,
)

REPO_ROOT = Path(__file__).parent.parent


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def write_scene(tmp_path):
    """Write a scene dict to tmp_path/scene.v1.yaml and return the path."""
    def _write(data, name="scene.v1.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def reset_logging():
    """Remove handlers and context installed by setup_logging()."""
    yield
    logging_config.setup_logging("WARNING", to_stderr=False, capture_warnings=False)
    logging_config.pop_context()


def scene(shapes, width=8, height=8, background="black"):
    return SceneV1(**{
        "schema": "scene.v1",
        "canvas": {"width": width, "height": height, "background": background},
        "shapes": shapes,
    })


def painted(surface, background=Color.BLACK):
    """Set of (x, y) whose pixel differs from ``background``."""
    with surface.view() as view:
        ys, xs = np.nonzero(view.pixels != background.value)
    return set(zip(xs.tolist(), ys.tolist()))


# ============================================================================
# 1. SCHEMA VALIDATION
# ============================================================================

def test_load_valid_scene(write_scene):
    path = write_scene({
        "schema": "scene.v1",
        "canvas": {"width": 10, "height": 5},
        "shapes": [
            {"kind": "rect", "rect": [0, 0, 2, 2], "fill": True, "color": "#ff0000"},
            {"kind": "circle", "center": [5, 2], "radius": 2},
            {"kind": "poly", "points": [[0, 0], [4, 0], [4, 4]], "fill": True, "color": [1, 2, 3]},
        ],
    })
    cfg = load_scene_config(path)
    assert cfg.canvas.width == 10
    assert cfg.canvas.background == Color.BLACK
    assert isinstance(cfg.shapes[0], RectShape)
    assert cfg.shapes[0].color == Color.RED
    assert isinstance(cfg.shapes[1], CircleShape)
    assert cfg.shapes[1].color == Color.WHITE
    assert isinstance(cfg.shapes[2], PolyShape)
    assert cfg.shapes[2].color.unpack() == (1, 2, 3, 255)


def test_demo_scene_is_valid():
    cfg = load_scene_config(REPO_ROOT / "configs" / "scenes" / "demo.v1.yaml")
    assert len(cfg.shapes) > 0


def test_missing_scene_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scene_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize("data", [
    {"schema": "scene.v2", "canvas": {"width": 1, "height": 1}},
    {"schema": "scene.v1"},
    {"schema": "scene.v1", "canvas": {"width": -1, "height": 1}},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1}, "shapes": [{"kind": "blob"}]},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1},
     "shapes": [{"kind": "pixel", "pos": [0, 0], "color": "not-a-color"}]},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1},
     "shapes": [{"kind": "pixel", "pos": [0, 0], "colour": "red"}]},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1},
     "shapes": [{"kind": "poly", "points": [[0, 0], [1, 1]], "fill": True}]},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1},
     "shapes": [{"kind": "circle", "center": [0, 0], "radius": -2}]},
    {"schema": "scene.v1", "canvas": {"width": 1, "height": 1},
     "shapes": [{"kind": "text", "text": "x", "font": "f.ttf", "size": 0, "pos": [0, 0]}]},
])
def test_invalid_scene(write_scene, data):
    with pytest.raises(ValueError, match="validation failed"):
        load_scene_config(write_scene(data))


def test_scene_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_scene_config(path)


# ============================================================================
# 2. RENDERING
# ============================================================================

def test_background_and_filled_rect():
    surface = render_scene(scene(
        [{"kind": "rect", "rect": [2, 2, 3, 2], "fill": True, "color": "white"}],
        background="blue",
    ))
    assert painted(surface, Color.BLUE) == {(x, y) for x in range(2, 5) for y in range(2, 4)}


def test_no_lease_outstanding_after_render():
    surface = render_scene(scene([{"kind": "pixel", "pos": [0, 0]}]))
    assert not surface.is_borrowed_mut
    assert surface.reader_count == 0


def test_shapes_drawn_in_order():
    surface = render_scene(scene([
        {"kind": "rect", "rect": [0, 0, 8, 8], "fill": True, "color": "red"},
        {"kind": "pixel", "pos": [3, 3], "color": "green"},
    ]))
    with surface.view() as view:
        assert view.get_pixel((3, 3)) == Color.GREEN
        assert view.get_pixel((4, 4)) == Color.RED


def test_line_and_outline_shapes():
    surface = render_scene(scene([
        {"kind": "line", "start": [0, 7], "end": [7, 7]},
        {"kind": "rect", "rect": [0, 0, 3, 3]},
        {"kind": "tri", "points": [[5, 0], [7, 0], [5, 2]]},
    ]))
    px = painted(surface)
    assert {(x, 7) for x in range(8)} <= px
    assert (0, 0) in px and (3, 3) in px and (1, 1) not in px
    assert (5, 0) in px and (7, 0) in px


def test_filled_tri_and_circle():
    surface = render_scene(scene([
        {"kind": "tri", "points": [[0, 0], [4, 0], [0, 4]], "fill": True},
        {"kind": "circle", "center": [6, 6], "radius": 1},
    ]))
    px = painted(surface)
    assert {(x, y) for x in range(5) for y in range(5) if x + y <= 4} <= px
    assert {(6, 6), (5, 6), (7, 6), (6, 5), (6, 7)} <= px
    assert (5, 5) not in px


def test_filled_poly_via_triangulation():
    surface = render_scene(scene([
        {"kind": "poly", "points": [[1, 1], [5, 1], [5, 5], [1, 5]], "fill": True},
    ]))
    assert painted(surface) == {(x, y) for x in range(1, 6) for y in range(1, 6)}


def test_unfillable_poly_falls_back_to_outline(caplog):
    # Counter-clockwise: no ear
    ccw = [[1, 1], [1, 5], [5, 5], [5, 1]]
    with caplog.at_level(logging.WARNING, logger="rasterkit.scene.renderer"):
        surface = render_scene(scene([{"kind": "poly", "points": ccw, "fill": True}]))
    assert "no_ear_found" in caplog.text
    px = painted(surface)
    assert (1, 1) in px and (5, 5) in px
    assert (3, 3) not in px


def test_fill_poly_reports_fallback():
    surface = Surface.empty(8, 8)
    with surface.mut_view() as view:
        g = view.create_graphics()
        assert fill_poly(g, Poly(((1, 1), (5, 1), (5, 5))), Color.WHITE)
        assert not fill_poly(g, Poly(((1, 1), (5, 5))), Color.WHITE)


def test_image_shape_default_and_scaled(tmp_path):
    img = Image.new("RGBA", (2, 2))
    img.putpixel((0, 0), (255, 0, 0, 255))
    img.putpixel((1, 0), (0, 255, 0, 255))
    img.putpixel((0, 1), (0, 0, 255, 255))
    img.putpixel((1, 1), (255, 255, 255, 255))
    img.save(tmp_path / "sprite.png")

    surface = render_scene(
        scene([
            {"kind": "image", "path": "sprite.png"},
            {"kind": "image", "path": "sprite.png", "dest": [4, 4, 4, 4]},
        ]),
        base_dir=tmp_path,
    )
    with surface.view() as view:
        assert view.get_pixel((1, 0)) == Color.GREEN
        assert view.get_pixel((0, 1)) == Color.BLUE
        # 2x2 → 4x4 nearest neighbour: quadrants
        assert view.get_pixel((5, 5)) == Color.RED
        assert view.get_pixel((7, 4)) == Color.GREEN
        assert view.get_pixel((7, 7)) == Color.WHITE


def test_missing_image_propagates(tmp_path):
    with pytest.raises(FileNotFoundError):
        render_scene(scene([{"kind": "image", "path": "nope.png"}]), base_dir=tmp_path)


@pytest.mark.parametrize("fill", [True, False])
def test_text_shape(tmp_path, font_bytes, fill):
    (tmp_path / "test.ttf").write_bytes(font_bytes)
    surface = render_scene(
        scene(
            [{"kind": "text", "text": "I", "font": "test.ttf", "size": 10, "pos": [0, 10], "fill": fill}],
            width=12,
            height=12,
        ),
        base_dir=tmp_path,
    )
    px = painted(surface)
    # Box glyph lands on x 1..6, y 3..10
    assert (1, 3) in px and (6, 10) in px
    assert ((3, 6) in px) == fill
    assert (8, 6) not in px


def test_per_shape_timings():
    timings = TimingCollector()
    render_scene(scene([{"kind": "pixel", "pos": [0, 0]}, {"kind": "circle", "center": [2, 2], "radius": 1}]),
                 timings=timings)
    assert set(timings.summary()) == {"shape[0]:pixel", "shape[1]:circle"}


# ============================================================================
# 3. CLI
# ============================================================================

@pytest.fixture
def cli_main(monkeypatch):
    # main() installs a logging excepthook
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    sys.path.insert(0, str(REPO_ROOT))
    try:
        from scripts.render_scene import main
        yield main
    finally:
        sys.path.remove(str(REPO_ROOT))


def test_cli_renders_png(cli_main, write_scene, tmp_path, reset_logging):
    path = write_scene({
        "schema": "scene.v1",
        "canvas": {"width": 6, "height": 4, "background": "white"},
        "shapes": [{"kind": "pixel", "pos": [1, 1], "color": "red"}],
    })
    out = tmp_path / "out" / "scene.png"
    assert cli_main([str(path), str(out), "--log-level", "WARNING"]) == 0
    with Image.open(out) as img:
        assert img.size == (6, 4)
        assert img.convert("RGBA").getpixel((1, 1)) == (255, 0, 0, 255)


def test_cli_demo_scene(cli_main, tmp_path, reset_logging):
    out = tmp_path / "demo.png"
    scene_path = REPO_ROOT / "configs" / "scenes" / "demo.v1.yaml"
    assert cli_main([str(scene_path), str(out), "--log-level", "WARNING"]) == 0
    assert out.exists()


def test_cli_invalid_scene(cli_main, write_scene, tmp_path, reset_logging):
    path = write_scene({"schema": "scene.v9", "canvas": {"width": 1, "height": 1}})
    assert cli_main([str(path), str(tmp_path / "x.png"), "--log-level", "ERROR"]) == 1
    assert not (tmp_path / "x.png").exists()


def test_cli_missing_scene(cli_main, tmp_path, reset_logging):
    assert cli_main([str(tmp_path / "nope.yaml"), str(tmp_path / "x.png"), "--log-level", "ERROR"]) == 1


def test_cli_json_log_file(cli_main, write_scene, tmp_path, reset_logging):
    path = write_scene({"schema": "scene.v1", "canvas": {"width": 2, "height": 2}})
    log_file = tmp_path / "logs" / "render.jsonl"
    code = cli_main([
        str(path), str(tmp_path / "x.png"),
        "--log-level", "INFO", "--log-file", str(log_file), "--json-logs",
    ])
    assert code == 0
    records = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    assert records
    assert all(r["app"] == "render_scene" for r in records)
    assert any("Wrote" in r["msg"] for r in records)


def test_cli_timings_report(cli_main, write_scene, tmp_path, reset_logging):
    path = write_scene({
        "schema": "scene.v1",
        "canvas": {"width": 4, "height": 4},
        "shapes": [{"kind": "pixel", "pos": [0, 0]}, {"kind": "rect", "rect": [0, 0, 2, 2], "fill": True}],
    })
    report_path = tmp_path / "reports" / "timings.yaml"
    code = cli_main([
        str(path), str(tmp_path / "x.png"), "--log-level", "WARNING", "--timings", str(report_path),
    ])
    assert code == 0
    report = yaml.safe_load(report_path.read_text())
    assert report["size"] == [4, 4]
    assert report["output"] == str(tmp_path / "x.png")
    assert set(report["timings"]) == {"render_scene", "shape[0]:pixel", "shape[1]:rect"}
    assert report["timings"]["shape[1]:rect"]["count"] == 1


def test_cli_no_timings_report_on_failure(cli_main, tmp_path, reset_logging):
    report_path = tmp_path / "timings.yaml"
    code = cli_main([
        str(tmp_path / "nope.yaml"), str(tmp_path / "x.png"),
        "--log-level", "ERROR", "--timings", str(report_path),
    ])
    assert code == 1
    assert not report_path.exists()


def test_cli_releases_logging_and_hooks_exceptions(cli_main, write_scene, tmp_path, reset_logging):
    path = write_scene({"schema": "scene.v1", "canvas": {"width": 1, "height": 1}})
    log_file = tmp_path / "cli.log"
    before = list(logging.getLogger().handlers)
    hook_before = sys.excepthook
    assert cli_main([str(path), str(tmp_path / "x.png"), "--log-file", str(log_file)]) == 0

    assert logging.getLogger().handlers == before
    assert sys.excepthook is not hook_before
    assert "Wrote" in log_file.read_text()
