"""YAML schema validation and config loading.

Provides validation for scene files using pydantic:
    - Scene schema (scene.v1.yaml): canvas size/background and an ordered
      list of shapes, discriminated by ``kind``

Units:
    - Geometry: integer pixels, top-left origin, +Y down
    - Color: name, "#rrggbb[aa]" or [r, g, b(, a)] channel list (0-255)

Relative file paths (images, fonts) are resolved against the scene file's
directory by the renderer, not here.

Usage:
    from rasterkit.utils import validators

    scene = validators.load_scene_config("configs/scenes/demo.v1.yaml")
    for shape in scene.shapes:
        print(shape.kind)
"""

from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .color import Color, parse_color

Point = Tuple[int, int]
RectTuple = Tuple[int, int, int, int]


def _to_color(v: Any) -> Color:
    try:
        return parse_color(v)
    except TypeError as e:
        # pydantic only wraps ValueError/AssertionError into ValidationError
        raise ValueError(str(e)) from e


# ============================================================================
# SCENE SCHEMA V1
# ============================================================================

class CanvasSpec(BaseModel):
    """Output surface extent and clear color."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    width: int = Field(..., ge=0, le=16384, description="Width in pixels")
    height: int = Field(..., ge=0, le=16384, description="Height in pixels")
    background: Color = Field(Color.BLACK, description="Clear color")

    @field_validator('background', mode='before')
    @classmethod
    def parse_background(cls, v: Any) -> Color:
        return _to_color(v)


class ShapeBase(BaseModel):
    """Fields shared by every shape."""
    model_config = ConfigDict(arbitrary_types_allowed=True, extra='forbid')

    color: Color = Field(Color.WHITE, description="Draw color")

    @field_validator('color', mode='before')
    @classmethod
    def parse_color_field(cls, v: Any) -> Color:
        return _to_color(v)


class PixelShape(ShapeBase):
    kind: Literal["pixel"]
    pos: Point


class LineShape(ShapeBase):
    kind: Literal["line"]
    start: Point
    end: Point


class RectShape(ShapeBase):
    """Outline on x, x+w, y, y+h or fill of [x, x+w) × [y, y+h)."""
    kind: Literal["rect"]
    rect: RectTuple = Field(..., description="(x, y, w, h)")
    fill: bool = False


class CircleShape(ShapeBase):
    """Filled disc (squared distance <= radius²)."""
    kind: Literal["circle"]
    center: Point
    radius: int = Field(..., ge=0)


class PolyShape(ShapeBase):
    """Clockwise ring; filled polygons go through ear clipping."""
    kind: Literal["poly"]
    points: List[Point] = Field(..., min_length=1)
    fill: bool = False

    @model_validator(mode='after')
    def validate_fillable(self):
        if self.fill and len(self.points) < 3:
            raise ValueError(f"Filled poly needs at least 3 points, got {len(self.points)}")
        return self


class TriShape(ShapeBase):
    kind: Literal["tri"]
    points: Tuple[Point, Point, Point]
    fill: bool = False


class ImageShape(ShapeBase):
    """Image file blitted into ``dest`` (nearest neighbour when scaled)."""
    kind: Literal["image"]
    path: str = Field(..., description="Image file, relative to the scene file")
    dest: Optional[RectTuple] = Field(None, description="(x, y, w, h); default: image size at origin")


class TextShape(ShapeBase):
    """Glyph outlines of a TrueType font, drawn as outlines or filled."""
    kind: Literal["text"]
    text: str
    font: str = Field(..., description="Font file, relative to the scene file")
    size: float = Field(..., gt=0.0, le=4096.0, description="Em size in pixels")
    pos: Point = Field(..., description="Baseline origin")
    fill: bool = False


Shape = Annotated[
    Union[PixelShape, LineShape, RectShape, CircleShape, PolyShape, TriShape, ImageShape, TextShape],
    Field(discriminator="kind"),
]


class SceneV1(BaseModel):
    """Complete scene: canvas plus shapes drawn in list order."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("scene.v1", alias="schema", description="Schema version")
    canvas: CanvasSpec
    shapes: List[Shape] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "scene.v1":
            raise ValueError(f"Expected schema 'scene.v1', got '{v}'")
        return v


# ============================================================================
# LOADERS
# ============================================================================

def load_scene_config(path: Union[str, Path]) -> SceneV1:
    """Load and validate a scene from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to scene.v1.yaml file

    Returns
    -------
    SceneV1
        Validated scene

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (pydantic error chained)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scene config not found: {path}")

    data = fs.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"Scene config at {path} must be a mapping, got {type(data).__name__}")
    try:
        return SceneV1(**data)
    except Exception as e:
        raise ValueError(f"Scene config validation failed at {path}: {e}") from e
