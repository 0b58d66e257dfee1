"""Atomic filesystem operations, YAML handling and image I/O.

Provides:
    - Atomic writes: tmp file → fsync → rename (prevents partial reads)
    - YAML load/save (PyYAML safe_load / safe_dump)
    - Image decode → Surface and Surface → PNG via Pillow

Image decoding is delegated entirely to Pillow; the engine only ever sees
top-left-origin RGBA8 row-major bytes plus (width, height).

All paths use pathlib.Path.

Usage:
    from rasterkit.utils import fs
    scene_dict = fs.load_yaml("configs/scenes/demo.v1.yaml")
    sprite = fs.load_image_surface("assets/sprite.png")
    fs.atomic_save_surface(surface, "outputs/frame.png")
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import yaml
from PIL import Image

if TYPE_CHECKING:
    from rasterkit.surface.pixel_surface import Surface


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory (and parents) if needed, return it as Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Raises
    ------
    RuntimeError
        If writing or renaming fails (tmp file is removed)
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically (key order preserved)."""
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_image_surface(path: Union[str, Path]) -> "Surface":
    """Decode an image file into an owned RGBA8 Surface.

    Parameters
    ----------
    path : Union[str, Path]
        Any format Pillow can decode

    Returns
    -------
    Surface
        Surface wrapping the decoded bytes (no extra copy)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    ValueError
        If Pillow cannot decode the file
    """
    from rasterkit.surface.pixel_surface import Surface

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    try:
        with Image.open(path) as img:
            return Surface.from_image(img)
    except Image.UnidentifiedImageError as e:
        raise ValueError(f"Failed to decode image {path}: {e}") from e


def atomic_save_surface(
    surface: "Surface",
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Encode a Surface atomically (format from the file extension).

    Takes a read lease for the duration of the encode, so it fails with
    SurfaceBusyError while a drawing session holds the surface.
    """
    path = Path(path)
    ensure_dir(path.parent)
    pil_kwargs = pil_kwargs or {}

    img = surface.to_image()
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        img.save(tmp_path, **pil_kwargs)
        tmp_path.replace(path)
    except (OSError, ValueError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to save image {path} atomically: {e}") from e
