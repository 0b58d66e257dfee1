"""Owned RGBA8 pixel surfaces and the leases that grant access to them.

A Surface owns a row-major, top-left-origin byte buffer of exactly
``width * height * 4`` bytes. Nothing reads or writes those bytes except
through a lease:

    - SurfaceView     shared, read-only      (any number at once)
    - SurfaceMutView  exclusive, read-write  (only when no other lease exists)

Acquiring a lease that would alias a conflicting one raises
SurfaceBusyError; using a lease after release() raises LeaseReleasedError.
Both lease types are context managers, and Surface.view() / Surface.mut_view()
wrap acquisition and release in a single ``with`` block.

Pixel access:
    get_pixel(pos) / set_pixel(pos, color)
        Bounds-checked. Out-of-range positions return None / False and
        never touch memory.
    index_of(pos) → PixelIndex | None
        The only way to obtain a PixelIndex. Holding one is proof that the
        position was in bounds for that surface.
    get_pixel_unchecked(index) / set_pixel_unchecked(index, color)
        Skip the bounds check; accept only a PixelIndex minted for the same
        surface.

Pixels are stored as little-endian uint32 words (see utils.color) so one
write stores all four channels. There is no blending: a write replaces the
destination, alpha included.

Usage:
    surface = Surface.empty(320, 240)
    with surface.mut_view() as view:
        g = view.create_graphics()
        g.fill(Color.BLACK)
    with surface.view() as view:
        assert view.get_pixel(Vec2(0, 0)) == Color.BLACK
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional, Union

import numpy as np
from PIL import Image

from rasterkit.utils.color import PIXEL_DTYPE, Color
from rasterkit.utils.geometry import PointLike, Rect
from rasterkit.utils.vectors import Vec2

if TYPE_CHECKING:
    from rasterkit.graphics.graphics import Graphics

logger = logging.getLogger(__name__)

BufferLike = Union[bytearray, memoryview, np.ndarray]


# ============================================================================
# ERRORS
# ============================================================================

class SurfaceAccessError(RuntimeError):
    """Base class for lease discipline violations."""

    pass


class SurfaceBusyError(SurfaceAccessError):
    """A lease was requested that would alias an outstanding one."""

    pass


class LeaseReleasedError(SurfaceAccessError):
    """A lease was used after release()."""

    pass


# ============================================================================
# PIXEL INDEX
# ============================================================================

class PixelIndex:
    """Bounds-checked pixel position on one specific surface.

    Created only by ``index_of()`` on a lease; the constructor is closed.

    Attributes
    ----------
    x, y : int
        Pixel position
    word : int
        Word offset ``x + y * width``
    """

    __slots__ = ("_surface", "x", "y", "word")

    def __init__(self, *args, **kwargs):
        raise TypeError("PixelIndex is only created by a lease's index_of()")

    @classmethod
    def _mint(cls, surface: "Surface", x: int, y: int) -> "PixelIndex":
        index = object.__new__(cls)
        index._surface = surface
        index.x = x
        index.y = y
        index.word = x + y * surface.width
        return index

    @property
    def pos(self) -> Vec2:
        return Vec2(self.x, self.y)

    @property
    def byte_offset(self) -> int:
        return self.word * 4

    def __repr__(self) -> str:
        return f"PixelIndex(x={self.x}, y={self.y}, byte_offset={self.byte_offset})"


# ============================================================================
# SURFACE
# ============================================================================

class Surface:
    """Owned RGBA8 pixel buffer.

    Parameters
    ----------
    width, height : int
        Extent in pixels (>= 0)
    buffer : bytearray, writable memoryview or uint8 ndarray, optional
        Existing RGBA8 row-major bytes to wrap without copying. Must be
        exactly ``width * height * 4`` bytes. None allocates zeroed bytes.

    Raises
    ------
    ValueError
        Negative extent, wrong buffer length, or read-only buffer
    """

    def __init__(self, width: int, height: int, buffer: Optional[BufferLike] = None):
        if width < 0 or height < 0:
            raise ValueError(f"Surface extent must be non-negative, got {width}×{height}")

        expected = width * height * 4
        if buffer is None:
            buffer = bytearray(expected)

        data = np.frombuffer(buffer, dtype=np.uint8)
        if data.size != expected:
            raise ValueError(
                f"Buffer has {data.size} bytes, expected {expected} for {width}×{height} RGBA8"
            )
        if not data.flags.writeable:
            raise ValueError("Buffer is read-only; pass a bytearray or writable array")

        self._width = int(width)
        self._height = int(height)
        self._buffer = buffer
        self._bytes = data
        self._words = data.view(PIXEL_DTYPE).reshape(self._height, self._width)

        self._lock = threading.Lock()
        self._readers = 0
        self._writer: Optional[SurfaceMutView] = None

    @classmethod
    def empty(cls, width: int, height: int) -> "Surface":
        """Allocate a zero-initialized surface (all pixels transparent black)."""
        return cls(width, height)

    @classmethod
    def from_bytes(cls, width: int, height: int, buffer: BufferLike) -> "Surface":
        """Wrap existing RGBA8 bytes (e.g. decoder output) without copying."""
        return cls(width, height, buffer)

    @classmethod
    def from_image(cls, img: Image.Image) -> "Surface":
        """Build a surface from a Pillow image (converted to RGBA)."""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        width, height = img.size
        return cls(width, height, bytearray(img.tobytes()))

    # ------------------------------------------------------------------
    # Extent
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Vec2:
        return Vec2(self._width, self._height)

    @property
    def nbytes(self) -> int:
        return self._bytes.size

    def rect_at(self, pos: PointLike) -> Rect:
        """Rect at ``pos`` with this surface's extent."""
        return Rect.from_pos_size(pos, self.size)

    # ------------------------------------------------------------------
    # Leases
    # ------------------------------------------------------------------

    @property
    def is_borrowed_mut(self) -> bool:
        return self._writer is not None

    @property
    def reader_count(self) -> int:
        return self._readers

    def acquire_view(self) -> "SurfaceView":
        """Take a shared read lease; caller must release() it.

        Raises
        ------
        SurfaceBusyError
            If a write lease is outstanding
        """
        with self._lock:
            if self._writer is not None:
                raise SurfaceBusyError("Surface is borrowed for writing; release it before reading")
            self._readers += 1
        return SurfaceView(self)

    def acquire_mut_view(self) -> "SurfaceMutView":
        """Take the exclusive write lease; caller must release() it.

        Raises
        ------
        SurfaceBusyError
            If any lease (read or write) is outstanding
        """
        with self._lock:
            if self._writer is not None:
                raise SurfaceBusyError("Surface is already borrowed for writing")
            if self._readers:
                raise SurfaceBusyError(
                    f"Surface has {self._readers} outstanding read lease(s)"
                )
            lease = SurfaceMutView(self)
            self._writer = lease
        return lease

    @contextmanager
    def view(self) -> Iterator["SurfaceView"]:
        lease = self.acquire_view()
        try:
            yield lease
        finally:
            lease.release()

    @contextmanager
    def mut_view(self) -> Iterator["SurfaceMutView"]:
        lease = self.acquire_mut_view()
        try:
            yield lease
        finally:
            lease.release()

    def _release(self, lease: "_Lease") -> None:
        with self._lock:
            if lease._released:
                return
            lease._released = True
            if lease is self._writer:
                self._writer = None
            else:
                self._readers -= 1

    def _downgrade(self, lease: "SurfaceMutView") -> "SurfaceView":
        with self._lock:
            if lease._released or lease is not self._writer:
                raise LeaseReleasedError("Only the active write lease can be downgraded")
            lease._released = True
            self._writer = None
            self._readers += 1
        return SurfaceView(self)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_image(self) -> Image.Image:
        """Copy pixels into a Pillow RGBA image (takes a read lease)."""
        with self.view() as v:
            return Image.frombytes("RGBA", (self._width, self._height), v.tobytes())

    def tobytes(self) -> bytes:
        """Copy of the raw bytes (takes a read lease)."""
        with self.view() as v:
            return v.tobytes()

    def __repr__(self) -> str:
        return f"Surface({self._width}×{self._height}, readers={self._readers}, writer={self.is_borrowed_mut})"


# ============================================================================
# LEASES
# ============================================================================

class _Lease:
    """Read accessors shared by both lease kinds."""

    def __init__(self, surface: Surface):
        self._surface = surface
        self._released = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def release(self) -> None:
        """Return the lease to the surface (idempotent, thread-safe)."""
        self._surface._release(self)

    @property
    def released(self) -> bool:
        return self._released

    def _check(self) -> None:
        if self._released:
            raise LeaseReleasedError("Lease used after release()")

    @property
    def surface(self) -> Surface:
        return self._surface

    @property
    def size(self) -> Vec2:
        return self._surface.size

    @property
    def width(self) -> int:
        return self._surface.width

    @property
    def height(self) -> int:
        return self._surface.height

    def rect_at(self, pos: PointLike) -> Rect:
        return self._surface.rect_at(pos)

    def in_bounds(self, pos: PointLike) -> bool:
        x, y = pos
        return 0 <= x < self._surface.width and 0 <= y < self._surface.height

    def index_of(self, pos: PointLike) -> Optional[PixelIndex]:
        """Bounds-check ``pos`` and return its PixelIndex, or None."""
        self._check()
        x, y = pos
        if not (0 <= x < self._surface.width and 0 <= y < self._surface.height):
            return None
        return PixelIndex._mint(self._surface, int(x), int(y))

    def _verify(self, index: PixelIndex) -> None:
        self._check()
        if not isinstance(index, PixelIndex) or index._surface is not self._surface:
            raise ValueError("PixelIndex was not minted for this surface")

    def get_pixel(self, pos: PointLike) -> Optional[Color]:
        """Color at ``pos``, or None when out of bounds."""
        index = self.index_of(pos)
        if index is None:
            return None
        return Color(int(self._surface._words[index.y, index.x]))

    def get_pixel_unchecked(self, index: PixelIndex) -> Color:
        """Color at a pre-validated index (no bounds check)."""
        self._verify(index)
        return Color(int(self._surface._words[index.y, index.x]))

    def tobytes(self) -> bytes:
        self._check()
        return self._surface._bytes.tobytes()


def _read_only(arr: np.ndarray) -> np.ndarray:
    # as_strided views cannot have WRITEABLE switched back on
    return np.lib.stride_tricks.as_strided(arr, writeable=False)


class SurfaceView(_Lease):
    """Shared read-only lease.

    ``bytes`` and ``pixels`` are read-only numpy views, valid only until
    release().
    """

    @property
    def bytes(self) -> np.ndarray:
        self._check()
        return _read_only(self._surface._bytes)

    @property
    def pixels(self) -> np.ndarray:
        """(height, width) uint32 words, read-only."""
        self._check()
        return _read_only(self._surface._words)


class SurfaceMutView(_Lease):
    """Exclusive read-write lease.

    ``bytes`` and ``pixels`` are writable numpy views, valid only until
    release().
    """

    @property
    def bytes(self) -> np.ndarray:
        self._check()
        return self._surface._bytes

    @property
    def pixels(self) -> np.ndarray:
        """(height, width) uint32 words, writable."""
        self._check()
        return self._surface._words

    def set_pixel(self, pos: PointLike, color: Color) -> bool:
        """Write ``color`` at ``pos``.

        Returns
        -------
        bool
            False (nothing written) when ``pos`` is out of bounds
        """
        index = self.index_of(pos)
        if index is None:
            return False
        self._surface._words[index.y, index.x] = color.value
        return True

    def set_pixel_unchecked(self, index: PixelIndex, color: Color) -> None:
        """Write at a pre-validated index (no bounds check)."""
        self._verify(index)
        self._surface._words[index.y, index.x] = color.value

    def downgrade(self) -> SurfaceView:
        """Trade this write lease for a read lease without a gap between them."""
        self._check()
        return self._surface._downgrade(self)

    def create_graphics(self, size: Optional[PointLike] = None) -> "Graphics":
        """Drawing session over this lease.

        Parameters
        ----------
        size : Vec2, optional
            Logical drawable size; defaults to the surface extent and may
            not exceed it.
        """
        from rasterkit.graphics.graphics import Graphics

        self._check()
        return Graphics(self, size)
