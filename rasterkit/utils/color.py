"""Packed RGBA8 colors.

Provides:
    - Color: 4 unsigned 8-bit channels packed into one 32-bit word
    - Named constants (WHITE, BLACK, RED, GREEN, BLUE, YELLOW, CYAN, MAGENTA)
    - parse_color(): config-friendly parsing (names, hex, channel lists)

Byte order:
    value = r | g << 8 | b << 16 | a << 24

    Stored as a little-endian uint32 this lays the bytes out as r, g, b, a,
    which is the pixel layout of every Surface. A pixel write is therefore a
    single 32-bit store of ``Color.value``.

Invariants:
    - pack/unpack are exact inverses for all 2^32 words
    - Alpha is carried, never interpreted (no blending anywhere)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Mapping, Sequence, Tuple, Union

import numpy as np

# Pixel word dtype: explicit little-endian so byte order matches RGBA8 on
# every host.
PIXEL_DTYPE = np.dtype("<u4")

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def _check_channel(name: str, v: int) -> int:
    if not isinstance(v, (int, np.integer)) or isinstance(v, bool):
        raise TypeError(f"Channel {name} must be an int, got {type(v).__name__}")
    if not 0 <= v <= 255:
        raise ValueError(f"Channel {name}={v} out of range [0, 255]")
    return int(v)


@dataclass(frozen=True, slots=True)
class Color:
    """RGBA8 color packed into a 32-bit word.

    Parameters
    ----------
    value : int
        Packed word in [0, 2^32). Use the factories to build from channels.
    """

    value: int

    # Named constants, bound below from NAMED_COLORS
    WHITE: ClassVar["Color"]
    BLACK: ClassVar["Color"]
    RED: ClassVar["Color"]
    GREEN: ClassVar["Color"]
    BLUE: ClassVar["Color"]
    YELLOW: ClassVar["Color"]
    CYAN: ClassVar["Color"]
    MAGENTA: ClassVar["Color"]

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFFFFFF:
            raise ValueError(f"Color word {self.value:#x} out of 32-bit range")

    @staticmethod
    def pack(r: int, g: int, b: int, a: int = 255) -> int:
        """Pack channels into a word (no Color allocation)."""
        r = _check_channel("r", r)
        g = _check_channel("g", g)
        b = _check_channel("b", b)
        a = _check_channel("a", a)
        return r | (g << 8) | (b << 16) | (a << 24)

    @classmethod
    def rgba(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        return cls(cls.pack(r, g, b, a))

    @classmethod
    def gray(cls, shade: int, a: int = 255) -> "Color":
        return cls(cls.pack(shade, shade, shade, a))

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "Color":
        """Read a color from 4 bytes laid out r, g, b, a."""
        if len(data) != 4:
            raise ValueError(f"Color needs exactly 4 bytes, got {len(data)}")
        return cls(int.from_bytes(bytes(data), "little"))

    def unpack(self) -> Tuple[int, int, int, int]:
        """Return (r, g, b, a)."""
        v = self.value
        return (v & 0xFF, (v >> 8) & 0xFF, (v >> 16) & 0xFF, (v >> 24) & 0xFF)

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(4, "little")

    @property
    def r(self) -> int:
        return self.value & 0xFF

    @property
    def g(self) -> int:
        return (self.value >> 8) & 0xFF

    @property
    def b(self) -> int:
        return (self.value >> 16) & 0xFF

    @property
    def a(self) -> int:
        return (self.value >> 24) & 0xFF

    def with_alpha(self, a: int) -> "Color":
        r, g, b, _ = self.unpack()
        return Color.rgba(r, g, b, a)

    def __repr__(self) -> str:
        r, g, b, a = self.unpack()
        return f"Color(r={r}, g={g}, b={b}, a={a})"


_NAMED = {
    "white": (255, 255, 255, 255),
    "black": (0, 0, 0, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "yellow": (255, 255, 0, 255),
    "cyan": (0, 255, 255, 255),
    "magenta": (255, 0, 255, 255),
}

NAMED_COLORS: Mapping[str, Color] = MappingProxyType(
    {name: Color.rgba(*rgba) for name, rgba in _NAMED.items()}
)

for _name, _color in NAMED_COLORS.items():
    setattr(Color, _name.upper(), _color)
del _name, _color


def parse_color(spec: Union[Color, str, Sequence[int]]) -> Color:
    """Parse a color from config values.

    Parameters
    ----------
    spec : Color, str or sequence of int
        - Color: returned as-is
        - "red", "Cyan", ...: entry of NAMED_COLORS (case-insensitive)
        - "#rrggbb" or "#rrggbbaa": hex
        - [r, g, b] or [r, g, b, a]: channels in [0, 255]

    Returns
    -------
    Color

    Raises
    ------
    ValueError
        Unknown name, malformed hex, wrong channel count or range
    """
    if isinstance(spec, Color):
        return spec

    if isinstance(spec, str):
        name = spec.strip().lower()
        if name in NAMED_COLORS:
            return NAMED_COLORS[name]
        m = _HEX_RE.match(spec.strip())
        if not m:
            raise ValueError(
                f"Unknown color {spec!r}; use one of {sorted(NAMED_COLORS)} or #rrggbb[aa]"
            )
        digits = m.group(1)
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return Color.rgba(*channels)

    channels = list(spec)
    if len(channels) not in (3, 4):
        raise ValueError(f"Color needs 3 or 4 channels, got {len(channels)}")
    return Color.rgba(*channels)
