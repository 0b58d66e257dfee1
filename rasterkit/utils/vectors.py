"""2D vector math for pixel-space geometry.

Provides:
    - Vec2: immutable (x, y) pair over int or float
    - Named arithmetic (add, sub, scale, dot, cross) with operator sugar
    - Conversions: truncation to int, tuples

Integer vectors stay integer: dot, cross and len_sq of two int vectors are
ints. Floats appear only where a caller explicitly converts (as_float) or
scales by a float.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True, slots=True)
class Vec2:
    """Immutable 2D vector.

    Parameters
    ----------
    x, y : int or float
        Components. Pixel positions use ints.
    """

    x: Number
    y: Number

    @classmethod
    def of(cls, value: Union["Vec2", Iterable[Number]]) -> "Vec2":
        """Coerce a Vec2 or a 2-sequence into a Vec2."""
        if isinstance(value, Vec2):
            return value
        x, y = value
        return cls(x, y)

    @classmethod
    def zero(cls) -> "Vec2":
        return cls(0, 0)

    def add(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def sub(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def scale(self, factor: Number) -> "Vec2":
        return Vec2(self.x * factor, self.y * factor)

    def dot(self, other: "Vec2") -> Number:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vec2") -> Number:
        """2D cross product (z of the 3D cross), positive when ``other`` is
        clockwise from ``self`` in y-down space."""
        return self.x * other.y - self.y * other.x

    def len_sq(self) -> Number:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.len_sq())

    def abs(self) -> "Vec2":
        return Vec2(abs(self.x), abs(self.y))

    def map(self, fn: Callable[[Number], Number]) -> "Vec2":
        return Vec2(fn(self.x), fn(self.y))

    def as_int(self) -> "Vec2":
        """Truncate both components toward zero."""
        return Vec2(int(self.x), int(self.y))

    def as_float(self) -> "Vec2":
        return Vec2(float(self.x), float(self.y))

    def as_tuple(self) -> Tuple[Number, Number]:
        return (self.x, self.y)

    def __add__(self, other: "Vec2") -> "Vec2":
        return self.add(other)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return self.sub(other)

    def __mul__(self, factor: Number) -> "Vec2":
        return self.scale(factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y
