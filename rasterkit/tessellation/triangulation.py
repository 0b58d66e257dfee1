"""Ear-clipping triangulation of simple clockwise polygons.

Algorithm:
    1. Working list of vertex indices [0, n)
    2. While more than 3 indices remain, scan the list from the start:
       - a = list[i], b = list[i - 1], c = list[i + 1] (wrapping)
       - skip a when cross(a→b, a→c) > 0 (reflex under clockwise winding)
       - a is an ear when no other remaining vertex lies in Tri(b, a, c)
       - clip the first ear found: emit (b, a, c), drop a, rescan
    3. Emit the last three indices as the final triangle

A simple clockwise polygon of n vertices yields exactly n - 2 triangles,
wound like the input. When a full scan finds no ear (degenerate,
self-intersecting, or counter-clockwise input) triangulation fails.

Complexity is O(n³) worst case; glyph contours and hand-written scene
polygons are small.
"""

from __future__ import annotations

import enum
import logging
from typing import List, Sequence, Tuple

import numpy as np

from rasterkit.utils.geometry import PointLike, Tri
from rasterkit.utils.vectors import Vec2

logger = logging.getLogger(__name__)

# Indices are stored as int32 in triangulate_indices()
MAX_VERTICES = int(np.iinfo(np.int32).max)


class TriangulationFailure(enum.Enum):
    TOO_FEW_VERTICES = "too_few_vertices"
    TOO_MANY_VERTICES = "too_many_vertices"
    NO_EAR_FOUND = "no_ear_found"


class TriangulationError(ValueError):
    """Polygon could not be triangulated.

    Attributes
    ----------
    reason : TriangulationFailure
        Machine-readable cause
    """

    def __init__(self, reason: TriangulationFailure, message: str):
        super().__init__(message)
        self.reason = reason


def _ear_indices(points: Sequence[Vec2]) -> List[Tuple[int, int, int]]:
    n = len(points)
    if n < 3:
        raise TriangulationError(
            TriangulationFailure.TOO_FEW_VERTICES,
            f"Too few vertices: got {n}, need at least 3",
        )
    if n > MAX_VERTICES:
        raise TriangulationError(
            TriangulationFailure.TOO_MANY_VERTICES,
            f"Vertex count {n} exceeds index capacity {MAX_VERTICES}",
        )

    index_list = list(range(n))
    tris: List[Tuple[int, int, int]] = []

    while len(index_list) > 3:
        count = len(index_list)
        for i in range(count):
            a_index = index_list[i]
            b_index = index_list[i - 1]
            c_index = index_list[(i + 1) % count]

            a, b, c = points[a_index], points[b_index], points[c_index]
            if (b - a).cross(c - a) > 0:
                continue  # reflex

            candidate = Tri(b, a, c)
            if any(
                candidate.contains_point(points[j])
                for j in index_list
                if j != a_index and j != b_index and j != c_index
            ):
                continue

            tris.append((b_index, a_index, c_index))
            del index_list[i]
            break
        else:
            raise TriangulationError(
                TriangulationFailure.NO_EAR_FOUND,
                f"No ear found with {count} of {n} vertices remaining "
                "(polygon is degenerate, self-intersecting or not clockwise)",
            )

    tris.append((index_list[0], index_list[1], index_list[2]))
    return tris


def triangulate(vertices: Sequence[PointLike]) -> List[Tri]:
    """Triangulate a simple clockwise polygon by ear clipping.

    Parameters
    ----------
    vertices : sequence of Vec2 or (x, y)
        Polygon ring, clockwise in y-down space, not closed explicitly.
        Never modified.

    Returns
    -------
    list of Tri
        n - 2 triangles in clipping order

    Raises
    ------
    TriangulationError
        TOO_FEW_VERTICES for n < 3, TOO_MANY_VERTICES beyond int32 index
        range, NO_EAR_FOUND when clipping gets stuck
    """
    points = [Vec2.of(v) for v in vertices]
    tris = [Tri(points[a], points[b], points[c]) for a, b, c in _ear_indices(points)]
    logger.debug(f"Triangulated {len(points)} vertices into {len(tris)} triangles")
    return tris


def triangulate_indices(vertices: Sequence[PointLike]) -> np.ndarray:
    """Like triangulate(), returning an int32 array of shape (n - 2, 3).

    Each row holds indices into ``vertices``.
    """
    points = [Vec2.of(v) for v in vertices]
    return np.asarray(_ear_indices(points), dtype=np.int32).reshape(-1, 3)
