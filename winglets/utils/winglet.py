"""Winglet glyph synthesis.

A winglet is a piece of the category contour centred on the vertex nearest
to a data point and translated onto that point. Its half-lengths are walked
along the contour edge by edge; the last edge is cut at the exact remaining
distance. Glyphs of one category are drawn as a single polyline: each glyph
repeats its first and last vertex, and those connector vertices get width 0
so the joins between glyphs are invisible.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from winglets.utils.contour import Contour

# Below this half-length no traversal happens.
MIN_ARC_LENGTH = 0.001

# Remaining budget treated as used up; keeps float residue from adding a step.
_EPS = 1e-12


@dataclass
class Winglet:
    """Glyph vertices including the head and tail connector duplicates."""

    vertices: NDArray[np.float64]
    anchor_index: int
    left_count: int
    right_count: int

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def core(self) -> NDArray[np.float64]:
        """Vertices without the connector duplicates."""
        return self.vertices[1:-1]

    def flat(self) -> NDArray[np.float64]:
        """x0, y0, x1, y1, ... as handed to line consumers."""
        return self.vertices.ravel()

    def widths(self, line_width: float) -> NDArray[np.float64]:
        w = np.full(len(self.vertices), float(line_width))
        w[0] = 0.0
        w[-1] = 0.0
        return w


def arc_length(value: float, a: float, b: float, n: float) -> float:
    """Glyph length for a point with silhouette ``value``: a + value**n * b."""
    return a + (value ** n) * b


def _walk(
    contour: NDArray[np.float64],
    start: int,
    budget: float,
    step: int,
) -> list[NDArray[np.float64]]:
    """Vertices reached walking ``budget`` along the ring from ``start`` in direction ``step``."""
    size = len(contour)
    out: list[NDArray[np.float64]] = []
    remaining = budget
    prev_point = contour[start]
    prev_index = start
    while remaining > _EPS:
        index = (prev_index + step) % size
        point = contour[index]
        d = math.hypot(point[0] - prev_point[0], point[1] - prev_point[1])
        if remaining - d >= 0:
            remaining -= d
            prev_point = point
            prev_index = index
            out.append(point.copy())
        else:
            direction = (point - prev_point) / d
            out.append(prev_point + direction * remaining)
            remaining = 0.0
    return out


def synthesize_winglet(
    contour: Contour,
    anchor_index: int,
    point: Sequence[float],
    length: float,
    min_length: float = MIN_ARC_LENGTH,
) -> Winglet:
    """Build the glyph for ``point`` anchored on ``contour[anchor_index]``."""
    ring = contour.vertices
    anchor = ring[anchor_index]
    offset = np.asarray(point[:2], dtype=np.float64) - anchor

    results: deque[NDArray[np.float64]] = deque()
    results.append(anchor + offset)

    half = length / 2.0
    left: list[NDArray[np.float64]] = []
    right: list[NDArray[np.float64]] = []
    # a ring of zero perimeter would never consume the budget
    if half > min_length and contour.perimeter > 0:
        left = _walk(ring, anchor_index, half, -1)
        right = _walk(ring, anchor_index, half, +1)
    for v in left:
        results.appendleft(v + offset)
    for v in right:
        results.append(v + offset)

    results.appendleft(results[0].copy())
    results.append(results[-1].copy())

    return Winglet(
        vertices=np.array(results),
        anchor_index=anchor_index,
        left_count=len(left),
        right_count=len(right),
    )


def connector_widths(winglets: Sequence[Winglet], line_width: float) -> NDArray[np.float64]:
    """Width sequence for the concatenated polyline: 0, w, ..., w, 0 per glyph."""
    if not winglets:
        return np.zeros(0)
    return np.concatenate([w.widths(line_width) for w in winglets])


def concatenate_winglets(winglets: Sequence[Winglet]) -> NDArray[np.float64]:
    """All glyph vertices of a category as one Nx2 polyline."""
    if not winglets:
        return np.empty((0, 2))
    return np.vstack([w.vertices for w in winglets])
