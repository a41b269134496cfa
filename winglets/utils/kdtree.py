"""Static k-d tree over 2D contour vertices with nearest-neighbour search.

Layout follows the packed "kd-sorted arrays" scheme: coordinates are
reordered in place so that every range ``[left, right]`` is split at its
middle element along alternating axes, and ranges of at most ``node_size``
items are scanned linearly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from winglets.utils.contour import Contour


@dataclass(frozen=True)
class NearestVertex:
    contour_id: int
    index: int
    position: tuple[float, float]
    distance: float


class KDTree:
    """Immutable after construction; ``nearest`` keeps all traversal state local."""

    def __init__(
        self,
        points: NDArray[np.float64],
        contour_ids: NDArray[np.int64] | None = None,
        vertex_ids: NDArray[np.int64] | None = None,
        node_size: int = 64,
        contours: Sequence[Contour] = (),
    ) -> None:
        coords = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        n = len(coords)
        if n == 0:
            raise ValueError("Cannot index an empty vertex set")
        self.node_size = max(1, int(node_size))
        self.contours = tuple(contours)
        self._contour_ids = np.zeros(n, dtype=np.int64) if contour_ids is None else np.asarray(contour_ids, dtype=np.int64)
        self._vertex_ids = np.arange(n, dtype=np.int64) if vertex_ids is None else np.asarray(vertex_ids, dtype=np.int64)
        if len(self._contour_ids) != n or len(self._vertex_ids) != n:
            raise ValueError("Tag arrays must match the number of points")

        self.ids = np.arange(n, dtype=np.int64)
        self.coords = coords.copy()
        self._sort()
        self.coords.setflags(write=False)
        self.ids.setflags(write=False)

    @classmethod
    def from_contours(cls, contours: Sequence[Contour], node_size: int = 64) -> "KDTree":
        """Flatten every contour's vertices, tagging each with (contour, index)."""
        if not contours:
            raise ValueError("Need at least one contour to index")
        points = np.vstack([c.vertices for c in contours])
        contour_ids = np.concatenate([np.full(len(c), k, dtype=np.int64) for k, c in enumerate(contours)])
        vertex_ids = np.concatenate([np.arange(len(c), dtype=np.int64) for c in contours])
        return cls(points, contour_ids, vertex_ids, node_size=node_size, contours=contours)

    def __len__(self) -> int:
        return len(self.ids)

    def _sort(self) -> None:
        stack = [(0, len(self.ids) - 1, 0)]
        while stack:
            left, right, axis = stack.pop()
            if right - left <= self.node_size:
                continue
            m = (left + right) >> 1
            order = np.argpartition(self.coords[left:right + 1, axis], m - left)
            self.coords[left:right + 1] = self.coords[left:right + 1][order]
            self.ids[left:right + 1] = self.ids[left:right + 1][order]
            stack.append((left, m - 1, 1 - axis))
            stack.append((m + 1, right, 1 - axis))

    def nearest(self, query: Sequence[float]) -> NearestVertex:
        """Branch-and-bound nearest vertex. Ties keep the first vertex found."""
        qx, qy = float(query[0]), float(query[1])
        coords = self.coords
        best = -1
        best_sq = math.inf
        best_dist = math.inf

        stack = [(0, len(self.ids) - 1, 0)]
        while stack:
            left, right, axis = stack.pop()

            if right - left <= self.node_size:
                block = coords[left:right + 1]
                sq = (block[:, 0] - qx) ** 2 + (block[:, 1] - qy) ** 2
                k = int(np.argmin(sq))
                if sq[k] < best_sq:
                    best = left + k
                    best_sq = float(sq[k])
                    best_dist = math.sqrt(best_sq)
                continue

            m = (left + right) >> 1
            x, y = coords[m]
            sq_m = (x - qx) ** 2 + (y - qy) ** 2
            if sq_m < best_sq:
                best = m
                best_sq = float(sq_m)
                best_dist = math.sqrt(best_sq)

            split = x if axis == 0 else y
            q = qx if axis == 0 else qy
            if q - best_dist <= split:
                stack.append((left, m - 1, 1 - axis))
            if q + best_dist >= split:
                stack.append((m + 1, right, 1 - axis))

        original = int(self.ids[best])
        return NearestVertex(
            contour_id=int(self._contour_ids[original]),
            index=int(self._vertex_ids[original]),
            position=(float(coords[best, 0]), float(coords[best, 1])),
            distance=best_dist,
        )

    def nearest_many(self, queries: NDArray[np.float64]) -> list[NearestVertex]:
        return [self.nearest(q) for q in np.asarray(queries, dtype=np.float64).reshape(-1, 2)]
