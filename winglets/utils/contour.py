"""Contour extraction: bilinear point densities, quad-tree marching squares, iso-value sweep."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LinearRing, Polygon

from winglets.errors import NoContourFound
from winglets.utils.geometry import centroid, orient_ccw, perimeter, scale_about
from winglets.utils.kde import DensityGrid

logger = logging.getLogger(__name__)

# Edge keys: ("h", j, i) joins grid vertices (j, i)-(j, i+1); ("v", j, i) joins (j, i)-(j+1, i).
EdgeKey = tuple[str, int, int]

# Corner order: 0 = (j, i), 1 = (j, i+1), 2 = (j+1, i+1), 3 = (j+1, i).
# Case bit k is set when corner k is >= iso. Saddles (5, 10) are resolved at trace time.
_BOTTOM, _RIGHT, _TOP, _LEFT = range(4)
_CASES: dict[int, tuple[tuple[int, int], ...]] = {
    1: ((_LEFT, _BOTTOM),),
    2: ((_BOTTOM, _RIGHT),),
    3: ((_LEFT, _RIGHT),),
    4: ((_RIGHT, _TOP),),
    6: ((_BOTTOM, _TOP),),
    7: ((_LEFT, _TOP),),
    8: ((_LEFT, _TOP),),
    9: ((_BOTTOM, _TOP),),
    11: ((_RIGHT, _TOP),),
    12: ((_LEFT, _RIGHT),),
    13: ((_BOTTOM, _RIGHT),),
    14: ((_LEFT, _BOTTOM),),
}
_SADDLE_CUT_02 = ((_LEFT, _BOTTOM), (_RIGHT, _TOP))  # isolates corners 0 and 2
_SADDLE_CUT_13 = ((_BOTTOM, _RIGHT), (_LEFT, _TOP))  # isolates corners 1 and 3


@dataclass
class Contour:
    """Implicitly closed polyline; the last vertex connects back to the first."""

    vertices: NDArray[np.float64]
    iso_value: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=np.float64)
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 2 or len(self.vertices) < 3:
            raise ValueError(f"A contour needs at least 3 2D vertices, got shape {self.vertices.shape}")

    def __len__(self) -> int:
        return len(self.vertices)

    @property
    def perimeter(self) -> float:
        return perimeter(self.vertices)

    @property
    def centroid(self) -> tuple[float, float]:
        return centroid(self.vertices)

    @property
    def polygon(self) -> Polygon:
        return Polygon(self.vertices)

    @property
    def area(self) -> float:
        return float(self.polygon.area)

    @property
    def is_simple(self) -> bool:
        """True when the ring has no self-intersections."""
        return bool(LinearRing(self.vertices).is_simple)

    def flat(self) -> NDArray[np.float64]:
        """Vertices as x0, y0, x1, y1, ... for line consumers."""
        return self.vertices.ravel()


@dataclass
class IsoLine:
    """One traced iso-line in grid-index space (x = column, y = row)."""

    points: NDArray[np.float64]
    closed: bool


# --- per-point densities ---


def point_densities(grid: DensityGrid, xy: NDArray[np.float64]) -> NDArray[np.float64]:
    """Bilinear interpolation of the grid at every point.

    Points are mapped linearly to grid-index space and clamped to the grid so
    a point on the last row or column still has a full enclosing cell.
    """
    n = grid.n
    bbox = grid.bbox
    fx = (xy[:, 0] - bbox.x_min) / bbox.width * (n - 1)
    fy = (xy[:, 1] - bbox.y_min) / bbox.height * (n - 1)
    i1 = np.clip(np.floor(fx).astype(int), 0, n - 2)
    j1 = np.clip(np.floor(fy).astype(int), 0, n - 2)
    tx = np.clip(fx - i1, 0.0, 1.0)
    ty = np.clip(fy - j1, 0.0, 1.0)

    g = grid.values
    f11 = g[j1, i1]
    f21 = g[j1, i1 + 1]
    f12 = g[j1 + 1, i1]
    f22 = g[j1 + 1, i1 + 1]
    return (
        f11 * (1 - tx) * (1 - ty)
        + f21 * tx * (1 - ty)
        + f12 * (1 - tx) * ty
        + f22 * tx * ty
    )


def count_above(sorted_values: NDArray[np.float64], iso_value: float) -> int:
    """Number of values strictly greater than ``iso_value`` (binary search)."""
    return int(len(sorted_values) - np.searchsorted(sorted_values, iso_value, side="right"))


# --- quad tree + marching squares ---


class QuadTree:
    """Min/max quad tree over the cells of a scalar grid.

    Only cells whose corner range straddles an iso-value are visited by
    ``straddling_cells``; whole subtrees outside the range are skipped.
    """

    def __init__(self, values: NDArray[np.float64], leaf_size: int = 4) -> None:
        self.values = np.asarray(values, dtype=np.float64)
        if self.values.ndim != 2 or min(self.values.shape) < 2:
            raise ValueError(f"Grid must be at least 2x2, got shape {self.values.shape}")
        g = self.values
        corners = np.stack([g[:-1, :-1], g[:-1, 1:], g[1:, 1:], g[1:, :-1]])
        self.cell_min = corners.min(axis=0)
        self.cell_max = corners.max(axis=0)
        self.leaf_size = max(1, int(leaf_size))
        # node: (j0, i0, j1, i1, vmin, vmax, children)
        self._root = self._build(0, 0, self.cell_min.shape[0], self.cell_min.shape[1])

    def _build(self, j0: int, i0: int, j1: int, i1: int) -> tuple:
        vmin = float(self.cell_min[j0:j1, i0:i1].min())
        vmax = float(self.cell_max[j0:j1, i0:i1].max())
        if j1 - j0 <= self.leaf_size and i1 - i0 <= self.leaf_size:
            return (j0, i0, j1, i1, vmin, vmax, ())
        jm = (j0 + j1) // 2 if j1 - j0 > 1 else j1
        im = (i0 + i1) // 2 if i1 - i0 > 1 else i1
        children = []
        for a, b in ((j0, jm), (jm, j1)):
            for c, d in ((i0, im), (im, i1)):
                if a < b and c < d:
                    children.append(self._build(a, c, b, d))
        return (j0, i0, j1, i1, vmin, vmax, tuple(children))

    def straddling_cells(self, iso_value: float) -> list[tuple[int, int]]:
        """Cells with at least one corner below and one at/above ``iso_value``."""
        cells: list[tuple[int, int]] = []
        stack = [self._root]
        while stack:
            j0, i0, j1, i1, vmin, vmax, children = stack.pop()
            if vmax < iso_value or vmin >= iso_value:
                continue
            if children:
                stack.extend(children)
                continue
            block = (self.cell_min[j0:j1, i0:i1] < iso_value) & (self.cell_max[j0:j1, i0:i1] >= iso_value)
            for dj, di in zip(*np.nonzero(block)):
                cells.append((j0 + int(dj), i0 + int(di)))
        return cells

    def iso_lines(self, iso_value: float) -> list[IsoLine]:
        """Trace all iso-lines at ``iso_value``.

        Lines that reach the grid border stay open; no frame is added around
        the grid, so border artifacts never close a line.
        """
        segments: list[tuple[EdgeKey, EdgeKey]] = []
        g = self.values
        for j, i in self.straddling_cells(iso_value):
            c0, c1, c2, c3 = g[j, i], g[j, i + 1], g[j + 1, i + 1], g[j + 1, i]
            case = (
                (c0 >= iso_value) * 1
                | (c1 >= iso_value) * 2
                | (c2 >= iso_value) * 4
                | (c3 >= iso_value) * 8
            )
            if case == 5 or case == 10:
                center_inside = (c0 + c1 + c2 + c3) / 4.0 >= iso_value
                if case == 5:
                    pairs = _SADDLE_CUT_13 if center_inside else _SADDLE_CUT_02
                else:
                    pairs = _SADDLE_CUT_02 if center_inside else _SADDLE_CUT_13
            else:
                pairs = _CASES.get(int(case), ())
            edges = _cell_edges(j, i)
            for a, b in pairs:
                segments.append((edges[a], edges[b]))

        lines = []
        for keys, closed in _chain(segments):
            pts = np.array([self._crossing(k, iso_value) for k in keys], dtype=np.float64)
            if closed:
                pts = orient_ccw(pts)
            lines.append(IsoLine(points=pts, closed=closed))
        return lines

    def _crossing(self, key: EdgeKey, iso_value: float) -> tuple[float, float]:
        kind, j, i = key
        g = self.values
        if kind == "h":
            v0, v1 = g[j, i], g[j, i + 1]
            t = (iso_value - v0) / (v1 - v0)
            return (i + t, float(j))
        v0, v1 = g[j, i], g[j + 1, i]
        t = (iso_value - v0) / (v1 - v0)
        return (float(i), j + t)


def _cell_edges(j: int, i: int) -> tuple[EdgeKey, EdgeKey, EdgeKey, EdgeKey]:
    return (("h", j, i), ("v", j, i + 1), ("h", j + 1, i), ("v", j, i))


def _chain(segments: list[tuple[EdgeKey, EdgeKey]]) -> list[tuple[list[EdgeKey], bool]]:
    """Join segments sharing an edge crossing into polylines.

    Every crossing belongs to one cell (grid border) or two (interior), so a
    walk from a degree-1 crossing gives an open line and the leftovers are
    loops.
    """
    adj: dict[EdgeKey, list[EdgeKey]] = defaultdict(list)
    for a, b in segments:
        adj[a].append(b)
        adj[b].append(a)

    visited: set[EdgeKey] = set()
    result: list[tuple[list[EdgeKey], bool]] = []
    open_starts = [k for k, nb in adj.items() if len(nb) == 1]
    for start in open_starts + list(adj):
        if start in visited:
            continue
        path = [start]
        visited.add(start)
        cur = start
        while True:
            nxt = next((k for k in adj[cur] if k not in visited), None)
            if nxt is None:
                break
            path.append(nxt)
            visited.add(nxt)
            cur = nxt
        closed = len(path) >= 3 and start in adj[cur]
        result.append((path, closed))
    return result


# --- iso-value sweep ---


def iso_values(sorted_densities: NDArray[np.float64], steps: int, low: float = 0.1, high: float = 0.9) -> NDArray[np.float64]:
    """``steps`` values evenly spaced in [d[floor(len*low)], d[floor(len*high)])."""
    size = len(sorted_densities)
    min_value = sorted_densities[min(size - 1, int(math.floor(size * low)))]
    max_value = sorted_densities[min(size - 1, int(math.floor(size * high)))]
    dist = (max_value - min_value) / steps
    return min_value + np.arange(steps) * dist


def extract_contour(
    grid: DensityGrid,
    xy: NDArray[np.float64],
    dropoff: float = 0.05,
    steps: int = 20,
    low: float = 0.1,
    high: float = 0.9,
    leaf_size: int = 4,
) -> Contour:
    """Trace iso-contours from low to high density and halt at the first large drop.

    The drop is measured in the number of points whose density lies strictly
    above the iso-value. The result is the most recent single closed loop
    seen before the stopping step, rescaled to world coordinates.
    """
    if len(xy) == 0:
        raise NoContourFound("No points to place iso-values")

    densities = np.sort(point_densities(grid, xy))
    candidates = iso_values(densities, steps, low, high)
    tree = QuadTree(grid.values, leaf_size=leaf_size)

    chosen: IsoLine | None = None
    chosen_iso = 0.0
    prev_count: int | None = None
    for step, iso in enumerate(candidates):
        count = count_above(densities, float(iso))
        # with nothing above the previous iso-value there is no drop to measure
        # and the sweep keeps tracing
        if prev_count:
            drop = 1.0 - count / prev_count
            if drop >= dropoff:
                logger.debug("Iso sweep stopped at step %d (drop %.3f)", step, drop)
                break
        lines = tree.iso_lines(float(iso))
        if len(lines) == 1 and lines[0].closed and len(lines[0].points) >= 3:
            chosen = lines[0]
            chosen_iso = float(iso)
        prev_count = count

    if chosen is None:
        raise NoContourFound("Can't find contour: no single closed iso-line before the density drop")

    world = np.empty_like(chosen.points)
    world[:, 0] = grid.bbox.x_min + chosen.points[:, 0] * grid.cell_width
    world[:, 1] = grid.bbox.y_min + chosen.points[:, 1] * grid.cell_height
    return Contour(vertices=world, iso_value=chosen_iso)


def interpolate_contour(contour: Contour, center: tuple[float, float], scale: float) -> Contour:
    """Scale every vertex about ``center``. The source contour is left untouched."""
    return Contour(
        vertices=scale_about(contour.vertices, center, scale),
        iso_value=contour.iso_value,
        scale=scale * contour.scale,
    )
