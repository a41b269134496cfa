"""Pipeline state.

Global results (bounding box, silhouette values) -> PipelineContext
Per-category results (grid, contours, index, winglets) -> CategoryContext
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from winglets.engine.config import PipelineConfig
from winglets.errors import InvalidConfiguration
from winglets.models.options import Options
from winglets.utils.contour import Contour
from winglets.utils.kde import BoundingBox, DensityGrid
from winglets.utils.kdtree import KDTree
from winglets.utils.winglet import Winglet, concatenate_winglets, connector_widths


@dataclass
class PointSet:
    """Positions, category keys and silhouette values of the loaded points."""

    xy: NDArray[np.float64]
    categories: list[Hashable]
    values: NDArray[np.float64]

    @classmethod
    def from_tuples(cls, points: Iterable[Sequence[Any]]) -> "PointSet":
        """Accept (x, y, category[, value]) tuples; the value slot is ignored."""
        xy: list[tuple[float, float]] = []
        categories: list[Hashable] = []
        for k, p in enumerate(points):
            if len(p) < 3:
                raise InvalidConfiguration(f"Point {k} needs (x, y, category), got {p!r}")
            x, y = float(p[0]), float(p[1])
            if not (np.isfinite(x) and np.isfinite(y)):
                raise InvalidConfiguration(f"Point {k} has non-finite coordinates")
            xy.append((x, y))
            categories.append(p[2])
        if not xy:
            raise InvalidConfiguration("At least one point is required")
        return cls(
            xy=np.asarray(xy, dtype=np.float64),
            categories=categories,
            values=np.zeros(len(xy)),
        )

    def __len__(self) -> int:
        return len(self.xy)

    def as_tuples(self) -> list[tuple[float, float, Hashable, float]]:
        return [
            (float(x), float(y), c, float(v))
            for (x, y), c, v in zip(self.xy, self.categories, self.values)
        ]


@dataclass
class CategoryContext:
    """One category's task: input snapshot in, geometry out."""

    category: Hashable
    # Recompute generation; stale results are discarded by the orchestrator
    generation: int
    points_generation: int
    indices: NDArray[np.int64]
    xy: NDArray[np.float64]
    values: NDArray[np.float64]
    bbox: BoundingBox
    options: Options
    config: PipelineConfig

    # Grid reused from a previous run with the same cache key
    cached_grid: DensityGrid | None = None

    # --- stage outputs ---
    grid: DensityGrid | None = None
    grid_reused: bool = False
    reference_contour: Contour | None = None
    scaled_contours: list[Contour] = field(default_factory=list)
    spatial_index: KDTree | None = None
    winglets: list[Winglet] = field(default_factory=list)

    # --- metadata ---
    completed_transforms: set[str] = field(default_factory=set)
    error: Exception | None = None

    @property
    def num_points(self) -> int:
        return len(self.xy)

    @property
    def centroid(self) -> tuple[float, float]:
        return (float(np.mean(self.xy[:, 0])), float(np.mean(self.xy[:, 1])))

    @property
    def ok(self) -> bool:
        return self.error is None and self.reference_contour is not None

    @property
    def grid_cache_key(self) -> tuple:
        return (self.category, self.points_generation, self.config.grid_resolution, self.bbox)

    def polyline(self) -> NDArray[np.float64]:
        """All winglets as one Nx2 polyline with connector joins."""
        return concatenate_winglets(self.winglets)

    def widths(self, line_width: float) -> NDArray[np.float64]:
        return connector_widths(self.winglets, line_width)


@dataclass
class PipelineContext:
    """Shared state for one recompute."""

    points: PointSet
    options: Options = field(default_factory=Options)
    config: PipelineConfig = field(default_factory=PipelineConfig)
    # Point-set generation; part of the density-grid cache key
    points_generation: int = 0
    # Per-category recompute generations handed out by the caller
    generations: dict[Hashable, int] = field(default_factory=dict)
    grid_cache: dict[tuple, DensityGrid] = field(default_factory=dict)

    # --- populated by Layer 0 ---
    bbox: BoundingBox | None = None
    groups: dict[Hashable, NDArray[np.int64]] = field(default_factory=dict)

    # --- populated by the category fan-out ---
    categories: dict[Hashable, CategoryContext] = field(default_factory=dict)

    # --- pipeline metadata ---
    completed_transforms: set[str] = field(default_factory=set)
    errors: dict[Hashable, str] = field(default_factory=dict)

    def category_tasks(self) -> list[CategoryContext]:
        """One task per category, each with its own snapshot of shared inputs."""
        if self.bbox is None:
            raise RuntimeError("Bounding box not computed; run the global layer first")
        tasks = []
        for category, idx in self.groups.items():
            tasks.append(CategoryContext(
                category=category,
                generation=self.generations.get(category, 0),
                points_generation=self.points_generation,
                indices=idx,
                xy=self.points.xy[idx].copy(),
                values=self.points.values[idx].copy(),
                bbox=self.bbox,
                options=self.options,
                config=self.config,
            ))
        for task in tasks:
            task.cached_grid = self.grid_cache.get(task.grid_cache_key)
        return tasks
