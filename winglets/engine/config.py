"""Pipeline configuration: tunables of the density/contour/winglet stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from winglets.errors import InvalidConfiguration

if TYPE_CHECKING:
    from winglets.config import Settings

# Display-only nested contours, as factors of the reference contour.
DEFAULT_CONTOUR_SCALES = (0.1, 0.19, 0.31, 0.47, 0.65, 0.86, 1.1, 1.37, 1.67, 2.0)


@dataclass(frozen=True)
class PipelineConfig:
    """Snapshotted per recompute; never mutated while a run is in flight."""

    # KDE grid is grid_resolution x grid_resolution
    grid_resolution: int = 100
    # Shared bounding box padding, as a fraction of each axis span
    bbox_margin: float = 0.1

    # Iso-value sweep
    iso_steps: int = 20
    iso_low_percentile: float = 0.1
    iso_high_percentile: float = 0.9
    quadtree_leaf_size: int = 4

    contour_scales: tuple[float, ...] = field(default=DEFAULT_CONTOUR_SCALES)
    # Anchor winglets on scaled contours too, not just the reference contour
    search_scaled_contours: bool = False

    kdtree_node_size: int = 64
    min_arc_length: float = 0.001

    # Category fan-out; <= 1 runs categories sequentially
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.grid_resolution < 2:
            raise InvalidConfiguration(f"grid_resolution must be >= 2, got {self.grid_resolution}")
        if self.iso_steps < 1:
            raise InvalidConfiguration(f"iso_steps must be >= 1, got {self.iso_steps}")
        if not 0.0 <= self.iso_low_percentile <= self.iso_high_percentile <= 1.0:
            raise InvalidConfiguration("iso percentiles must satisfy 0 <= low <= high <= 1")
        if self.bbox_margin < 0:
            raise InvalidConfiguration(f"bbox_margin must be >= 0, got {self.bbox_margin}")
        if any(s <= 0 for s in self.contour_scales):
            raise InvalidConfiguration("contour scales must be positive")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PipelineConfig":
        return cls(
            grid_resolution=settings.winglets_grid_resolution,
            max_workers=settings.winglets_max_workers,
        )
