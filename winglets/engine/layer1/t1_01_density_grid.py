"""T1.01: Density Grid.

Gaussian KDE over the shared bounding box. A grid cached for the same
category, point-set generation, resolution and box is reused as is.
"""

from __future__ import annotations

from winglets.engine.context import CategoryContext
from winglets.engine.registry import Layer, transform
from winglets.utils.kde import estimate_density


@transform(
    id="T1.01",
    layer=Layer.CATEGORY,
    description="Kernel density grid for the category",
)
def density_grid(cat: CategoryContext) -> None:
    if cat.cached_grid is not None:
        cat.grid = cat.cached_grid
        cat.grid_reused = True
        return
    cat.grid = estimate_density(cat.xy, cat.bbox, cat.config.grid_resolution)
