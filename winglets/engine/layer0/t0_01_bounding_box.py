"""T0.01: Bounding Box and Category Partition.

One box for the whole point set so every category's grid, and therefore
every contour, lives on the same scale.
"""

from __future__ import annotations

import logging

from winglets.engine.context import PipelineContext
from winglets.engine.registry import Layer, transform
from winglets.utils.kde import BoundingBox
from winglets.utils.silhouette import group_indices

logger = logging.getLogger(__name__)


@transform(
    id="T0.01",
    layer=Layer.GLOBAL,
    description="Shared bounding box and per-category point partition",
)
def bounding_box(ctx: PipelineContext) -> None:
    ctx.bbox = BoundingBox.from_points(ctx.points.xy, margin=ctx.config.bbox_margin)
    ctx.groups = group_indices(ctx.points.categories)
    logger.debug(
        "Bounding box x[%.3f, %.3f] y[%.3f, %.3f], %d categories",
        ctx.bbox.x_min,
        ctx.bbox.x_max,
        ctx.bbox.y_min,
        ctx.bbox.y_max,
        len(ctx.groups),
    )
