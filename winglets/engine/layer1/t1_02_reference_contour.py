"""T1.02: Reference Contour.

Sweeps iso-values from the 10th to the 90th percentile of point densities
and keeps the last single closed loop before the contained-point count
drops by ``contour_dropoff``.
"""

from __future__ import annotations

import logging

from winglets.engine.context import CategoryContext
from winglets.engine.registry import Layer, transform
from winglets.utils.contour import extract_contour

logger = logging.getLogger(__name__)


@transform(
    id="T1.02",
    layer=Layer.CATEGORY,
    dependencies=["T1.01"],
    description="Density boundary contour of the category",
)
def reference_contour(cat: CategoryContext) -> None:
    if cat.grid is None:
        return
    cfg = cat.config
    contour = extract_contour(
        cat.grid,
        cat.xy,
        dropoff=cat.options.contour_dropoff,
        steps=cfg.iso_steps,
        low=cfg.iso_low_percentile,
        high=cfg.iso_high_percentile,
        leaf_size=cfg.quadtree_leaf_size,
    )
    if not contour.is_simple:
        logger.warning("Contour for category %r self-intersects", cat.category)
    logger.debug(
        "Category %r: contour with %d vertices, iso %.4f, area %.4f",
        cat.category,
        len(contour),
        contour.iso_value,
        contour.area,
    )
    cat.reference_contour = contour
