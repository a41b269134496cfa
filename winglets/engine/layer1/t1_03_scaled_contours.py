"""T1.03: Scaled Contours.

Display-only nesting: the reference contour scaled about the category
centroid by each configured factor.
"""

from __future__ import annotations

from winglets.engine.context import CategoryContext
from winglets.engine.registry import Layer, transform
from winglets.utils.contour import interpolate_contour


@transform(
    id="T1.03",
    layer=Layer.CATEGORY,
    dependencies=["T1.02"],
    description="Concentric contours about the category centroid",
)
def scaled_contours(cat: CategoryContext) -> None:
    if cat.reference_contour is None:
        return
    center = cat.centroid
    cat.scaled_contours = [
        interpolate_contour(cat.reference_contour, center, k)
        for k in cat.config.contour_scales
    ]
