"""T1.04: Spatial Index.

k-d tree over the contour vertices searched for winglet anchors: the
reference contour, plus the scaled contours when configured.
"""

from __future__ import annotations

from winglets.engine.context import CategoryContext
from winglets.engine.registry import Layer, transform
from winglets.utils.kdtree import KDTree


@transform(
    id="T1.04",
    layer=Layer.CATEGORY,
    dependencies=["T1.02", "T1.03"],
    description="Nearest-neighbour index over contour vertices",
)
def spatial_index(cat: CategoryContext) -> None:
    if cat.reference_contour is None:
        return
    contours = [cat.reference_contour]
    if cat.config.search_scaled_contours:
        contours.extend(cat.scaled_contours)
    cat.spatial_index = KDTree.from_contours(contours, node_size=cat.config.kdtree_node_size)
