"""T1.05: Winglets.

One glyph per point, anchored at the nearest indexed contour vertex, with
half-lengths a + value**n * b.
"""

from __future__ import annotations

from winglets.engine.context import CategoryContext
from winglets.engine.registry import Layer, transform
from winglets.utils.winglet import synthesize_winglet


@transform(
    id="T1.05",
    layer=Layer.CATEGORY,
    dependencies=["T1.04"],
    description="Winglet glyph per point",
)
def winglets(cat: CategoryContext) -> None:
    tree = cat.spatial_index
    if tree is None:
        return
    opts = cat.options
    glyphs = []
    for point, value in zip(cat.xy, cat.values):
        hit = tree.nearest(point)
        contour = tree.contours[hit.contour_id]
        glyphs.append(synthesize_winglet(
            contour,
            hit.index,
            point,
            opts.arc_length(float(value)),
            min_length=cat.config.min_arc_length,
        ))
    cat.winglets = glyphs
