"""T0.02: Silhouette Scoring.

Cross-category pass; must finish for every point before any category's
density stage starts. Values are written in a single assignment.
"""

from __future__ import annotations

import numpy as np

from winglets.engine.context import PipelineContext
from winglets.engine.registry import Layer, transform
from winglets.utils.silhouette import score_silhouettes


@transform(
    id="T0.02",
    layer=Layer.GLOBAL,
    dependencies=["T0.01"],
    description="Normalized silhouette value per point",
)
def silhouette(ctx: PipelineContext) -> None:
    values = score_silhouettes(ctx.points.xy, ctx.points.categories)
    ctx.points.values = np.asarray(values, dtype=np.float64)
