"""Winglets orchestrator: owns points, options, colours and the line consumers.

Typical use:

    w = Winglets(line_factory)
    w.set_points([(x, y, category, 0.0), ...])
    w.set_options({"a": 0.02})      # reprocesses every category
    w.set_options({"lineWidth": 2}) # only width buffers change
    w.draw(mvp)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from winglets.engine.config import PipelineConfig
from winglets.engine.context import CategoryContext, PipelineContext, PointSet
from winglets.engine.pipeline import Pipeline, create_pipeline
from winglets.errors import InvalidConfiguration
from winglets.models.options import REPROCESS_FIELDS, WIDTH_FIELDS, Options, validate_options
from winglets.render.lines import Color, LineFactory, LineRenderer
from winglets.utils.kde import DensityGrid
from winglets.utils.silhouette import group_indices

logger = logging.getLogger(__name__)

DEFAULT_COLORS: list[tuple[float, float, float, float]] = [
    (255, 255, 255, 1),
    (240, 240, 240, 1),
    (217, 217, 217, 1),
    (189, 189, 189, 1),
    (150, 150, 150, 1),
    (115, 115, 115, 1),
    (82, 82, 82, 1),
    (37, 37, 37, 1),
    (0, 0, 0, 1),
]
FALLBACK_COLOR = (255, 255, 255, 1)

# Contour lines are drawn in the category colour darkened by this factor.
CONTOUR_DARKEN = 0.5


def darken_color(color: Color, k: float) -> tuple[float, float, float, float]:
    """Scale r, g and b by ``k``; alpha is kept."""
    if k < 0:
        raise InvalidConfiguration(f"Darkening factor must be non-negative, got {k}")
    r, g, b = color[:3]
    a = color[3] if len(color) > 3 else 1
    return (r * k, g * k, b * k, a)


@dataclass
class CategoryLines:
    contours: list[LineRenderer] = field(default_factory=list)
    winglets: LineRenderer | None = None

    def all(self) -> list[LineRenderer]:
        return self.contours + ([self.winglets] if self.winglets is not None else [])


class Winglets:
    def __init__(
        self,
        line_factory: LineFactory,
        config: PipelineConfig | None = None,
        options: Options | Mapping[str, Any] | None = None,
        pipeline: Pipeline | None = None,
    ) -> None:
        self.line_factory = line_factory
        self.config = config or PipelineConfig()
        self.options = options if isinstance(options, Options) else validate_options(options)
        self.pipeline = pipeline or create_pipeline(self.config)
        self.colors: list[Color] = list(DEFAULT_COLORS)

        self._lock = threading.Lock()
        self._points: PointSet | None = None
        self._points_generation = 0
        # One counter for all categories; a returning category never reuses a number
        self._next_generation = 0
        self._generations: dict[Hashable, int] = {}
        self._grid_cache: dict[tuple, DensityGrid] = {}
        self._results: dict[Hashable, CategoryContext] = {}
        self._lines: dict[Hashable, CategoryLines] = {}
        self._applied_colors: list[Color] | None = None

    # --- accessors ---

    @property
    def categories(self) -> list[Hashable]:
        return list(self._results)

    @property
    def results(self) -> dict[Hashable, CategoryContext]:
        return dict(self._results)

    @property
    def errors(self) -> dict[Hashable, str]:
        return {c: str(r.error) for c, r in self._results.items() if r.error is not None}

    @property
    def points(self) -> list[tuple[float, float, Hashable, float]]:
        return self._points.as_tuples() if self._points is not None else []

    def polyline(self, category: Hashable) -> NDArray[np.float64]:
        return self._results[category].polyline()

    def widths(self, category: Hashable) -> NDArray[np.float64]:
        return self._results[category].widths(self.options.line_width)

    # --- inputs ---

    def set_points(self, points: Iterable[Sequence[Any]]) -> None:
        """Replace the point set and reprocess every category."""
        point_set = PointSet.from_tuples(points)
        with self._lock:
            self._points = point_set
            self._points_generation += 1
            self._grid_cache.clear()
        self._recompute(replace=True)

    def set_options(self, patch: Mapping[str, Any] | None = None, **kwargs: Any) -> set[str]:
        """Merge ``patch`` into the options; returns the changed field names."""
        new, changed = self.options.merge({**(patch or {}), **kwargs})
        self.options = new
        if not changed:
            return changed
        logger.debug("Options changed: %s", sorted(changed))
        if changed & REPROCESS_FIELDS:
            if self._points is not None:
                self._recompute(replace=False)
        elif changed & WIDTH_FIELDS:
            self._update_widths()
        return changed

    def set_colors(self, colors: Sequence[Color]) -> None:
        self.colors = list(colors)
        self._apply_colors()

    # --- processing ---

    def _recompute(self, replace: bool) -> None:
        with self._lock:
            points = self._points
            if points is None:
                return
            groups = group_indices(points.categories)
            if replace:
                for category in set(self._generations) - set(groups):
                    del self._generations[category]
            self._next_generation += 1
            for category in groups:
                self._generations[category] = self._next_generation
            ctx = PipelineContext(
                points=PointSet(xy=points.xy, categories=list(points.categories), values=points.values.copy()),
                options=self.options,
                config=self.config,
                points_generation=self._points_generation,
                generations={c: self._generations[c] for c in groups},
                grid_cache=dict(self._grid_cache),
            )

        self.pipeline.run(ctx)

        with self._lock:
            current_points = self._points_generation == ctx.points_generation
            if replace and current_points:
                for category in set(self._results) - set(ctx.categories):
                    del self._results[category]
            accepted = 0
            for category, cat in ctx.categories.items():
                if cat.generation != self._generations.get(category):
                    logger.debug("Discarding superseded result for category %r", category)
                    continue
                self._results[category] = cat
                if cat.grid is not None:
                    self._grid_cache[cat.grid_cache_key] = cat.grid
                accepted += 1
            if accepted and current_points:
                self._points.values = ctx.points.values
        self._rebuild_lines()

    # --- render hand-off ---

    def _rebuild_lines(self) -> None:
        for lines in self._lines.values():
            for line in lines.all():
                line.destroy()
        self._lines = {}
        width = self.options.line_width
        for category, cat in self._results.items():
            lines = CategoryLines()
            if cat.ok:
                for contour in cat.scaled_contours:
                    line = self.line_factory(width=1.0, is_2d=True)
                    line.set_points(contour.vertices)
                    lines.contours.append(line)
                if cat.winglets:
                    lines.winglets = self.line_factory(width=width, is_2d=True)
                    lines.winglets.set_points(cat.polyline(), cat.widths(width))
            self._lines[category] = lines
        self._apply_colors(force=True)

    def _update_widths(self) -> None:
        width = self.options.line_width
        for category, lines in self._lines.items():
            if lines.winglets is not None:
                cat = self._results[category]
                lines.winglets.set_points(cat.polyline(), cat.widths(width))

    def _apply_colors(self, force: bool = False) -> None:
        """Push colours to the consumers.

        Colours may be set before any points exist; they are applied once
        lines have been created.
        """
        if not force and (self._applied_colors is self.colors or not self._lines):
            return
        for index, (category, lines) in enumerate(self._lines.items()):
            if index < len(self.colors):
                color = self.colors[index]
            elif index < len(DEFAULT_COLORS):
                color = DEFAULT_COLORS[index]
            else:
                color = FALLBACK_COLOR
            for line in lines.contours:
                line.set_style(color=darken_color(color, CONTOUR_DARKEN))
            if lines.winglets is not None:
                lines.winglets.set_style(color=color)
        self._applied_colors = self.colors

    def draw(self, transform: NDArray[np.float64]) -> None:
        """Forward a draw call to every visible consumer."""
        for lines in self._lines.values():
            if self.options.show_contours:
                for line in lines.contours:
                    line.draw(transform)
            if self.options.show_winglets and lines.winglets is not None:
                lines.winglets.draw(transform)

    def destroy(self) -> None:
        for lines in self._lines.values():
            for line in lines.all():
                line.destroy()
        self._lines = {}
        self._results = {}
