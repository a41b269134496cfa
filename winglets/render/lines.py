"""Line consumer interface and a matplotlib reference consumer.

The engine never draws. It hands each consumer a vertex buffer and a
parallel width buffer, sets its colour, and forwards ``draw(transform)``.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

import numpy as np
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection
from numpy.typing import NDArray

from winglets.utils.geometry import apply_transform

Color = Sequence[float]  # (r, g, b, a), r/g/b in 0-255, a in 0-1


class LineRenderer(Protocol):
    def set_points(self, vertices: NDArray[np.float64], widths: NDArray[np.float64] | None = None) -> None: ...

    def set_style(self, *, color: Color) -> None: ...

    def draw(self, transform: NDArray[np.float64]) -> None: ...

    def destroy(self) -> None: ...


LineFactory = Callable[..., LineRenderer]


def to_mpl_color(color: Color) -> tuple[float, float, float, float]:
    r, g, b = (min(max(float(c), 0.0), 255.0) / 255.0 for c in color[:3])
    a = float(color[3]) if len(color) > 3 else 1.0
    return (r, g, b, min(max(a, 0.0), 1.0))


class MatplotlibLine:
    """Draws one polyline on an Axes as a LineCollection.

    Segment widths are the smaller of their two vertex widths, so a segment
    touching a zero-width connector vertex is invisible.
    """

    def __init__(self, ax: Axes, width: float = 1.0, is_2d: bool = True) -> None:
        self.ax = ax
        self.width = float(width)
        self.is_2d = is_2d
        self.vertices = np.empty((0, 2))
        self.widths: NDArray[np.float64] | None = None
        self.color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
        self.collection = LineCollection([], colors=[self.color])
        ax.add_collection(self.collection)

    def set_points(self, vertices: NDArray[np.float64], widths: NDArray[np.float64] | None = None) -> None:
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
        if widths is not None and len(widths) != len(vertices):
            raise ValueError(f"Got {len(widths)} widths for {len(vertices)} vertices")
        self.vertices = vertices
        self.widths = None if widths is None else np.asarray(widths, dtype=np.float64)

    def set_style(self, *, color: Color) -> None:
        self.color = to_mpl_color(color)
        self.collection.set_color([self.color])

    def segment_widths(self) -> NDArray[np.float64]:
        n = max(len(self.vertices) - 1, 0)
        if self.widths is None:
            return np.full(n, self.width)
        return np.minimum(self.widths[:-1], self.widths[1:])

    def draw(self, transform: NDArray[np.float64]) -> None:
        pts = apply_transform(self.vertices, transform) if len(self.vertices) else self.vertices
        segments = np.stack([pts[:-1], pts[1:]], axis=1) if len(pts) > 1 else np.empty((0, 2, 2))
        self.collection.set_segments(list(segments))
        self.collection.set_linewidths(self.segment_widths())

    def destroy(self) -> None:
        self.collection.remove()
        self.vertices = np.empty((0, 2))
        self.widths = None


def matplotlib_line_factory(ax: Axes) -> LineFactory:
    """Factory binding new MatplotlibLine consumers to ``ax``."""

    def factory(width: float = 1.0, is_2d: bool = True) -> MatplotlibLine:
        return MatplotlibLine(ax, width=width, is_2d=is_2d)

    return factory
