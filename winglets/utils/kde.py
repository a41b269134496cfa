"""Kernel density estimation on a regular grid.

Bandwidth follows Scott's rule of thumb per axis (Scott 2015, eq. 6.44):
``bw = n ** (-1/6) * sd``. The kernel is the univariate Gaussian applied to
both standardized axes and multiplied, not a full bivariate Gaussian with
covariance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from winglets.errors import InsufficientData, InvalidConfiguration

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

# Points per vectorised block; bounds the (N*N, chunk) temporary.
_CHUNK = 256


@dataclass(frozen=True)
class BoundingBox:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @classmethod
    def from_points(cls, xy: NDArray[np.float64], margin: float = 0.1) -> "BoundingBox":
        """Tight box around ``xy`` padded by ``margin`` times each axis span.

        A zero span falls back to an absolute pad of ``margin`` so the box is
        never degenerate.
        """
        if len(xy) == 0:
            raise InvalidConfiguration("Cannot derive a bounding box from zero points")
        lo = xy.min(axis=0)
        hi = xy.max(axis=0)
        span = hi - lo
        pad = np.where(span > 0, span * margin, margin)
        return cls(
            x_min=float(lo[0] - pad[0]),
            x_max=float(hi[0] + pad[0]),
            y_min=float(lo[1] - pad[1]),
            y_max=float(hi[1] + pad[1]),
        )


@dataclass(frozen=True)
class DensityGrid:
    """N x N densities; ``values[j, i]`` sits at ``(xs[i], ys[j])``."""

    values: NDArray[np.float64]
    bbox: BoundingBox
    bandwidth: tuple[float, float]

    @property
    def n(self) -> int:
        return int(self.values.shape[0])

    @property
    def cell_width(self) -> float:
        return self.bbox.width / (self.n - 1)

    @property
    def cell_height(self) -> float:
        return self.bbox.height / (self.n - 1)

    @property
    def xs(self) -> NDArray[np.float64]:
        return np.linspace(self.bbox.x_min, self.bbox.x_max, self.n)

    @property
    def ys(self) -> NDArray[np.float64]:
        return np.linspace(self.bbox.y_min, self.bbox.y_max, self.n)

    @property
    def peak(self) -> tuple[float, float]:
        """World position of the densest grid sample."""
        j, i = np.unravel_index(int(np.argmax(self.values)), self.values.shape)
        return (float(self.xs[i]), float(self.ys[j]))


def scott_bandwidth(xy: NDArray[np.float64]) -> tuple[float, float]:
    """Per-axis bandwidth from the sample standard deviation (ddof=1)."""
    count = len(xy)
    if count < 2:
        raise InsufficientData(f"KDE needs at least 2 points, got {count}")
    sd = np.std(xy, axis=0, ddof=1)
    if np.any(sd <= 0):
        raise InsufficientData("KDE bandwidth is zero: points have no spread along an axis")
    factor = count ** (-1.0 / 6.0)
    return (float(factor * sd[0]), float(factor * sd[1]))


def gauss_kernel(u: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    return _INV_SQRT_2PI * np.exp(-0.5 * (u * u + v * v))


def estimate_density(xy: NDArray[np.float64], bbox: BoundingBox, n: int) -> DensityGrid:
    """Build an ``n`` x ``n`` density grid over ``bbox`` from the points ``xy``."""
    if n < 2:
        raise InvalidConfiguration(f"Grid resolution must be >= 2, got {n}")
    xy = np.asarray(xy, dtype=np.float64)
    bw_x, bw_y = scott_bandwidth(xy)

    xs = np.linspace(bbox.x_min, bbox.x_max, n)
    ys = np.linspace(bbox.y_min, bbox.y_max, n)
    gx, gy = np.meshgrid(xs, ys)  # row j = ys[j]
    cells_x = gx.ravel()[:, None]
    cells_y = gy.ravel()[:, None]

    total = np.zeros(n * n)
    for start in range(0, len(xy), _CHUNK):
        block = xy[start:start + _CHUNK]
        u = (cells_x - block[:, 0]) / bw_x
        v = (cells_y - block[:, 1]) / bw_y
        total += gauss_kernel(u, v).sum(axis=1)

    values = (total / (len(xy) * bw_x * bw_y)).reshape(n, n)
    return DensityGrid(values=values, bbox=bbox, bandwidth=(bw_x, bw_y))
