"""Synthetic clustered point sets for demos and tests."""

from __future__ import annotations

from typing import Hashable

import numpy as np


def generate_cluster(
    n: int,
    category: Hashable,
    x: float = 0.0,
    y: float = 0.0,
    sigma: float = 0.1,
    angle: float = 0.0,
    amplitude: float = 1.0,
    rng: np.random.Generator | None = None,
    clip: bool = True,
) -> list[tuple[float, float, Hashable, float]]:
    """Draw ``n`` Gaussian points around (x, y), stretched by ``amplitude`` along ``angle``.

    Points outside the open square (-1, 1)^2 are dropped when ``clip`` is set,
    so fewer than ``n`` points may come back. The 4th slot is a random
    placeholder; the engine overwrites it.
    """
    rng = rng or np.random.default_rng()
    z = rng.standard_normal((n, 2))

    # rotate -> stretch along x -> rotate back
    cos_a, sin_a = np.cos(angle), np.sin(angle)
    rot = np.array([[cos_a, -sin_a], [sin_a, cos_a]])
    stretch = np.diag([amplitude, 1.0])
    z = z @ (rot @ stretch @ rot.T).T

    xy = z * sigma + np.array([x, y])
    if clip:
        xy = xy[(np.abs(xy[:, 0]) < 1) & (np.abs(xy[:, 1]) < 1)]
    values = rng.random(len(xy))
    return [(float(px), float(py), category, float(v)) for (px, py), v in zip(xy, values)]


def sunflower_cluster(
    n: int,
    category: Hashable,
    x: float = 0.0,
    y: float = 0.0,
    sigma: float = 0.1,
) -> list[tuple[float, float, Hashable, float]]:
    """Deterministic Gaussian-profile cluster on a golden-angle spiral.

    Radii follow the inverse CDF of a 2D Gaussian's radial distribution at
    evenly spaced quantiles, so the sample is smooth and reproducible.
    """
    k = np.arange(n)
    q = (k + 0.5) / n
    r = sigma * np.sqrt(-2.0 * np.log(1.0 - q))
    theta = k * np.pi * (3.0 - np.sqrt(5.0))
    px = x + r * np.cos(theta)
    py = y + r * np.sin(theta)
    return [(float(a), float(b), category, 0.0) for a, b in zip(px, py)]
