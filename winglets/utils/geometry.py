"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula over an implicitly closed ring. Positive = CCW, Negative = CW."""
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def winding_direction(points: NDArray[np.float64]) -> int:
    """Return 1 for CCW, -1 for CW, 0 if degenerate."""
    sa = signed_area(points)
    if sa > 0:
        return 1
    elif sa < 0:
        return -1
    return 0


def orient_ccw(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return the ring in counter-clockwise order."""
    if winding_direction(points) < 0:
        return points[::-1].copy()
    return points


def centroid(points: NDArray[np.float64]) -> tuple[float, float]:
    """Compute centroid of a point set."""
    if len(points) == 0:
        return (0.0, 0.0)
    return (float(np.mean(points[:, 0])), float(np.mean(points[:, 1])))


def segment_lengths(points: NDArray[np.float64], closed: bool = False) -> NDArray[np.float64]:
    """Length of every edge of a polyline; with ``closed`` the last edge wraps to the first vertex."""
    if len(points) < 2:
        return np.zeros(0)
    nxt = np.roll(points, -1, axis=0) if closed else points[1:]
    cur = points if closed else points[:-1]
    return np.sqrt(np.sum((nxt - cur) ** 2, axis=1))


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    return np.concatenate([[0.0], np.cumsum(segment_lengths(points))])


def perimeter(points: NDArray[np.float64]) -> float:
    """Perimeter of an implicitly closed ring."""
    return float(np.sum(segment_lengths(points, closed=True)))


def scale_about(
    points: NDArray[np.float64],
    center: tuple[float, float],
    k: float,
) -> NDArray[np.float64]:
    """Affine scaling of every vertex about ``center``: v' = k * (v - c) + c."""
    c = np.asarray(center, dtype=np.float64)
    return k * (points - c) + c


def apply_transform(points: NDArray[np.float64], matrix: NDArray[np.float64]) -> NDArray[np.float64]:
    """Apply a 3x3 homogeneous 2D transform to an Nx2 array."""
    m = np.asarray(matrix, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError(f"Expected a 3x3 transform, got shape {m.shape}")
    homo = np.column_stack([points, np.ones(len(points))])
    out = homo @ m.T
    w = out[:, 2:3]
    w = np.where(np.abs(w) < 1e-12, 1.0, w)
    return out[:, :2] / w
