"""Silhouette coefficient per point, normalized to [0, 1].

s(i) = (b - a) / max(a, b), where a is the mean distance to the other
members of the point's category and b the smallest mean distance to any
other category. Stored as (s + 1) / 2.
"""

from __future__ import annotations

from typing import Hashable, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import cdist

# Rows of the distance matrix held at once; bounds memory at _CHUNK x P.
_CHUNK = 512


def group_indices(categories: Sequence[Hashable]) -> dict[Hashable, NDArray[np.int64]]:
    """Row indices per category, in order of first appearance."""
    groups: dict[Hashable, list[int]] = {}
    for i, c in enumerate(categories):
        groups.setdefault(c, []).append(i)
    return {c: np.asarray(idx, dtype=np.int64) for c, idx in groups.items()}


def score_silhouettes(xy: NDArray[np.float64], categories: Sequence[Hashable]) -> NDArray[np.float64]:
    """Normalized silhouette value for every row of ``xy``.

    With fewer than two categories no distances are computed and every
    value is 1. Singleton categories get s = 0, i.e. a value of 0.5.
    """
    xy = np.asarray(xy, dtype=np.float64)
    groups = group_indices(categories)
    if len(groups) < 2:
        return np.ones(len(xy))

    labels = list(groups)
    # summed distance from every point to every category: (P, C)
    sums = np.empty((len(xy), len(groups)))
    for start in range(0, len(xy), _CHUNK):
        dist = cdist(xy[start:start + _CHUNK], xy)
        sums[start:start + _CHUNK] = np.column_stack([dist[:, idx].sum(axis=1) for idx in groups.values()])
    sizes = np.array([len(idx) for idx in groups.values()], dtype=np.float64)

    values = np.empty(len(xy))
    for col, (label, idx) in enumerate(groups.items()):
        size = sizes[col]
        if size > 1:
            a = sums[idx, col] / (size - 1)
        else:
            a = np.zeros(len(idx))
        others = [k for k in range(len(labels)) if k != col]
        b = (sums[np.ix_(idx, others)] / sizes[others]).min(axis=1)
        denom = np.maximum(a, b)
        s = np.zeros(len(idx))
        if size > 1:
            ok = denom > 0
            s[ok] = (b[ok] - a[ok]) / denom[ok]
        values[idx] = (s + 1.0) / 2.0

    return np.clip(values, 0.0, 1.0)
