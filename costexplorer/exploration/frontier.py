# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Pareto filtering and the hypervolume indicator (all costs minimized)."""

from typing import List, Sequence

import numpy as np


def pareto_filter(points: Sequence[Sequence[float]]) -> List[tuple]:
    """Non-dominated subset of ``points``, in input order.

    Duplicates are reported once.
    """
    if len(points) == 0:
        return []

    matrix = np.asarray(points, dtype=float)
    keep = []
    seen = set()
    for i, row in enumerate(matrix):
        key = tuple(row.tolist())
        if key in seen:
            continue
        no_worse = np.all(matrix <= row, axis=1)
        better = np.any(matrix < row, axis=1)
        if np.any(no_worse & better):
            continue
        seen.add(key)
        keep.append(tuple(points[i]))
    return keep


def hypervolume(points: Sequence[Sequence[float]], reference: Sequence[float]) -> float:
    """Volume dominated by ``points`` and bounded by ``reference``.

    Points not strictly better than the reference in every dimension add
    nothing.
    """
    ref = np.asarray(reference, dtype=float)
    if len(points) == 0:
        return 0.0

    matrix = np.asarray(points, dtype=float)
    if matrix.shape[1] != ref.shape[0]:
        raise ValueError(
            f"Points have {matrix.shape[1]} dimensions, reference has {ref.shape[0]}"
        )
    matrix = matrix[np.all(matrix < ref, axis=1)]
    return _hypervolume_recursive(matrix, ref)


def _hypervolume_recursive(points: np.ndarray, reference: np.ndarray) -> float:
    """Slice along the last dimension and recurse on the remaining ones."""
    if len(points) == 0:
        return 0.0
    if points.shape[1] == 1:
        return float(reference[0] - np.min(points[:, 0]))

    order = np.argsort(points[:, -1], kind="stable")
    points = points[order]
    volume = 0.0
    for k in range(len(points)):
        upper = points[k + 1, -1] if k + 1 < len(points) else reference[-1]
        depth = upper - points[k, -1]
        if depth > 0:
            volume += depth * _hypervolume_recursive(points[: k + 1, :-1], reference[:-1])
    return float(volume)
