"""Ways to split the points of a cluster between its sons."""

from __future__ import annotations

from enum import Enum

import numpy as np


class SplittingType(Enum):
    """How a cluster's points are shared out between its sons."""

    GEOMETRIC = "geometric"
    REGULAR = "regular"


def _as_points(points) -> np.ndarray:
    array = np.asarray(points, dtype=np.float64)
    if array.ndim != 2:
        raise ValueError("points must be an array of shape (number of points, dimension)")
    return array


def _as_direction(direction, dim: int) -> np.ndarray:
    array = np.asarray(direction, dtype=np.float64).reshape(-1)
    if array.size != dim:
        raise ValueError(f"direction has {array.size} components, expected {dim}")
    return array


def _check_sons(nb_sons: int) -> int:
    nb_sons = int(nb_sons)
    if nb_sons < 1:
        raise ValueError(f"number of sons must be positive, got {nb_sons}")
    return nb_sons


def _misplaced(order: list[int], nb_sons: int, size: int) -> int:
    """How many entries fall outside the index range of their chunk."""
    total = len(order)
    count = 0
    start = 0
    for _ in range(nb_sons - 1):
        count += sum(not (start <= value < start + size) for value in order[start : start + size])
        start += size
    count += sum(not (start <= value < total) for value in order[start:])
    return count


def regular_splitting(points, num: list[int], nb_sons: int, direction) -> list[list[int]]:
    """Split num into nb_sons chunks of equal size along direction.

    num is reordered in place: sorted by projection on direction, possibly
    reversed so that fewer indices leave their position range. The last son
    takes the remainder.
    """
    nb_sons = _check_sons(nb_sons)
    x = _as_points(points)
    d = _as_direction(direction, x.shape[1])
    projection = {index: float(x[index] @ d) for index in num}
    num.sort(key=projection.__getitem__)

    size = len(num) // nb_sons
    if _misplaced(num[::-1], nb_sons, size) < _misplaced(num, nb_sons, size):
        num.reverse()

    numbering = [num[p * size : (p + 1) * size] for p in range(nb_sons - 1)]
    numbering.append(num[(nb_sons - 1) * size :])
    return numbering


def geometric_splitting(points, num: list[int], center, nb_sons: int, direction) -> list[list[int]]:
    """Split num into nb_sons slabs of equal width along direction.

    With two sons the split is at the cluster center. Otherwise slabs span the
    extent of the projections; if one of them is empty a regular splitting is
    done instead, which reorders num in place.
    """
    nb_sons = _check_sons(nb_sons)
    x = _as_points(points)
    d = _as_direction(direction, x.shape[1])
    numbering: list[list[int]] = [[] for _ in range(nb_sons)]

    if nb_sons == 2:
        c = _as_direction(center, x.shape[1])
        for index in num:
            if float((x[index] - c) @ d) > 0:
                numbering[0].append(index)
            else:
                numbering[1].append(index)
        return numbering

    if len(num) > 1:
        projections = x[np.asarray(num, dtype=int)] @ d
        low = num[int(np.argmin(projections))]
        high = num[len(num) - 1 - int(np.argmax(projections[::-1]))]
        length = float((x[high] - x[low]) @ d) / nb_sons
        if length <= 0:
            return regular_splitting(x, num, nb_sons, d)
        for index in num:
            slab = int(float((x[index] - x[low]) @ d) / length)
            numbering[min(max(slab, 0), nb_sons - 1)].append(index)
        if any(not son for son in numbering):
            return regular_splitting(x, num, nb_sons, d)

    return numbering