"""Principal direction of small symmetric covariance matrices."""

from __future__ import annotations

import math

import numpy as np

_PI = 3.14159265358979323846


def _as_square(cov, dim: int) -> np.ndarray:
    array = np.asarray(cov, dtype=np.float64)
    if array.shape != (dim, dim):
        raise ValueError(f"expected a {dim} x {dim} matrix, got shape {array.shape}")
    return array


def _normalised_column(product: np.ndarray) -> np.ndarray:
    """First column of product that is not numerically zero, normalised."""
    for column in product.T:
        norm = math.sqrt(float(np.dot(column, column)))
        if norm >= 1.0e-15:
            return column / norm
    unit = np.zeros(product.shape[0])
    unit[0] = 1.0
    return unit


def solve_evp_2(cov) -> np.ndarray:
    """Unit eigenvector of the largest eigenvalue of a symmetric 2 x 2 matrix.

    Returns the zero vector when the largest eigenvalue is numerically zero.
    """
    c = _as_square(cov, 2)
    direction = np.zeros(2)
    diag_sum = c[0, 0] + c[1, 1]
    det = c[0, 0] * c[1, 1] - c[0, 1] * c[1, 0]
    discriminant = diag_sum * diag_sum / 4.0 - det
    if discriminant < 0:
        return direction
    root = math.sqrt(discriminant)
    largest = diag_sum / 2.0 + root
    smallest = diag_sum / 2.0 - root
    if abs(largest) > 1e-16:
        return _normalised_column(c - smallest * np.eye(2))
    return direction


def solve_evp_3(cov) -> np.ndarray:
    """Unit eigenvector of the largest eigenvalue of a symmetric 3 x 3 matrix.

    A diagonal matrix gives the axis of its largest diagonal entry. Otherwise
    the zero vector is returned when the largest eigenvalue is numerically zero.
    """
    c = _as_square(cov, 3)
    direction = np.zeros(3)
    p1 = c[0, 1] ** 2 + c[0, 2] ** 2 + c[1, 2] ** 2
    if p1 < 1e-16:
        diagonal = np.diag(c)
        largest = diagonal[0]
        axis = 0
        if largest < diagonal[1]:
            largest = diagonal[1]
            axis = 1
        if largest < diagonal[2]:
            axis = 2
        direction[axis] = 1.0
        return direction

    identity = np.eye(3)
    q = float(c[0, 0] + c[1, 1] + c[2, 2]) / 3.0
    p2 = float(np.sum((np.diag(c) - q) ** 2)) + 2.0 * p1
    p = math.sqrt(p2 / 6.0)
    b = (c - q * identity) / p
    det_b = (
        b[0, 0] * (b[1, 1] * b[2, 2] - b[1, 2] * b[2, 1])
        - b[0, 1] * (b[1, 0] * b[2, 2] - b[1, 2] * b[2, 0])
        + b[0, 2] * (b[1, 0] * b[2, 1] - b[1, 1] * b[2, 0])
    )
    r = det_b / 2.0

    # For a symmetric matrix -1 <= r <= 1, up to rounding.
    if r <= -1:
        phi = _PI / 3.0
    elif r >= 1:
        phi = 0.0
    else:
        phi = math.acos(r) / 3.0

    first = q + 2.0 * p * math.cos(phi)
    third = q + 2.0 * p * math.cos(phi + 2.0 * _PI / 3.0)
    second = 3.0 * q - first - third

    if abs(second) < 1.0e-12:
        second = 0.0
    if abs(third) < 1.0e-12:
        third = 0.0

    if abs(first) < 1.0e-16:
        return direction
    product = (c - second * identity) @ (c - third * identity)
    return _normalised_column(product)