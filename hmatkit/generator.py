"""Sources of matrix coefficients."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np


class Generator(ABC):
    """Gives the coefficients of an nr x nc matrix on demand."""

    dtype = np.float64

    def __init__(self, nr: int, nc: int, dimension: int = 1):
        nr, nc, dimension = int(nr), int(nc), int(dimension)
        if nr < 0 or nc < 0:
            raise ValueError(f"invalid matrix size {nr} x {nc}")
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.nr = nr
        self.nc = nc
        self.dimension = dimension

    @property
    def nb_rows(self) -> int:
        return self.nr

    @property
    def nb_cols(self) -> int:
        return self.nc

    @abstractmethod
    def copy_submatrix(self, rows: Sequence[int], cols: Sequence[int]) -> np.ndarray:
        """The block of coefficients at rows x cols, shape (len(rows), len(cols))."""


class ZeroGenerator(Generator):
    """A generator whose coefficients are all zero."""

    def copy_submatrix(self, rows: Sequence[int], cols: Sequence[int]) -> np.ndarray:
        return np.zeros((len(rows), len(cols)), dtype=self.dtype)