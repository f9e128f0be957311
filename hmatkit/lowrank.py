"""Low-rank approximations U V of matrix blocks."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from .matrix import Matrix


class LowRankGenerator(ABC):
    """Computes low-rank factors of a block of a generator."""

    @abstractmethod
    def approximate(self, epsilon, rank, generator, rows, cols, target, xt, source, xs):
        """Return (rank, U, V) approximating the block rows x cols.

        A requested rank of -1 asks for the precision epsilon instead. A
        returned rank of -1 means that no advantageous approximation was
        found, in which case U and V are None. Otherwise U has shape
        (len(rows), rank) and V shape (rank, len(cols)).
        """


class LowRankMatrix:
    """A block approximated as the product of two thin matrices."""

    def __init__(
        self,
        dimension: int,
        rows: Sequence[int],
        cols: Sequence[int],
        rank: int = -1,
        epsilon: float = 1e-3,
        offset_i: int = 0,
        offset_j: int = 0,
    ):
        dimension = int(dimension)
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.dimension = dimension
        self.rows = tuple(int(row) for row in rows)
        self.cols = tuple(int(col) for col in cols)
        self.rank = int(rank)
        self.epsilon = float(epsilon)
        self.offset_i = int(offset_i)
        self.offset_j = int(offset_j)
        self.U: Matrix | None = None
        self.V: Matrix | None = None

    @property
    def nb_rows(self) -> int:
        return self.dimension * len(self.rows)

    @property
    def nb_cols(self) -> int:
        return self.dimension * len(self.cols)

    @property
    def is_built(self) -> bool:
        return self.U is not None and self.V is not None

    def __repr__(self) -> str:
        return f"LowRankMatrix({self.nb_rows} x {self.nb_cols}, rank={self.rank})"

    def build(self, generator, compressor: LowRankGenerator, target, xt, source, xs) -> None:
        """Compute the factors; a rank of 0 gives the zero block."""
        if self.rank == 0:
            self.U = Matrix(self.nb_rows, 1)
            self.V = Matrix(1, self.nb_cols)
            return
        rank, u, v = compressor.approximate(
            self.epsilon, self.rank, generator, list(self.rows), list(self.cols), target, xt, source, xs
        )
        self.rank = int(rank)
        if self.rank > 0:
            u = np.asarray(u)
            v = np.asarray(v)
            if u.shape != (self.nb_rows, self.rank) or v.shape != (self.rank, self.nb_cols):
                raise ValueError(
                    f"factors of shapes {u.shape} and {v.shape} do not fit a "
                    f"{self.nb_rows} x {self.nb_cols} block of rank {self.rank}"
                )
            self.U = Matrix(self.nb_rows, self.rank, u)
            self.V = Matrix(self.rank, self.nb_cols, v)
        else:
            self.U = None
            self.V = None

    def _require_built(self) -> tuple[Matrix, Matrix]:
        if self.U is None or self.V is None:
            raise RuntimeError("low-rank matrix has not been built")
        return self.U, self.V

    def mvprod(self, x) -> np.ndarray:
        """Product of the approximation with a vector."""
        array = np.asarray(x).reshape(-1)
        if array.size != self.nb_cols:
            raise ValueError(f"expected {self.nb_cols} values, got {array.size}")
        if self.rank == 0:
            return np.zeros(self.nb_rows, dtype=np.result_type(array.dtype, np.float64))
        u, v = self._require_built()
        return u.mvprod(v.mvprod(array))

    def __matmul__(self, x) -> np.ndarray:
        return self.mvprod(x)

    def add_mvprod_row_major(self, x, out: np.ndarray, mu: int = 1, transb: str = "T", op: str = "N") -> np.ndarray:
        """Add the product with mu row-major vectors to out in place and return out."""
        if self.rank == 0:
            return out
        u, v = self._require_built()
        if op == "N":
            inner = v.mvprod_row_major(x, mu, transb, op)
            u.add_mvprod_row_major(inner, out, mu, transb, op)
        elif op in ("T", "C"):
            inner = u.mvprod_row_major(x, mu, transb, op)
            v.add_mvprod_row_major(inner, out, mu, transb, op)
        else:
            raise ValueError(f"invalid operation {op!r}")
        return out

    def get_whole_matrix(self) -> np.ndarray:
        """The dense block U V."""
        u, v = self._require_built()
        return np.asarray(u) @ np.asarray(v)

    def compression_ratio(self) -> float:
        """Entries of the dense block per stored entry."""
        if self.rank <= 0:
            raise ValueError(f"no compression ratio for rank {self.rank}")
        return (self.nb_rows * self.nb_cols) / (self.rank * (self.nb_rows + self.nb_cols))

    def space_saving(self) -> float:
        """Fraction of the dense storage that is saved."""
        return 1.0 - self.rank * (1.0 / self.nb_rows + 1.0 / self.nb_cols)

    def __str__(self) -> str:
        lines = [f"rank:\t{self.rank}", f"nr:\t{self.nb_rows}", f"nc:\t{self.nb_cols}"]
        if self.is_built:
            lines.append("U:")
            lines.append(str(np.asarray(self.U)))
            lines.append(str(np.asarray(self.V)))
        return "\n".join(lines)


def _residual(lrmat: LowRankMatrix, reference, reqrank: int) -> tuple[np.ndarray, np.ndarray]:
    if reqrank == -1:
        reqrank = lrmat.rank
    if reqrank > lrmat.rank:
        raise ValueError(f"requested rank {reqrank} exceeds the rank {lrmat.rank}")
    if reqrank < 0:
        raise ValueError(f"invalid requested rank {reqrank}")
    block = np.asarray(reference.copy_submatrix(list(lrmat.rows), list(lrmat.cols)))
    if reqrank == 0:
        return block, block
    u, v = lrmat._require_built()
    approximation = np.asarray(u)[:, :reqrank] @ np.asarray(v)[:reqrank, :]
    return block, block - approximation


def frobenius_relative_error(lrmat: LowRankMatrix, reference, reqrank: int = -1) -> float:
    """Frobenius error of the first reqrank terms relative to the reference block."""
    block, residual = _residual(lrmat, reference, reqrank)
    norm = float(np.sum(np.abs(block) ** 2))
    error = float(np.sum(np.abs(residual) ** 2))
    return math.sqrt(error / norm) if norm else math.nan


def frobenius_absolute_error(lrmat: LowRankMatrix, reference, reqrank: int = -1) -> float:
    """Frobenius error of the first reqrank terms against the reference block."""
    _, residual = _residual(lrmat, reference, reqrank)
    return math.sqrt(float(np.sum(np.abs(residual) ** 2)))