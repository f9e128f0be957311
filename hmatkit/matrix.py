"""Dense column-major matrices and sub-matrices extracted from a generator."""

from __future__ import annotations

import os
import struct
import sys
from numbers import Number
from typing import IO, Union

import numpy as np

PathLike = Union[str, "os.PathLike[str]"]

_HEADER_FORMAT = "<ii"
_HEADER_BYTES = struct.calcsize(_HEADER_FORMAT)
_OPERATIONS = ("N", "T", "C")


def _format_entry(value) -> str:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, complex):
        return f"({value.real:g},{value.imag:g})"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _check_mu(mu: int) -> int:
    mu = int(mu)
    if mu < 1:
        raise ValueError(f"number of right-hand sides must be positive, got {mu}")
    return mu


class Matrix:
    """A dense nr x nc matrix stored column by column.

    ``data`` is either a two-dimensional array of shape (nr, nc) or a flat
    sequence of nr * nc values in column-major order. Without data the
    matrix is filled with zeros.
    """

    offset_i = 0
    offset_j = 0

    def __init__(self, nr: int = 0, nc: int = 0, data=None):
        nr, nc = int(nr), int(nc)
        if nr < 0 or nc < 0:
            raise ValueError(f"invalid matrix size {nr} x {nc}")
        if data is None:
            flat = np.zeros(nr * nc, dtype=np.float64)
        else:
            array = np.asarray(data)
            if array.ndim == 2:
                if array.shape != (nr, nc):
                    raise ValueError(f"data has shape {array.shape}, expected {(nr, nc)}")
                flat = array.reshape(-1, order="F").copy()
            elif array.ndim == 1:
                if array.size != nr * nc:
                    raise ValueError(f"data has {array.size} values, expected {nr * nc}")
                flat = array.copy()
            else:
                raise ValueError("data must be one- or two-dimensional")
            if flat.dtype.kind not in "biufc":
                raise TypeError(f"cannot build a matrix of type {flat.dtype}")
            if flat.dtype.kind in "biu":
                flat = flat.astype(np.float64)
        self._flat = flat
        self._values = flat.reshape((nr, nc), order="F")

    # --- shape and access -------------------------------------------------

    @property
    def nb_rows(self) -> int:
        return self._values.shape[0]

    @property
    def nb_cols(self) -> int:
        return self._values.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape

    @property
    def dtype(self) -> np.dtype:
        return self._values.dtype

    @property
    def values(self) -> np.ndarray:
        """Two-dimensional view of the entries; writes go to the matrix."""
        return self._values

    def data(self) -> np.ndarray:
        """Flat column-major view of the entries."""
        return self._flat

    def __getitem__(self, index):
        return self._values[index]

    def __setitem__(self, index, value) -> None:
        self._values[index] = value

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self._values, dtype=dtype)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.nb_rows}, {self.nb_cols}, dtype={self.dtype})"

    def fill(self, value) -> None:
        """Set every entry to value."""
        self._flat[:] = value

    # --- slices -------------------------------------------------------------

    def _slice_indices(self, start: int, length: int, stride: int) -> np.ndarray:
        if length < 0:
            raise ValueError(f"negative slice length {length}")
        indices = int(start) + int(stride) * np.arange(int(length))
        if indices.size and (indices.min() < 0 or indices.max() >= self._flat.size):
            raise IndexError("strided slice goes out of the matrix")
        return indices

    def get_stridedslice(self, start: int, length: int, stride: int) -> np.ndarray:
        """The length entries from start, stride apart, in column-major storage."""
        return self._flat[self._slice_indices(start, length, stride)]

    def set_stridedslice(self, start: int, length: int, stride: int, values) -> None:
        """Write values into the strided slice described as in get_stridedslice."""
        array = np.asarray(values).reshape(-1)
        if array.size != length:
            raise ValueError(f"expected {length} values, got {array.size}")
        self._flat[self._slice_indices(start, length, stride)] = array

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.nb_rows:
            raise IndexError(f"row {row} out of range for {self.nb_rows} rows")

    def _check_col(self, col: int) -> None:
        if not 0 <= col < self.nb_cols:
            raise IndexError(f"column {col} out of range for {self.nb_cols} columns")

    def get_row(self, row: int) -> np.ndarray:
        self._check_row(row)
        return self.get_stridedslice(row, self.nb_cols, self.nb_rows)

    def get_col(self, col: int) -> np.ndarray:
        self._check_col(col)
        return self.get_stridedslice(col * self.nb_rows, self.nb_rows, 1)

    def set_row(self, row: int, values) -> None:
        self._check_row(row)
        self.set_stridedslice(row, self.nb_cols, self.nb_rows, values)

    def set_col(self, col: int, values) -> None:
        self._check_col(col)
        self.set_stridedslice(col * self.nb_rows, self.nb_rows, 1, values)

    # --- arithmetic ---------------------------------------------------------

    def _new(self, values: np.ndarray) -> Matrix:
        return Matrix(self.nb_rows, self.nb_cols, values)

    def _check_same_shape(self, other: Matrix) -> None:
        if self.shape != other.shape:
            raise ValueError(f"matrices have different shapes: {self.shape} and {other.shape}")

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return self._new(self._values + other._values)

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other)
        return self._new(self._values - other._values)

    def __mul__(self, scalar):
        if not isinstance(scalar, Number):
            return NotImplemented
        return self._new(self._values * scalar)

    __rmul__ = __mul__

    def __matmul__(self, other):
        if isinstance(other, Matrix):
            if self.nb_cols != other.nb_rows:
                raise ValueError(f"cannot multiply {self.shape} by {other.shape}")
            return Matrix(self.nb_rows, other.nb_cols, self._values @ other._values)
        return self.mvprod(other)

    # --- products -----------------------------------------------------------

    def mvprod(self, x, mu: int = 1) -> np.ndarray:
        """Product with a vector, or with mu column-major stacked vectors."""
        mu = _check_mu(mu)
        array = np.asarray(x).reshape(-1)
        if array.size != self.nb_cols * mu:
            raise ValueError(f"expected {self.nb_cols * mu} values, got {array.size}")
        if mu == 1:
            return self._values @ array
        block = array.reshape((self.nb_cols, mu), order="F")
        return (self._values @ block).reshape(-1, order="F")

    def _row_major_product(self, x, mu: int, transb: str, op: str) -> np.ndarray:
        mu = _check_mu(mu)
        if op not in _OPERATIONS:
            raise ValueError(f"invalid operation {op!r}")
        if mu == 1:
            operator = {
                "N": self._values,
                "T": self._values.T,
                "C": self._values.conj().T,
            }[op]
        elif op in ("T", "C"):
            operator = self._values.T
        elif transb == "T":
            operator = self._values
        elif transb == "C":
            operator = self._values.conj()
        else:
            raise ValueError(f"invalid transposition {transb!r}")
        array = np.asarray(x).reshape(-1)
        size = operator.shape[1] * mu
        if array.size != size:
            raise ValueError(f"expected {size} values, got {array.size}")
        if mu == 1:
            return operator @ array
        return (operator @ array.reshape(operator.shape[1], mu)).reshape(-1)

    def mvprod_row_major(self, x, mu: int = 1, transb: str = "T", op: str = "N") -> np.ndarray:
        """Product with mu vectors stored row by row (x[k * mu + l]).

        op is "N", "T" or "C". With several vectors, "C" transposes without
        conjugating.
        """
        return self._row_major_product(x, mu, transb, op)

    def add_mvprod_row_major(self, x, out: np.ndarray, mu: int = 1, transb: str = "T", op: str = "N") -> np.ndarray:
        """Add the row-major product to out in place and return out."""
        if not isinstance(out, np.ndarray):
            raise TypeError("out must be a numpy array")
        if self.nb_rows and self.nb_cols:
            product = self._row_major_product(x, mu, transb, op)
            if product.size != out.size:
                raise ValueError(f"out has {out.size} values, expected {product.size}")
            out += product.reshape(out.shape)
        return out

    def add_mvprod_row_major_sym(self, x, out: np.ndarray, mu: int = 1, uplo: str = "U", symmetry: str = "S") -> np.ndarray:
        """Add the product with the symmetric or hermitian matrix read from one triangle.

        Only the triangle named by uplo ("U" or "L") is read. For real
        matrices symmetry is ignored; complex ones take "S" or "H". With
        several hermitian right-hand sides, the conjugate matrix is applied.
        """
        if not isinstance(out, np.ndarray):
            raise TypeError("out must be a numpy array")
        nr = self.nb_rows
        if not nr:
            return out
        if self.nb_rows != self.nb_cols:
            raise ValueError("symmetric product needs a square matrix")
        if uplo not in ("U", "L"):
            raise ValueError(f"invalid triangle {uplo!r}")
        values = self._values
        triangle = np.triu(values) if uplo == "U" else np.tril(values)
        diagonal = np.diag(np.diag(values))
        strict = triangle - diagonal
        if values.dtype.kind != "c" or symmetry == "S":
            full = strict + strict.T + diagonal
        elif symmetry == "H":
            full = strict + strict.conj().T + np.diag(np.diag(values).real)
        else:
            raise ValueError("invalid arguments for add_mvprod_row_major_sym")
        mu = _check_mu(mu)
        array = np.asarray(x).reshape(-1)
        if array.size != nr * mu:
            raise ValueError(f"expected {nr * mu} values, got {array.size}")
        if mu == 1:
            product = full @ array
        else:
            product = (full.T @ array.reshape(nr, mu)).reshape(-1)
        if product.size != out.size:
            raise ValueError(f"out has {out.size} values, expected {product.size}")
        out += product.reshape(out.shape)
        return out

    # --- search -------------------------------------------------------------

    def argmax(self) -> tuple[int, int]:
        """(row, column) of the first entry of largest modulus."""
        if self._flat.size == 0:
            raise ValueError("matrix is empty")
        position = int(np.argmax(np.abs(self._flat)))
        return position % self.nb_rows, position // self.nb_rows

    # --- storage ------------------------------------------------------------

    def to_bytes(self, path: PathLike) -> None:
        """Write the number of rows and columns (32-bit ints), then the raw entries."""
        little = self._flat.astype(self._flat.dtype.newbyteorder("<"), copy=False)
        with open(path, "wb") as out:
            out.write(struct.pack(_HEADER_FORMAT, self.nb_rows, self.nb_cols))
            out.write(little.tobytes())

    @classmethod
    def from_bytes(cls, path: PathLike) -> Matrix:
        """Read a matrix written by to_bytes.

        Entries are double precision, real or complex, as told by the file size.
        """
        with open(path, "rb") as stream:
            header = stream.read(_HEADER_BYTES)
            if len(header) != _HEADER_BYTES:
                raise ValueError(f"{path}: missing matrix size")
            rows, cols = struct.unpack(_HEADER_FORMAT, header)
            if rows < 0 or cols < 0:
                raise ValueError(f"{path}: invalid matrix size {rows} x {cols}")
            payload = stream.read()
        count = rows * cols
        if count == 0:
            dtype = np.dtype(np.float64)
        elif len(payload) == 8 * count:
            dtype = np.dtype(np.float64)
        elif len(payload) == 16 * count:
            dtype = np.dtype(np.complex128)
        else:
            raise ValueError(f"{path}: {len(payload)} bytes do not hold {count} entries")
        values = np.frombuffer(payload, dtype=dtype.newbyteorder("<")).astype(dtype)
        return Matrix(rows, cols, values)

    def print(self, stream: IO[str] | None = None, delimiter: str = ",") -> None:
        """Write the matrix row by row, entries separated by delimiter."""
        if stream is None:
            stream = sys.stdout
        for row in self._values:
            stream.write(delimiter.join(_format_entry(value) for value in row) + "\n")

    def csv_save(self, path: PathLike, delimiter: str = ",") -> None:
        """Save the matrix as delimited text."""
        with open(path, "w", encoding="ascii") as out:
            self.print(out, delimiter)


def norm_frob(matrix: Matrix) -> float:
    """Frobenius norm of a matrix."""
    return float(np.sqrt(np.sum(np.abs(np.asarray(matrix)) ** 2)))


class SubMatrix(Matrix):
    """The block of a larger matrix at the given row and column indices."""

    def __init__(self, rows, cols, offset_i: int = 0, offset_j: int = 0, data=None):
        self.rows = tuple(int(row) for row in rows)
        self.cols = tuple(int(col) for col in cols)
        super().__init__(len(self.rows), len(self.cols), data)
        self.offset_i = int(offset_i)
        self.offset_j = int(offset_j)

    @classmethod
    def from_generator(cls, generator, rows, cols, offset_i: int = 0, offset_j: int = 0) -> SubMatrix:
        """Fill the block with the generator's coefficients."""
        rows = [int(row) for row in rows]
        cols = [int(col) for col in cols]
        return cls(rows, cols, offset_i, offset_j, generator.copy_submatrix(rows, cols))

    def _new(self, values: np.ndarray) -> SubMatrix:
        return SubMatrix(self.rows, self.cols, self.offset_i, self.offset_j, values)

    def __repr__(self) -> str:
        return (
            f"SubMatrix({self.nb_rows}, {self.nb_cols}, offset_i={self.offset_i}, "
            f"offset_j={self.offset_j}, dtype={self.dtype})"
        )