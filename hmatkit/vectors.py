"""Operations on vectors of real or complex numbers, and their storage in files."""

from __future__ import annotations

import os
import struct
from collections.abc import Sequence
from typing import Union

import numpy as np

_SIZE_FORMAT = "<i"
_SIZE_BYTES = struct.calcsize(_SIZE_FORMAT)

PathLike = Union[str, "os.PathLike[str]"]


def _as_array(u) -> np.ndarray:
    array = np.asarray(u)
    if array.ndim != 1:
        raise ValueError("expected a one-dimensional vector")
    return array


def _non_empty(u) -> np.ndarray:
    array = _as_array(u)
    if array.size == 0:
        raise ValueError("vector is empty")
    return array


def dprod(a, b):
    """Dot product of a and b; for complex values b is conjugated."""
    x = _as_array(a)
    y = _as_array(b)
    if x.shape != y.shape:
        raise ValueError(f"vectors have different sizes: {x.size} and {y.size}")
    result = np.sum(x * np.conj(y))
    return result.item() if hasattr(result, "item") else result


def norm2(u) -> float:
    """Euclidean norm of u."""
    return float(np.sqrt(abs(dprod(u, u))))


def abs_max(u):
    """The entry of u with the largest modulus (the first one on ties)."""
    array = _non_empty(u)
    return array[int(np.argmax(np.abs(array)))].item()


def abs_min(u):
    """The entry of u with the smallest modulus (the first one on ties)."""
    array = _non_empty(u)
    return array[int(np.argmin(np.abs(array)))].item()


def argmax(u) -> int:
    """Index of the entry of u with the largest modulus (the first one on ties)."""
    return int(np.argmax(np.abs(_non_empty(u))))


def mean(u):
    """Arithmetic mean of the entries of u."""
    array = _non_empty(u)
    return (np.sum(array) / array.size).item()


def vector_to_bytes(vector: Sequence, path: PathLike) -> None:
    """Write a vector as its length (32-bit int) followed by its raw values."""
    array = _as_array(vector)
    if array.dtype.kind not in "biufc":
        raise TypeError(f"cannot store values of type {array.dtype}")
    little = array.astype(array.dtype.newbyteorder("<"), copy=False)
    with open(path, "wb") as out:
        out.write(struct.pack(_SIZE_FORMAT, array.size))
        out.write(little.tobytes())


def bytes_to_vector(path: PathLike, dtype=np.float64) -> np.ndarray:
    """Read a vector written by vector_to_bytes, with values of the given dtype."""
    value_type = np.dtype(dtype).newbyteorder("<")
    with open(path, "rb") as stream:
        header = stream.read(_SIZE_BYTES)
        if len(header) != _SIZE_BYTES:
            raise ValueError(f"{path}: missing vector size")
        (size,) = struct.unpack(_SIZE_FORMAT, header)
        if size < 0:
            raise ValueError(f"{path}: negative vector size {size}")
        payload = stream.read(size * value_type.itemsize)
    if len(payload) != size * value_type.itemsize:
        raise ValueError(f"{path}: expected {size} values, file is truncated")
    return np.frombuffer(payload, dtype=value_type).astype(np.dtype(dtype))


def _format_value(value: float) -> str:
    return f"{value:.18g}"


def matlab_save(vector: Sequence, path: PathLike) -> None:
    """Write a vector one complex entry per line, readable by dlmread."""
    lines = []
    for entry in _as_array(vector):
        value = complex(entry)
        text = _format_value(value.real)
        if value.imag < 0:
            text += _format_value(value.imag) + "i\t"
        elif value.imag == 0:
            text += "+0i\t"
        else:
            text += "+" + _format_value(value.imag) + "i\t"
        lines.append(text + "\n")
    with open(path, "w", encoding="ascii") as out:
        out.writelines(lines)