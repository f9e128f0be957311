"""Small fixed-size points: cross product, printing and parsing."""

from __future__ import annotations

from collections.abc import Sequence


def cross(a: Sequence[float], b: Sequence[float]) -> tuple[float, float, float]:
    """Cross product of two points in three dimensions."""
    if len(a) != 3 or len(b) != 3:
        raise ValueError("cross product needs two three-dimensional points")
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _format_number(value) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, complex):
        return f"({value.real:g},{value.imag:g})"
    return f"{value:g}"


def format_point(point: Sequence) -> str:
    """Bracketed, comma-separated coordinates; empty for an empty point."""
    if len(point) == 0:
        return ""
    return "[" + ",".join(_format_number(value) for value in point) + "]"


def parse_point(text: str, dim: int) -> tuple[float, ...]:
    """Read the first dim whitespace-separated coordinates of text."""
    tokens = text.split()
    if len(tokens) < dim:
        raise ValueError(f"expected {dim} coordinates, found {len(tokens)}")
    return tuple(float(token) for token in tokens[:dim])