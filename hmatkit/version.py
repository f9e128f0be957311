"""Library version number and comparisons against it."""

from __future__ import annotations

VERSION_MAJOR = 0
VERSION_MINOR = 8
VERSION_SUBMINOR = 1

VERSION = (VERSION_MAJOR, VERSION_MINOR, VERSION_SUBMINOR)


def _other(major: int, minor: int, subminor: int) -> tuple[int, int, int]:
    return (int(major), int(minor), int(subminor))


def version_eq(major: int, minor: int, subminor: int) -> bool:
    """True if the library version equals the given one."""
    return VERSION == _other(major, minor, subminor)


def version_lt(major: int, minor: int, subminor: int) -> bool:
    """True if the library version is older than the given one."""
    return VERSION < _other(major, minor, subminor)


def version_le(major: int, minor: int, subminor: int) -> bool:
    """True if the library version is older than or equal to the given one."""
    return version_lt(major, minor, subminor) or version_eq(major, minor, subminor)


def version_gt(major: int, minor: int, subminor: int) -> bool:
    """True if the library version is newer than the given one."""
    return not version_le(major, minor, subminor)


def version_ge(major: int, minor: int, subminor: int) -> bool:
    """True if the library version is newer than or equal to the given one."""
    return not version_lt(major, minor, subminor)