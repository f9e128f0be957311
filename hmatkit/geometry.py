"""Reading point coordinates from mesh files."""

from __future__ import annotations

import os
from typing import Union

from .points import parse_point

PathLike = Union[str, "os.PathLike[str]"]


def load_gmsh_nodes(path: PathLike) -> list[tuple[float, ...]]:
    """Read the node coordinates of the $Nodes section of a GMSH mesh file."""
    with open(path, encoding="utf-8") as stream:
        lines = iter(stream)
        for line in lines:
            if line.strip() == "$Nodes":
                break
        else:
            raise ValueError(f"{path}: no $Nodes section")

        header = next(lines, "").split()
        if not header:
            raise ValueError(f"{path}: missing number of nodes")
        size = int(header[0])
        if size < 0:
            raise ValueError(f"{path}: negative number of nodes {size}")

        nodes = []
        for _ in range(size):
            line = next(lines, None)
            if line is None:
                raise ValueError(f"{path}: expected {size} nodes, found {len(nodes)}")
            tokens = line.split()
            if not tokens:
                raise ValueError(f"{path}: empty node line")
            nodes.append(parse_point(" ".join(tokens[1:]), 3))
    return nodes