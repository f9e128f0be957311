"""Cluster trees of points, built by recursive splitting."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum

import numpy as np

from .eigen import solve_evp_2, solve_evp_3
from .splitting import SplittingType, geometric_splitting, regular_splitting


class DirectionMethod(Enum):
    """How the splitting direction of a cluster is chosen."""

    PCA = "pca"
    BOUNDING_BOX = "bounding_box"


def _as_points(points) -> np.ndarray:
    array = np.asarray(points, dtype=np.float64)
    if array.ndim != 2:
        raise ValueError("points must be an array of shape (number of points, dimension)")
    return array


def pca_direction(points, num: Sequence[int], center, masses) -> np.ndarray:
    """Principal axis of the weighted covariance of the points in num."""
    x = _as_points(points)
    indices = np.asarray(num, dtype=int)
    offsets = x[indices] - np.asarray(center, dtype=np.float64)
    weights = np.asarray(masses, dtype=np.float64)[indices]
    cov = (offsets * weights[:, None]).T @ offsets
    dim = x.shape[1]
    if dim == 2:
        return solve_evp_2(cov)
    if dim == 3:
        return solve_evp_3(cov)
    raise ValueError(f"clustering is not defined for spatial dimension {dim}, only 2 and 3")


def bounding_box_direction(points, num: Sequence[int]) -> np.ndarray:
    """Unit vector along the axis of largest extent of the points in num."""
    x = _as_points(points)
    direction = np.zeros(x.shape[1])
    coords = x[np.asarray(num, dtype=int)]
    axis = 0
    if coords.shape[0]:
        axis = int(np.argmax(coords.max(axis=0) - coords.min(axis=0)))
    direction[axis] = 1.0
    return direction


class Cluster:
    """A node of a cluster tree; the root holds the permutation of the points.

    After build, the points of a node are permutation[offset:offset + size].
    """

    def __init__(
        self,
        space_dim: int = 3,
        direction_method: DirectionMethod = DirectionMethod.PCA,
        splitting: SplittingType = SplittingType.GEOMETRIC,
        minclustersize: int = 10,
    ):
        space_dim = int(space_dim)
        minclustersize = int(minclustersize)
        if space_dim < 1:
            raise ValueError(f"space dimension must be positive, got {space_dim}")
        if minclustersize < 1:
            raise ValueError(f"minimal cluster size must be positive, got {minclustersize}")
        self.space_dim = space_dim
        self.direction_method = DirectionMethod(direction_method)
        self.splitting = SplittingType(splitting)
        self.minclustersize = minclustersize
        self.offset = 0
        self.size = 0
        self.depth = 0
        self.counter = 0
        self.rank = -1
        self.center = np.zeros(space_dim)
        self.radius = 0.0
        self.sons: list[Cluster] = []
        self.root: Cluster = self
        self._permutation: list[int] = []
        self._master_offsets: list[tuple[int, int]] = []
        self._local_cluster: Cluster | None = None
        self._max_depth = 0
        self._min_depth = -1

    def __repr__(self) -> str:
        return (
            f"Cluster(depth={self.depth}, counter={self.counter}, rank={self.rank}, "
            f"offset={self.offset}, size={self.size})"
        )

    # --- tree-wide information, kept by the root ------------------------------

    @property
    def permutation(self) -> list[int]:
        """Point indices in cluster order."""
        return list(self.root._permutation)

    @property
    def master_offsets(self) -> list[tuple[int, int]]:
        """(offset, size) of the cluster of each partition."""
        return list(self.root._master_offsets)

    @property
    def local_cluster(self) -> Cluster | None:
        """The cluster of the partition given to build."""
        return self.root._local_cluster

    @property
    def max_depth(self) -> int:
        return self.root._max_depth

    @property
    def min_depth(self) -> int:
        return self.root._min_depth

    @property
    def local_offset(self) -> int:
        return self._require_local().offset

    @property
    def local_size(self) -> int:
        return self._require_local().size

    def _require_local(self) -> Cluster:
        local = self.local_cluster
        if local is None:
            raise ValueError("cluster tree has not been built")
        return local

    # --- structure --------------------------------------------------------------

    def is_leaf(self) -> bool:
        return not self.sons

    def iter_nodes(self) -> Iterator[Cluster]:
        """All nodes of the subtree, depth first, each before its sons."""
        stack: list[Cluster] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.sons))

    def local_permutation(self) -> list[int]:
        """Point indices of the local cluster, in cluster order."""
        local = self._require_local()
        return self.root._permutation[local.offset : local.offset + local.size]

    # --- building ---------------------------------------------------------------

    def _make_son(self, counter: int, depth: int) -> Cluster:
        son = Cluster(self.space_dim, self.direction_method, self.splitting, self.minclustersize)
        son.root = self.root
        son.counter = counter
        son.depth = depth
        return son

    def _set_geometry(self, x: np.ndarray, radii: np.ndarray, masses: np.ndarray, num: list[int]) -> None:
        indices = np.asarray(num, dtype=int)
        coords = x[indices]
        weights = masses[indices]
        total = float(weights.sum())
        if indices.size and total != 0:
            self.center = (weights @ coords) / total
        else:
            self.center = np.zeros(self.space_dim)
        radius = 0.0
        if indices.size:
            distances = np.linalg.norm(coords - self.center, axis=1) + radii[indices]
            radius = max(radius, float(distances.max()))
        self.radius = radius

    def _direction(self, x: np.ndarray, masses: np.ndarray, num: list[int]) -> np.ndarray:
        if self.direction_method is DirectionMethod.PCA:
            return pca_direction(x, num, self.center, masses)
        return bounding_box_direction(x, num)

    def _split(self, x: np.ndarray, num: list[int], nb_sons: int, direction: np.ndarray) -> list[list[int]]:
        if self.splitting is SplittingType.REGULAR:
            return regular_splitting(x, num, nb_sons, direction)
        return geometric_splitting(x, num, self.center, nb_sons, direction)

    def _prepare_points(self, points) -> np.ndarray:
        x = np.asarray(points, dtype=np.float64)
        if x.ndim == 1:
            if x.size % self.space_dim:
                raise ValueError(f"{x.size} coordinates do not make points of dimension {self.space_dim}")
            return x.reshape(-1, self.space_dim)
        if x.ndim != 2 or x.shape[1] != self.space_dim:
            raise ValueError(f"points must have shape (n, {self.space_dim}), got {x.shape}")
        return x

    @staticmethod
    def _per_point(values, n: int, default: float, name: str) -> np.ndarray:
        if values is None:
            return np.full(n, default)
        array = np.asarray(values, dtype=np.float64).reshape(-1)
        if array.size != n:
            raise ValueError(f"{name} has {array.size} values, expected {n}")
        return array

    def build(
        self,
        points,
        radii=None,
        masses=None,
        nb_sons: int = 2,
        nb_partitions: int = 1,
        rank: int = 0,
        master_offsets=None,
    ) -> None:
        """Build the tree over the points.

        The root is split into one son per partition, given either by
        nb_partitions or by master_offsets, a sequence of contiguous
        (offset, size) pairs. Deeper clusters are split into nb_sons sons
        (-1 means two) until a son would be smaller than minclustersize.
        rank names the partition whose cluster becomes the local cluster.
        """
        if self.root is not self:
            raise ValueError("only a root cluster can be built")
        x = self._prepare_points(points)
        n = x.shape[0]
        r = self._per_point(radii, n, 0.0, "radii")
        g = self._per_point(masses, n, 1.0, "masses")

        nb_sons = int(nb_sons)
        if nb_sons == -1:
            nb_sons = 2
        if nb_sons < 1:
            raise ValueError(f"number of sons must be positive, got {nb_sons}")

        partition: list[tuple[int, int]] | None = None
        if master_offsets is not None:
            partition = [(int(offset), int(size)) for offset, size in master_offsets]
            expected = 0
            for offset, size in partition:
                if offset != expected or size < 0:
                    raise ValueError("master offsets must be contiguous from 0")
                expected += size
            if expected != n:
                raise ValueError(f"master offsets cover {expected} points, expected {n}")
            nb_partitions = len(partition)
        nb_partitions = int(nb_partitions)
        if nb_partitions < 1:
            raise ValueError(f"number of partitions must be positive, got {nb_partitions}")
        rank = int(rank)
        if not 0 <= rank < nb_partitions:
            raise ValueError(f"rank {rank} out of range for {nb_partitions} partitions")

        self.sons = []
        self.offset = 0
        self.size = n
        self.depth = 0
        self.counter = 0
        self.rank = -1
        self._permutation = list(range(n))
        self._master_offsets = [(0, 0)] * nb_partitions
        self._local_cluster = None
        self._max_depth = 0
        self._min_depth = -1

        stack: list[tuple[Cluster, list[int]]] = [(self, list(range(n)))]
        while stack:
            node, num = stack.pop()
            current_sons = nb_partitions if node.depth == 0 else nb_sons

            node._set_geometry(x, r, g, num)
            direction = node._direction(x, g, num)

            node.sons = [node._make_son(node.counter * current_sons + p, node.depth + 1) for p in range(current_sons)]

            if node.depth == 0 and partition is not None:
                numbering = [num[offset : offset + size] for offset, size in partition]
            else:
                numbering = node._split(x, num, current_sons, direction)

            count = 0
            for son, part in zip(node.sons, numbering):
                son.offset = node.offset + count
                son.size = len(part)
                count += len(part)
                if node.depth == 0:
                    son.rank = son.counter
                    if rank == son.counter:
                        self._local_cluster = son
                    self._master_offsets[son.counter] = (son.offset, son.size)
                else:
                    son.rank = node.rank

            if node.rank == -1 or all(len(part) >= self.minclustersize for part in numbering):
                stack.extend(zip(node.sons, numbering))
            else:
                self._max_depth = max(self._max_depth, node.depth)
                if self._min_depth < 0:
                    self._min_depth = node.depth
                else:
                    self._min_depth = min(self._min_depth, node.depth)
                node.sons = []
                self._permutation[node.offset : node.offset + len(num)] = num