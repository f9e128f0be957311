# hmatkit

Building blocks for hierarchical matrices (H-matrices), written in Python on top of numpy.

## What it provides

- `hmatkit.clustering.Cluster` builds a cluster tree over a point cloud in two or three
  dimensions. The splitting direction comes from one of two methods, chosen with
  `DirectionMethod`. `DirectionMethod.PCA` uses the principal axis of the weighted
  covariance (`pca_direction`). `DirectionMethod.BOUNDING_BOX` uses the widest axis of
  the bounding box (`bounding_box_direction`). The points are then shared out between
  the sons with `SplittingType.GEOMETRIC` or `SplittingType.REGULAR`. Those two
  strategies are also available as `hmatkit.splitting.geometric_splitting` and
  `regular_splitting`.
  - The root is split into one son per partition. The partitions are given either by
    `nb_partitions` or by explicit `master_offsets`.
  - Deeper clusters get `nb_sons` sons each. Splitting stops once a son would hold fewer
    points than `minclustersize`.
  - After `build`, a node holds the points `permutation[offset:offset + size]`.
  - `iter_nodes`, `local_cluster`, `local_permutation`, `master_offsets`, `max_depth` and
    `min_depth` let you inspect the tree.
- `hmatkit.eigen.solve_evp_2` and `solve_evp_3` return the dominant eigenvector of a
  small symmetric matrix.
- `hmatkit.admissibility.RjasanowSteinbach` decides whether a pair of clusters (anything
  with a `center` and a `radius`) is far enough apart to be compressed.
  `AdmissibilityCondition` is the base class for other conditions.
- `hmatkit.lowrank.LowRankMatrix` holds a block approximated as `U V`. It is built by a
  compressor that implements `LowRankGenerator.approximate`.
  - `hmatkit.svd.SVD` is one such compressor, based on the truncated singular value
    decomposition. It works either at a fixed rank or to a precision `epsilon`. When no
    rank is advantageous, it returns rank -1.
  - `frobenius_absolute_error` and `frobenius_relative_error` measure the error of the
    first `reqrank` terms against the reference block.
- `hmatkit.matrix.Matrix` and `SubMatrix` are dense column-major blocks.
  - They provide the products used by H-matrix kernels: `mvprod`, `mvprod_row_major`,
    `add_mvprod_row_major` and `add_mvprod_row_major_sym`.
  - They support strided slices, `argmax`, binary storage (`to_bytes`, `from_bytes`) and
    text output (`print`, `csv_save`).
  - `norm_frob` gives the Frobenius norm of a block.
- `hmatkit.generator.Generator` is the interface for matrix coefficients. A generator
  implements `copy_submatrix(rows, cols)`. `ZeroGenerator` returns zeros only.
- `hmatkit.vectors` offers `dprod`, `norm2`, `abs_max`, `abs_min`, `argmax` and `mean`.
  It also handles vector files:
  - `vector_to_bytes` and `bytes_to_vector` write and read a binary file: a 32-bit length
    followed by the raw values.
  - `matlab_save` writes a text file readable by `dlmread`.
- `hmatkit.points` offers `cross`, `format_point` and `parse_point`.
- `hmatkit.geometry.load_gmsh_nodes` reads the node coordinates from the `$Nodes`
  section of a GMSH mesh file.
- `hmatkit.version` has functions that compare the library version with a given one:
  `version_eq`, `version_lt`, `version_le`, `version_gt` and `version_ge`.

## Example

```python
import numpy as np
from hmatkit.clustering import Cluster
from hmatkit.generator import Generator
from hmatkit.lowrank import LowRankMatrix, frobenius_absolute_error
from hmatkit.svd import SVD


class Laplace(Generator):
    def __init__(self, xt, xs):
        super().__init__(len(xt), len(xs), 1)
        self.xt, self.xs = xt, xs

    def copy_submatrix(self, rows, cols):
        d = self.xt[rows][:, None, :] - self.xs[cols][None, :, :]
        return 1.0 / (4 * np.pi * np.sqrt(1e-5 + (d ** 2).sum(axis=-1)))


rng = np.random.default_rng(1)
xt = rng.random((500, 3))
xs = rng.random((100, 3)) + [20.0, 0.0, 0.0]

t = Cluster(3)
t.build(xt)
s = Cluster(3)
s.build(xs)

A = Laplace(xt, xs)
block = LowRankMatrix(1, t.permutation, s.permutation, epsilon=1e-4)
block.build(A, SVD(), t, xt, s, xs)
print(block.rank, frobenius_absolute_error(block, A))
```

## What it does not do

The package provides the pieces that a hierarchical matrix is made of, not the matrix
itself. It does not:

- walk a pair of cluster trees to assemble a complete hierarchical matrix;
- compute products with such a matrix;
- solve linear systems;
- distribute work across processes.

The only compressor it includes is `SVD`. There is no command-line tool.

## Tests

```
pip install -e ".[test]"
pytest
```