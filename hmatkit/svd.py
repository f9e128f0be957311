"""Low-rank approximation by truncated singular value decomposition."""

from __future__ import annotations

import math

import numpy as np

from .lowrank import LowRankGenerator


class SVD(LowRankGenerator):
    """Truncated SVD: the best approximation of a given rank in Frobenius norm."""

    def approximate(self, epsilon, rank, generator, rows, cols, target=None, xt=None, source=None, xs=None):
        block = np.asarray(generator.copy_submatrix(list(rows), list(cols)))
        m, n = block.shape
        if m == 0 or n == 0:
            raise ValueError("cannot approximate an empty block")
        norm = math.sqrt(float(np.sum(np.abs(block) ** 2)))
        u, singular_values, vt = np.linalg.svd(block, full_matrices=True)

        rank = int(rank)
        if rank == -1:
            j = len(singular_values)
            tail = 0.0
            while True:
                j -= 1
                tail += abs(singular_values[j]) ** 2
                ratio = math.sqrt(tail) / norm if norm else math.nan
                if not (j > 0 and ratio < epsilon):
                    break
            reqrank = min(j + 1, min(m, n))
            if reqrank * (m + n) > m * n:
                reqrank = -1
        else:
            reqrank = min(rank, min(m, n))

        if reqrank <= 0:
            return reqrank, None, None
        left = u[:, :reqrank] * singular_values[:reqrank]
        right = vt[:reqrank, :]
        return reqrank, left, right