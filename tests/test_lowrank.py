import numpy as np
import pytest

from hmatkit.generator import Generator
from hmatkit.lowrank import (
    LowRankGenerator,
    LowRankMatrix,
    frobenius_absolute_error,
    frobenius_relative_error,
)

NR = 12
NC = 8


class RankTwoGenerator(Generator):
    def __init__(self):
        super().__init__(NR, NC)
        rng = np.random.default_rng(3)
        self.left = rng.normal(size=(NR, 2))
        self.right = rng.normal(size=(2, NC))

    def copy_submatrix(self, rows, cols):
        return self.left[list(rows)] @ self.right[:, list(cols)]


class ExactFactors(LowRankGenerator):
    def approximate(self, epsilon, rank, generator, rows, cols, target, xt, source, xs):
        return 2, generator.left[list(rows)], generator.right[:, list(cols)]


class NeverCompress(LowRankGenerator):
    def approximate(self, epsilon, rank, generator, rows, cols, target, xt, source, xs):
        return -1, None, None


class WrongShape(LowRankGenerator):
    def approximate(self, epsilon, rank, generator, rows, cols, target, xt, source, xs):
        return 2, np.zeros((3, 2)), np.zeros((2, 3))


ROWS = [11, 0, 5, 3, 2, 7, 9, 1, 4, 6, 8, 10]
COLS = [7, 6, 0, 1, 2, 3, 5, 4]


@pytest.fixture
def generator():
    return RankTwoGenerator()


@pytest.fixture
def built(generator):
    lrmat = LowRankMatrix(1, ROWS, COLS)
    lrmat.build(generator, ExactFactors(), None, None, None, None)
    return lrmat


def test_whole_matrix_matches_block(generator, built):
    block = generator.copy_submatrix(ROWS, COLS)
    assert built.rank == 2
    assert np.allclose(built.get_whole_matrix(), block)


def test_mvprod(generator, built):
    x = np.arange(NC, dtype=float)
    block = generator.copy_submatrix(ROWS, COLS)
    assert np.allclose(built.mvprod(x), block @ x)
    assert np.allclose(built @ x, block @ x)


def test_mvprod_wrong_size(built):
    with pytest.raises(ValueError):
        built.mvprod(np.ones(NC + 1))


@pytest.mark.parametrize("mu", [1, 3])
def test_add_mvprod_row_major_normal(generator, built, mu):
    block = generator.copy_submatrix(ROWS, COLS)
    x = np.linspace(-1, 1, NC * mu).reshape(NC, mu)
    out = np.ones(NR * mu)
    built.add_mvprod_row_major(x.reshape(-1), out, mu, "T", "N")
    assert np.allclose(out, (block @ x).reshape(-1) + 1)


@pytest.mark.parametrize("mu", [1, 2])
def test_add_mvprod_row_major_transposed(generator, built, mu):
    block = generator.copy_submatrix(ROWS, COLS)
    x = np.linspace(0, 2, NR * mu).reshape(NR, mu)
    out = np.zeros(NC * mu)
    built.add_mvprod_row_major(x.reshape(-1), out, mu, "T", "T")
    assert np.allclose(out, (block.T @ x).reshape(-1))


def test_exact_factors_have_no_error(generator, built):
    assert frobenius_absolute_error(built, generator) < 1e-12
    assert frobenius_relative_error(built, generator) < 1e-12


def test_error_with_no_terms_is_the_whole_block(generator, built):
    block = generator.copy_submatrix(ROWS, COLS)
    assert frobenius_absolute_error(built, generator, 0) == pytest.approx(np.linalg.norm(block))
    assert frobenius_relative_error(built, generator, 0) == pytest.approx(1.0)


def test_error_decreases_with_rank(generator, built):
    errors = [frobenius_absolute_error(built, generator, k) for k in range(3)]
    assert errors[0] >= errors[1] >= errors[2]


def test_requested_rank_above_rank(generator, built):
    with pytest.raises(ValueError):
        frobenius_absolute_error(built, generator, 3)


def test_space_saving_and_compression_ratio_agree(built):
    assert built.space_saving() == pytest.approx(1 - 1 / built.compression_ratio())


def test_rank_zero_is_zero_block(generator):
    lrmat = LowRankMatrix(1, ROWS, COLS, rank=0)
    lrmat.build(generator, ExactFactors(), None, None, None, None)
    assert np.array_equal(lrmat.get_whole_matrix(), np.zeros((NR, NC)))
    assert np.array_equal(lrmat.mvprod(np.ones(NC)), np.zeros(NR))
    out = np.full(NR, 4.0)
    lrmat.add_mvprod_row_major(np.ones(NC), out)
    assert np.array_equal(out, np.full(NR, 4.0))


def test_failed_compression_leaves_matrix_unbuilt(generator):
    lrmat = LowRankMatrix(1, ROWS, COLS)
    lrmat.build(generator, NeverCompress(), None, None, None, None)
    assert lrmat.rank == -1
    assert lrmat.is_built is False
    with pytest.raises(RuntimeError):
        lrmat.get_whole_matrix()


def test_factors_of_wrong_shape(generator):
    lrmat = LowRankMatrix(1, ROWS, COLS)
    with pytest.raises(ValueError):
        lrmat.build(generator, WrongShape(), None, None, None, None)


def test_sizes_follow_dimension():
    lrmat = LowRankMatrix(2, ROWS, COLS, offset_i=3, offset_j=4)
    assert (lrmat.nb_rows, lrmat.nb_cols) == (2 * len(ROWS), 2 * len(COLS))
    assert (lrmat.offset_i, lrmat.offset_j) == (3, 4)