import numpy as np
import pytest

from hmatkit.generator import Generator, ZeroGenerator
from hmatkit.matrix import SubMatrix


class _Ones(Generator):
    def copy_submatrix(self, rows, cols):
        return np.ones((len(rows), len(cols)))


def test_zero_generator_returns_zero_block():
    block = ZeroGenerator(4, 5).copy_submatrix([0, 2], [1, 3, 4])
    assert block.shape == (2, 3)
    assert np.all(block == 0)
    assert block.dtype == np.float64


def test_zero_generator_empty_rows():
    block = ZeroGenerator(4, 5).copy_submatrix([], [1, 2, 3])
    assert block.shape == (0, 3)


def test_zero_generator_complex_dtype():
    generator = ZeroGenerator(3, 3)
    generator.dtype = np.complex128
    block = generator.copy_submatrix([0, 1], [2])
    assert block.shape == (2, 1)
    assert block.dtype == np.complex128
    assert np.all(block == 0)


def test_generator_stores_sizes():
    generator = ZeroGenerator(6, 7, 2)
    assert (generator.nb_rows, generator.nb_cols, generator.dimension) == (6, 7, 2)
    assert ZeroGenerator(6, 7).dimension == 1


def test_generator_is_abstract():
    with pytest.raises(TypeError):
        Generator(2, 2)


def test_invalid_sizes_raise():
    with pytest.raises(ValueError):
        ZeroGenerator(-1, 2)
    with pytest.raises(ValueError):
        ZeroGenerator(2, 2, 0)


def test_subclass_feeds_submatrix():
    sub = SubMatrix.from_generator(_Ones(3, 3), [0, 1], [2])
    np.testing.assert_array_equal(np.asarray(sub), np.ones((2, 1)))
    zero = SubMatrix.from_generator(ZeroGenerator(3, 3), [0, 1, 2], [0, 1])
    assert np.all(np.asarray(zero) == 0)