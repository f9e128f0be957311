import struct

import numpy as np
import pytest

from hmatkit.matrix import Matrix, SubMatrix, norm_frob


def _real(nr, nc, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((nr, nc))


def _complex(nr, nc, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((nr, nc)) + 1j * rng.standard_normal((nr, nc))


class _IndexGenerator:
    def copy_submatrix(self, rows, cols):
        return np.array([[10.0 * r + c for c in cols] for r in rows])


def test_zero_matrix_by_default():
    m = Matrix(3, 4)
    assert m.shape == (3, 4)
    assert np.all(np.asarray(m) == 0)


def test_flat_data_is_column_major():
    m = Matrix(2, 3, [1, 2, 3, 4, 5, 6])
    np.testing.assert_array_equal(m.get_row(0), [1, 3, 5])
    np.testing.assert_array_equal(m.get_col(1), [3, 4])
    assert m[1, 2] == 6


def test_wrong_data_size_raises():
    with pytest.raises(ValueError):
        Matrix(2, 3, [1, 2, 3])
    with pytest.raises(ValueError):
        Matrix(2, 3, np.zeros((3, 2)))


def test_rows_and_cols_match_values():
    values = _real(4, 3)
    m = Matrix(4, 3, values)
    for i in range(4):
        np.testing.assert_array_equal(m.get_row(i), values[i, :])
    for j in range(3):
        np.testing.assert_array_equal(m.get_col(j), values[:, j])


def test_set_row_and_col_round_trip():
    m = Matrix(3, 2)
    m.set_row(1, [7.0, 8.0])
    m.set_col(0, [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(m.get_row(1), [2.0, 8.0])
    np.testing.assert_array_equal(m.get_col(0), [1.0, 2.0, 3.0])


def test_set_row_with_wrong_length_raises():
    m = Matrix(3, 2)
    with pytest.raises(ValueError):
        m.set_row(0, [1.0, 2.0, 3.0])


def test_row_out_of_range_raises():
    with pytest.raises(IndexError):
        Matrix(2, 2).get_row(2)


def test_strided_slice_matches_row():
    values = _real(3, 5)
    m = Matrix(3, 5, values)
    np.testing.assert_array_equal(m.get_stridedslice(2, 5, 3), m.get_row(2))
    with pytest.raises(IndexError):
        m.get_stridedslice(0, 6, 3)


def test_set_strided_slice_writes_entries():
    m = Matrix(2, 2)
    m.set_stridedslice(0, 2, 3, [5.0, 6.0])
    np.testing.assert_array_equal(np.diag(np.asarray(m)), [5.0, 6.0])


def test_arithmetic():
    a_values, b_values = _real(3, 3, 1), _real(3, 3, 2)
    a, b = Matrix(3, 3, a_values), Matrix(3, 3, b_values)
    np.testing.assert_allclose(np.asarray(a + b), a_values + b_values)
    np.testing.assert_allclose(np.asarray(a - b), a_values - b_values)
    np.testing.assert_allclose(np.asarray(2.0 * a), 2.0 * a_values)
    np.testing.assert_allclose(np.asarray(a * 3.0), 3.0 * a_values)
    np.testing.assert_allclose(np.asarray(a @ b), a_values @ b_values)


def test_shape_mismatch_raises():
    with pytest.raises(ValueError):
        Matrix(2, 3) + Matrix(3, 2)
    with pytest.raises(ValueError):
        Matrix(2, 3) @ Matrix(2, 3)


def test_mvprod_single_vector():
    values = _real(4, 3)
    x = np.arange(3.0)
    np.testing.assert_allclose(Matrix(4, 3, values).mvprod(x), values @ x)


def test_mvprod_several_vectors_match_single():
    m = Matrix(4, 3, _real(4, 3))
    block = _real(3, 2, 5)
    result = m.mvprod(block.reshape(-1, order="F"), mu=2).reshape((4, 2), order="F")
    for l in range(2):
        np.testing.assert_allclose(result[:, l], m.mvprod(block[:, l]))


def test_mvprod_wrong_size_raises():
    with pytest.raises(ValueError):
        Matrix(2, 3).mvprod([1.0, 2.0])


@pytest.mark.parametrize("op", ["N", "T", "C"])
def test_row_major_single_vector(op):
    values = _complex(4, 3)
    m = Matrix(4, 3, values)
    size = 3 if op == "N" else 4
    x = _complex(size, 1, 7).reshape(-1)
    operator = {"N": values, "T": values.T, "C": values.conj().T}[op]
    np.testing.assert_allclose(m.mvprod_row_major(x, 1, "T", op), operator @ x)


@pytest.mark.parametrize("op", ["N", "T"])
def test_row_major_several_vectors_match_single(op):
    m = Matrix(4, 3, _real(4, 3))
    size = 3 if op == "N" else 4
    block = _real(size, 3, 9)
    result = m.mvprod_row_major(block.reshape(-1), 3, "T", op)
    out_size = 4 if op == "N" else 3
    result = result.reshape(out_size, 3)
    for l in range(3):
        np.testing.assert_allclose(result[:, l], m.mvprod_row_major(block[:, l], 1, "T", op))


def test_row_major_invalid_op_raises():
    with pytest.raises(ValueError):
        Matrix(2, 2).mvprod_row_major([1.0, 1.0], 1, "T", "X")


def test_add_mvprod_row_major_adds_in_place():
    m = Matrix(3, 2, _real(3, 2))
    x = np.array([1.0, -2.0])
    out = np.ones(3)
    returned = m.add_mvprod_row_major(x, out, 1, "T", "N")
    assert returned is out
    np.testing.assert_allclose(out, 1.0 + m.mvprod(x))


def test_add_mvprod_row_major_empty_matrix_leaves_out():
    out = np.full(3, 4.0)
    Matrix(3, 0).add_mvprod_row_major(np.zeros(0), out, 1)
    np.testing.assert_array_equal(out, np.full(3, 4.0))


@pytest.mark.parametrize("uplo", ["U", "L"])
def test_symmetric_product_reads_one_triangle(uplo):
    base = _real(4, 4, 3)
    symmetric = base + base.T
    stored = symmetric.copy()
    if uplo == "U":
        stored[np.tril_indices(4, -1)] = 99.0
    else:
        stored[np.triu_indices(4, 1)] = 99.0
    m = Matrix(4, 4, stored)
    x = np.arange(4.0)
    out = np.zeros(4)
    m.add_mvprod_row_major_sym(x, out, 1, uplo, "S")
    np.testing.assert_allclose(out, symmetric @ x)


def test_symmetric_product_several_vectors():
    base = _real(3, 3, 4)
    symmetric = base + base.T
    m = Matrix(3, 3, symmetric)
    block = _real(3, 2, 8)
    out = np.zeros(6)
    m.add_mvprod_row_major_sym(block.reshape(-1), out, 2, "L", "S")
    np.testing.assert_allclose(out.reshape(3, 2), symmetric @ block)


def test_hermitian_product_single_vector():
    base = _complex(3, 3, 6)
    hermitian = base + base.conj().T
    m = Matrix(3, 3, hermitian)
    x = _complex(3, 1, 2).reshape(-1)
    out = np.zeros(3, dtype=complex)
    m.add_mvprod_row_major_sym(x, out, 1, "U", "H")
    np.testing.assert_allclose(out, hermitian @ x)


def test_complex_symmetric_product_with_invalid_symmetry_raises():
    m = Matrix(2, 2, _complex(2, 2))
    with pytest.raises(ValueError):
        m.add_mvprod_row_major_sym(np.ones(2), np.zeros(2, dtype=complex), 1, "U", "N")


def test_argmax_finds_largest_modulus():
    m = Matrix(2, 2, np.array([[1.0, -7.0], [3.0, 2.0]]))
    assert m.argmax() == (0, 1)


def test_argmax_of_empty_matrix_raises():
    with pytest.raises(ValueError):
        Matrix(0, 0).argmax()


def test_bytes_round_trip_real(tmp_path):
    values = _real(3, 4)
    path = tmp_path / "m.bin"
    Matrix(3, 4, values).to_bytes(path)
    loaded = Matrix.from_bytes(path)
    assert loaded.shape == (3, 4)
    np.testing.assert_array_equal(np.asarray(loaded), values)


def test_bytes_round_trip_complex(tmp_path):
    values = _complex(2, 3)
    path = tmp_path / "m.bin"
    Matrix(2, 3, values).to_bytes(path)
    loaded = Matrix.from_bytes(path)
    assert loaded.dtype == np.complex128
    np.testing.assert_array_equal(np.asarray(loaded), values)


def test_bytes_header_holds_sizes(tmp_path):
    path = tmp_path / "m.bin"
    Matrix(2, 3).to_bytes(path)
    raw = path.read_bytes()
    assert struct.unpack("<ii", raw[:8]) == (2, 3)
    assert len(raw) == 8 + 6 * 8


def test_truncated_bytes_raise(tmp_path):
    path = tmp_path / "m.bin"
    path.write_bytes(struct.pack("<ii", 2, 2) + b"\x00" * 5)
    with pytest.raises(ValueError):
        Matrix.from_bytes(path)


def test_print_uses_delimiter(capsys):
    Matrix(2, 2, np.array([[1.5, 2.0], [3.0, 4.0]])).print(delimiter=";")
    assert capsys.readouterr().out == "1.5;2\n3;4\n"


def test_csv_save_reads_back(tmp_path):
    values = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    path = tmp_path / "m.csv"
    Matrix(2, 3, values).csv_save(path)
    np.testing.assert_array_equal(np.loadtxt(path, delimiter=","), values)


def test_norm_frob():
    assert norm_frob(Matrix(1, 2, np.array([[3.0, 4.0]]))) == pytest.approx(5.0)
    values = _complex(3, 3)
    assert norm_frob(Matrix(3, 3, values)) == pytest.approx(np.linalg.norm(values))


def test_submatrix_from_generator():
    sub = SubMatrix.from_generator(_IndexGenerator(), [2, 0], [1, 3, 4], 5, 6)
    assert sub.rows == (2, 0)
    assert sub.cols == (1, 3, 4)
    assert (sub.offset_i, sub.offset_j) == (5, 6)
    np.testing.assert_array_equal(np.asarray(sub), _IndexGenerator().copy_submatrix([2, 0], [1, 3, 4]))


def test_submatrix_arithmetic_keeps_indices():
    sub = SubMatrix([1, 2], [0], 3, 4, np.array([[1.0], [2.0]]))
    doubled = 2.0 * sub
    assert isinstance(doubled, SubMatrix)
    assert doubled.rows == (1, 2)
    assert doubled.offset_i == 3
    np.testing.assert_array_equal(np.asarray(doubled + sub), 3.0 * np.asarray(sub))


def test_plain_matrix_offsets_are_zero():
    m = Matrix(2, 2)
    assert (m.offset_i, m.offset_j) == (0, 0)