import math

import numpy as np
import pytest

from ninjanet.core.errors import DimensionMismatchError, OutOfRangeError
from ninjanet.core.matrix import Matrix, as_column_vector, column_vector


def _m(rows):
    return Matrix.from_rows(rows)


def test_constructor_checks_value_count():
    with pytest.raises(DimensionMismatchError):
        Matrix(2, 2, [1.0, 2.0, 3.0])
    m = Matrix(2, 3)
    assert m.shape == (2, 3)
    assert m.dimensions == "2x3"
    assert np.all(m.to_array() == 0.0)


def test_from_rows_rejects_ragged_rows():
    with pytest.raises(DimensionMismatchError):
        Matrix.from_rows([[1.0, 2.0], [3.0]])


def test_get_and_set_are_bounds_checked():
    m = Matrix(2, 2, [1, 2, 3, 4])
    assert m.get(1, 0) == 3.0
    m.set(0, 1, 9.0)
    assert m.get(0, 1) == 9.0
    with pytest.raises(OutOfRangeError):
        m.get(2, 0)
    with pytest.raises(IndexError):
        m.set(0, -1, 1.0)


def test_elementwise_operations_return_new_matrices():
    a = _m([[1, 2], [3, 4]])
    b = _m([[10, 20], [30, 40]])
    assert a.add(b) == _m([[11, 22], [33, 44]])
    assert b.subtract(a) == _m([[9, 18], [27, 36]])
    assert a.element_multiply(b) == _m([[10, 40], [90, 160]])
    assert a.scale(2) == _m([[2, 4], [6, 8]])
    assert b.divide(10) == _m([[1, 2], [3, 4]])
    assert a == _m([[1, 2], [3, 4]])


def test_elementwise_shape_mismatch():
    with pytest.raises(DimensionMismatchError):
        Matrix(2, 2).add(Matrix(2, 1))
    with pytest.raises(DimensionMismatchError):
        Matrix(2, 2).element_multiply(Matrix(1, 2))


def test_divide_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        Matrix(1, 1, [1.0]).divide(0)
    with pytest.raises(ZeroDivisionError):
        Matrix(1, 1, [1.0]).divide_into(0.0)


def test_in_place_operations_mutate_receiver():
    a = _m([[1, 2], [3, 4]])
    a.add_into(_m([[1, 1], [1, 1]]))
    assert a == _m([[2, 3], [4, 5]])
    a.subtract_into(_m([[2, 2], [2, 2]]))
    a.scale_into(3)
    assert a == _m([[0, 3], [6, 9]])
    a.divide_into(3)
    assert a == _m([[0, 1], [2, 3]])


def test_multiply_and_transpose():
    a = _m([[1, 2, 3], [4, 5, 6]])
    b = _m([[7, 8], [9, 10], [11, 12]])
    assert a.multiply(b) == _m([[58, 64], [139, 154]])
    assert (a @ b) == a.multiply(b)
    assert a.transpose().shape == (3, 2)
    assert a.transpose().transpose() == a
    with pytest.raises(DimensionMismatchError):
        a.multiply(a)


def test_apply_maps_every_entry():
    a = _m([[1, -2], [3, -4]])
    assert a.apply(np.abs) == _m([[1, 2], [3, 4]])


def test_bias_unit_round_trip():
    v = column_vector([0.5, -1.0])
    with_bias = v.prepend_bias_unit()
    assert with_bias.tolist() == [[1.0], [0.5], [-1.0]]
    assert with_bias.strip_bias_unit() == v
    assert v == column_vector([0.5, -1.0])


def test_bias_unit_requires_column_vector():
    with pytest.raises(DimensionMismatchError):
        Matrix(2, 2).prepend_bias_unit()
    with pytest.raises(DimensionMismatchError):
        Matrix(1, 3).strip_bias_unit()


def test_extract_vector_rows_and_columns():
    m = _m([[1, 2, 3], [4, 5, 6]])
    assert m.extract_vector(True, 1) == _m([[4, 5, 6]])
    assert m.extract_vector(True, 0, 1, 2) == _m([[2, 3]])
    assert m.extract_vector(False, 2) == column_vector([3, 6])
    with pytest.raises(OutOfRangeError):
        m.extract_vector(False, 3)
    with pytest.raises(OutOfRangeError):
        m.extract_vector(True, 0, 2, 2)


def test_extract_vector_is_a_copy():
    m = _m([[1, 2], [3, 4]])
    row = m.extract_vector(True, 0)
    row.set(0, 0, 100.0)
    assert m.get(0, 0) == 1.0

    v = column_vector([1.0, 2.0, 3.0])
    v.strip_bias_unit().set(0, 0, 100.0)
    v.transpose().set(0, 2, 100.0)
    assert v == column_vector([1.0, 2.0, 3.0])


def test_data_and_to_array_are_copies():
    m = _m([[1, 2]])
    m.data[0] = 50.0
    m.to_array()[0, 1] = 50.0
    assert m == _m([[1, 2]])


def test_approximately_equal_tolerance():
    a = column_vector([1.0, 2.0])
    assert a.approximately_equal(column_vector([1.000001, 2.0]))
    assert not a.approximately_equal(column_vector([1.001, 2.0]))
    assert a.approximately_equal(column_vector([1.001, 2.0]), tolerance=0.01)
    assert not a.approximately_equal(_m([[1.0, 2.0]]))


def test_approximately_equal_special_values():
    nan = column_vector([math.nan])
    assert nan.approximately_equal(column_vector([math.nan]))
    assert not nan.approximately_equal(column_vector([0.0]))
    inf = column_vector([math.inf])
    assert inf.approximately_equal(column_vector([math.inf]))
    assert not inf.approximately_equal(column_vector([-math.inf]))


def test_as_column_vector_coercion():
    v = as_column_vector([1, 2, 3])
    assert v.shape == (3, 1)
    assert as_column_vector(np.array([4.0, 5.0])).is_column_vector
    with pytest.raises(DimensionMismatchError):
        as_column_vector(Matrix(2, 2))


def test_column_vector_rejects_two_dimensional_input():
    assert column_vector(np.ones((3, 1))).shape == (3, 1)
    assert column_vector([[1.0, 2.0]]).shape == (2, 1)
    with pytest.raises(DimensionMismatchError):
        column_vector(np.ones((2, 2)))
    with pytest.raises(DimensionMismatchError):
        as_column_vector(np.ones((2, 2)))


def test_constructor_rejects_mismatched_array_shape():
    assert Matrix(2, 2, np.ones((2, 2))).shape == (2, 2)
    with pytest.raises(DimensionMismatchError):
        Matrix(4, 1, np.ones((2, 2)))
