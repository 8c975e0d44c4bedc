import numpy as np
import pytest

from scoop.errors import (
    DimensionMismatchError,
    InsufficientSampleError,
    InvalidDataError,
    SingularMatrixError,
)
from scoop.stats.matrix import covariance_matrix, invert_matrix


def test_invert_two_by_two():
    inv = invert_matrix([[4, 7], [2, 6]])
    assert np.allclose(inv, [[0.6, -0.7], [-0.2, 0.4]])


def test_inverse_round_trip_with_pivoting():
    a = np.array([[0.0, 2.0, 1.0], [1.0, 1.0, 0.0], [3.0, 0.0, 1.0]])
    inv = invert_matrix(a)
    assert np.allclose(a @ inv, np.eye(3))
    assert np.allclose(inv, np.linalg.inv(a))


def test_input_matrix_not_modified():
    a = [[4.0, 7.0], [2.0, 6.0]]
    invert_matrix(a)
    assert a == [[4.0, 7.0], [2.0, 6.0]]


def test_one_by_one():
    assert np.allclose(invert_matrix([[4]]), [[0.25]])


def test_singular_matrix_raises():
    with pytest.raises(SingularMatrixError, match="singular"):
        invert_matrix([[1, 2], [2, 4]])


def test_non_square_and_empty_raise():
    with pytest.raises(DimensionMismatchError):
        invert_matrix([[1, 2, 3], [4, 5, 6]])
    with pytest.raises(DimensionMismatchError):
        invert_matrix([])
    with pytest.raises(DimensionMismatchError):
        invert_matrix([[1, 2], [3]])


def test_non_finite_entry_raises():
    with pytest.raises(InvalidDataError, match="row 0, column 1"):
        invert_matrix([[1, float("nan")], [0, 1]])
    with pytest.raises(InvalidDataError):
        invert_matrix([[1, "2"], [0, 1]])


def test_covariance_is_population_form_and_symmetric():
    data = [[1, 2], [2, 4], [3, 5], [4, 8]]
    cov = covariance_matrix(data)
    assert np.allclose(cov, np.cov(np.array(data, dtype=float).T, bias=True))
    assert np.array_equal(cov, cov.T)


def test_covariance_single_variable():
    cov = covariance_matrix([[1], [2], [3]])
    assert cov.shape == (1, 1)
    assert np.isclose(cov[0, 0], 2.0 / 3.0)


def test_covariance_invert():
    data = [[1, 2], [2, 1], [3, 5], [4, 3]]
    inv = covariance_matrix(data, invert=True)
    assert np.allclose(inv @ covariance_matrix(data), np.eye(2))


def test_covariance_errors():
    with pytest.raises(InsufficientSampleError):
        covariance_matrix([])
    with pytest.raises(DimensionMismatchError):
        covariance_matrix([[1, 2], [3]])
    # Perfectly collinear columns have no inverse covariance.
    with pytest.raises(SingularMatrixError):
        covariance_matrix([[1, 2], [2, 4], [3, 6]], invert=True)
