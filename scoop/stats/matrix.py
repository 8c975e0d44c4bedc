"""Provide the matrix routines behind Mahalanobis distance.

This module supports:
- square-matrix inversion by Gauss-Jordan elimination with partial pivoting,
- population covariance matrices built from raw numeric columns.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np

from ..errors import (
    DimensionMismatchError,
    InsufficientSampleError,
    InvalidDataError,
    SingularMatrixError,
)
from ..records import is_finite_number

logger = logging.getLogger(__name__)


def as_matrix(rows: Sequence[Sequence[Any]], name: str) -> np.ndarray:
    """Convert nested sequences to a float matrix, validating every cell."""
    if isinstance(rows, np.ndarray):
        if rows.ndim != 2:
            raise DimensionMismatchError(f"{name} must be two-dimensional.")
        if rows.dtype.kind not in "iuf":
            raise InvalidDataError(f"{name} must contain numbers only.")
        arr = rows.astype(float)
        bad = ~np.isfinite(arr)
        if bad.any():
            i, j = (int(v) for v in np.argwhere(bad)[0])
            raise InvalidDataError(
                f"This is not a finite number: {arr[i, j]} (row {i}, column {j})."
            )
        return arr

    rows = list(rows)
    width = len(rows[0]) if rows else 0
    for i, row in enumerate(rows):
        if len(row) != width:
            raise DimensionMismatchError(
                f"{name} is ragged: row {i} has {len(row)} values, expected {width}."
            )
        for j, value in enumerate(row):
            if not is_finite_number(value):
                raise InvalidDataError(
                    f"This is not a finite number: {value!r} (row {i}, column {j})."
                )
    return np.array(rows, dtype=float).reshape(len(rows), width)


def invert_matrix(matrix: Sequence[Sequence[float]]) -> np.ndarray:
    """Invert a square matrix with Gauss-Jordan elimination.

    The augmented matrix ``[A | I]`` is reduced column by column. For each
    pivot column the row with the largest absolute value among the rows not
    yet used as pivots is swapped into place, every other row is eliminated
    in that column and the pivot row is normalized. The right half of the
    reduced matrix is the inverse.

    Args:
        matrix (Sequence[Sequence[float]]): Square matrix of finite numbers.
            It is never modified.

    Returns:
        numpy.ndarray: The ``N x N`` inverse.

    Raises:
        DimensionMismatchError: If the matrix is empty, ragged or not square.
        InvalidDataError: If any entry is not a finite number.
        SingularMatrixError: If a pivot is exactly zero.

    Example:
        >>> invert_matrix([[4, 7], [2, 6]]).round(6).tolist()
        [[0.6, -0.7], [-0.2, 0.4]]
    """
    a = as_matrix(matrix, "Matrix")
    n, m = a.shape
    if n == 0 or n != m:
        raise DimensionMismatchError(
            f"Matrix must be square and non-empty to be inverted; got {n}x{m}."
        )

    augmented = np.hstack([a, np.eye(n)])

    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col]
        if pivot == 0:
            raise SingularMatrixError("Matrix is singular and cannot be inverted")

        augmented[col] = augmented[col] / pivot
        for row in range(n):
            if row != col:
                factor = augmented[row, col]
                if factor != 0:
                    augmented[row] -= factor * augmented[col]
                augmented[row, col] = 0.0

    logger.debug("Inverted %dx%d matrix", n, n)
    return augmented[:, n:].copy()


def covariance_matrix(
    data: Sequence[Sequence[float]], invert: bool = False
) -> np.ndarray:
    """Compute the population covariance matrix of row-oriented data.

    Args:
        data (Sequence[Sequence[float]]): ``N`` observations of ``M``
            variables; each inner sequence is one observation.
        invert (bool, optional): Return the inverse covariance matrix instead,
            as needed for Mahalanobis distance. Defaults to ``False``.

    Returns:
        numpy.ndarray: Symmetric ``M x M`` covariance matrix (or its
        inverse).

    Raises:
        InsufficientSampleError: If ``data`` is empty.
        DimensionMismatchError: If rows have different lengths.
        InvalidDataError: If any cell is not a finite number.
        SingularMatrixError: If ``invert`` is requested and the covariance
            matrix is singular.

    Note:
        Covariances divide by ``N`` (population form), not ``N - 1``. Only
        the upper triangle is computed; the lower triangle is mirrored so the
        result is exactly symmetric.
    """
    x = as_matrix(data, "Data")
    n, m = x.shape
    if n == 0:
        raise InsufficientSampleError("Covariance requires at least one observation.")

    means = x.mean(axis=0)
    centered = x - means
    cov = np.zeros((m, m), dtype=float)
    for v in range(m):
        for w in range(v, m):
            value = float(np.dot(centered[:, v], centered[:, w]) / n)
            cov[v, w] = value
            cov[w, v] = value

    return invert_matrix(cov) if invert else cov
