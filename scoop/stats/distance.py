"""Distance metrics and the record annotations built on them."""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, MutableMapping, Sequence

import numpy as np

from ..errors import DimensionMismatchError, InvalidDataError
from ..records import as_records, extract_numeric, extract_numeric_matrix, numeric_value
from ..schema import DEFAULT_FIELDS, RecordFields
from .matrix import as_matrix, covariance_matrix

logger = logging.getLogger(__name__)


def euclidean_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Straight-line distance between two points in the plane."""
    return math.hypot(x2 - x1, y2 - y1)


def mahalanobis_distance(
    x1: Sequence[float], x2: Sequence[float], inv_cov: Sequence[Sequence[float]]
) -> float:
    """Mahalanobis distance between two points.

    Computes ``sqrt(d^T S^-1 d)`` with ``d = x1 - x2``.

    Args:
        x1 (Sequence[float]): First point, length ``D``.
        x2 (Sequence[float]): Second point, length ``D``.
        inv_cov (Sequence[Sequence[float]]): ``D x D`` inverse covariance
            matrix, usually from ``covariance_matrix(data, invert=True)``.

    Returns:
        float: Non-negative distance; ``0.0`` when ``x1 == x2``.

    Raises:
        DimensionMismatchError: If the lengths of ``x1``, ``x2`` and
            ``inv_cov`` disagree.
        InvalidDataError: If a coordinate is not a finite number.

    Note:
        The caller must supply a symmetric positive semi-definite inverse
        covariance. Round-off below zero in the quadratic form is clipped
        to zero.
    """
    a = as_matrix([list(x1)], "First point").ravel()
    b = as_matrix([list(x2)], "Second point").ravel()
    s = as_matrix(inv_cov, "Inverse covariance matrix")
    if not (len(a) == len(b) == s.shape[0] == s.shape[1]):
        raise DimensionMismatchError("Dimensions mismatch")

    diff = a - b
    quad = float(diff @ s @ diff)
    return math.sqrt(max(quad, 0.0))


def add_mahalanobis_distance(
    origin: Mapping[str, float],
    data: Any,
    *,
    similarity: bool = False,
    matrix: Sequence[Sequence[float]] | None = None,
    fields: RecordFields = DEFAULT_FIELDS,
) -> List[MutableMapping[str, Any]]:
    """Annotate every record with its Mahalanobis distance to ``origin``.

    The keys of ``origin`` select the variables and fix their order in the
    vectors and in the covariance matrix. Records keep all their other
    fields.

    Args:
        origin (Mapping[str, float]): Reference point, variable name to
            coordinate.
        data: List of record dicts (annotated in place) or a
            :class:`pandas.DataFrame` (annotated copies are returned).
        similarity (bool, optional): Also write
            ``1 - distance / max(distance)``. Defaults to ``False``.
        matrix (Sequence[Sequence[float]] | None, optional): Precomputed
            inverse covariance matrix. When omitted it is computed from
            ``data``.
        fields (RecordFields, optional): Attribute names to write.

    Returns:
        list[dict]: The annotated records.

    Raises:
        InvalidDataError: If a record or the origin lacks a finite value
            for one of the variables.
        DimensionMismatchError: If ``matrix`` does not match the number of
            variables.
        SingularMatrixError: If the computed covariance matrix is singular.

    Note:
        Similarity is normalized by the largest distance in this call, so
        scores are only comparable within one annotated batch.
    """
    records = as_records(data)
    variables = list(origin.keys())
    origin_vector = np.array(
        [numeric_value(origin, key, 0, label="origin") for key in variables],
        dtype=float,
    )
    vectors = extract_numeric_matrix(records, variables)

    if matrix is not None:
        inv_cov = as_matrix(matrix, "Inverse covariance matrix")
    else:
        inv_cov = covariance_matrix(vectors, invert=True)

    distances = [mahalanobis_distance(origin_vector, v, inv_cov) for v in vectors]
    for record, dist in zip(records, distances):
        record[fields.distance] = dist

    if similarity and records:
        max_dist = max(distances)
        for record, dist in zip(records, distances):
            record[fields.similarity] = 1.0 - dist / max_dist if max_dist > 0 else 1.0

    logger.debug(
        "Annotated %d records with Mahalanobis distance over %d variables",
        len(records),
        len(variables),
    )
    return records


def add_z_score(
    data: Any,
    key: str,
    *,
    new_key: str | None = None,
    fields: RecordFields = DEFAULT_FIELDS,
) -> List[MutableMapping[str, Any]]:
    """Write the standard score of ``key`` onto every record.

    Uses the population standard deviation (divide by ``N``).

    Raises:
        InvalidDataError: If a value is not a finite number or all values
            are identical (zero spread).
    """
    records = as_records(data)
    values = extract_numeric(records, key)
    if len(values) == 0:
        return records

    std = float(np.std(values))
    if std == 0:
        raise InvalidDataError(
            f'Cannot compute z-scores for key "{key}": all values are identical.'
        )
    mean = float(np.mean(values))
    target = new_key or fields.z_score
    for record, value in zip(records, values):
        record[target] = (float(value) - mean) / std
    return records
