"""Closed-form sample-size calculators with finite population correction."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import numpy as np

from ..errors import InsufficientSampleError, InvalidParameterError
from ..records import as_records, extract_numeric

logger = logging.getLogger(__name__)

Z_SCORES = {90: 1.645, 95: 1.96, 99: 2.576}

WORST_CASE_PROPORTION = 0.5


def z_score_for(confidence_level: int) -> float:
    try:
        return Z_SCORES[confidence_level]
    except (KeyError, TypeError):
        raise InvalidParameterError(
            "Invalid confidence level. Use 90, 95, or 99."
        ) from None


def _finite_population_correction(n0: float, population_size: float) -> int:
    denominator = 1 + (n0 - 1) / population_size
    # Tiny populations with n0 < 1 drive the correction to zero or below.
    if denominator <= 0:
        return math.ceil(min(n0, population_size))
    return math.ceil(n0 / denominator)


def sample_size_mean(
    data: Any,
    key: str,
    confidence_level: int,
    margin_of_error: float,
    *,
    population_size: Optional[int] = None,
) -> int:
    """Minimum sample size to estimate a mean within ``margin_of_error``.

    The sample standard deviation of ``key`` in ``data`` stands in for the
    population one: ``n0 = z^2 * s^2 / E^2``, then corrected for a finite
    population of ``population_size`` (``len(data)`` when omitted).

    Args:
        data: Pilot records (list of dicts or DataFrame).
        key (str): Numeric field to estimate.
        confidence_level (int): 90, 95 or 99.
        margin_of_error (float): Acceptable error, in the units of ``key``.
        population_size (int | None, optional): Size of the population
            being sampled.

    Returns:
        int: Required sample size, rounded up.

    Raises:
        InvalidParameterError: For an unsupported confidence level, a
            non-positive margin of error or a non-positive population size.
        InsufficientSampleError: If fewer than 2 records are given.
        InvalidDataError: If a value is not a finite number.
    """
    z = z_score_for(confidence_level)
    if not margin_of_error > 0:
        raise InvalidParameterError("Invalid margin of error. Must be greater than 0.")

    records = as_records(data)
    if len(records) < 2:
        raise InsufficientSampleError(
            "At least 2 data points are required to calculate sample standard deviation."
        )
    if population_size is not None and population_size <= 0:
        raise InvalidParameterError("Population size must be greater than 0.")

    values = extract_numeric(records, key)
    std_dev = float(np.std(values, ddof=1))
    n0 = (z * std_dev) ** 2 / margin_of_error**2
    population = population_size if population_size is not None else len(records)

    size = _finite_population_correction(n0, population)
    logger.debug(
        "Sample size for mean of %r: s=%.4g, n0=%.4g, N=%d -> %d",
        key,
        std_dev,
        n0,
        population,
        size,
    )
    return size


def sample_size_proportion(
    population_size: int, confidence_level: int, margin_of_error: float
) -> int:
    """Minimum sample size to estimate a proportion.

    Assumes the worst-case proportion ``p = 0.5``; ``margin_of_error`` is a
    percentage between 1 and 100.

    Example:
        >>> sample_size_proportion(1000, 95, 5)
        278
    """
    z = z_score_for(confidence_level)
    if not 1 <= margin_of_error <= 100:
        raise InvalidParameterError(
            "Invalid margin of error. Use a value between 1 and 100."
        )
    if not population_size > 0:
        raise InvalidParameterError("Population size must be greater than 0.")

    p = WORST_CASE_PROPORTION
    n0 = z**2 * p * (1 - p) / (margin_of_error / 100) ** 2
    return _finite_population_correction(n0, population_size)
