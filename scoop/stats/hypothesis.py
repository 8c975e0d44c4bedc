"""Mean-comparison hypothesis tests (t-tests and z-tests) on dataset records.

Each test validates its numeric fields, computes the sample statistics, the
test statistic and its degrees of freedom, and converts the statistic into a
one- or two-tailed p-value clamped to ``[0, 1]``.

Degenerate zero-variance samples never produce ``NaN``: when the observed
effect equals the hypothesis the statistic is ``0`` and the p-value ``1``;
otherwise the statistic is ``±inf`` and the p-value is ``0`` or ``1``
depending on the tail.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from functools import partial
from typing import Any, Dict, Sequence, Tuple

import numpy as np

from ..errors import InsufficientSampleError, InvalidDataError, InvalidParameterError
from ..records import as_records, extract_numeric, is_finite_number, numeric_value
from .distributions import check_tail, normal_cdf, t_cdf, tail_p_value

logger = logging.getLogger(__name__)


class _ResultMixin:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PairedTTestResult(_ResultMixin):
    sample_size: int
    first_mean: float
    second_mean: float
    mean_difference: float
    hypothesized_difference: float
    difference_std_dev: float
    difference_variance: float
    degrees_of_freedom: int
    t_statistic: float
    p_value: float


@dataclass(frozen=True)
class TwoSampleTTestResult(_ResultMixin):
    group1_sample_size: int
    group2_sample_size: int
    group1_mean: float
    group2_mean: float
    group1_std_dev: float
    group2_std_dev: float
    group1_variance: float
    group2_variance: float
    mean_difference: float
    degrees_of_freedom: float
    t_statistic: float
    p_value: float


@dataclass(frozen=True)
class OneSampleTTestResult(_ResultMixin):
    sample_size: int
    sample_mean: float
    sample_std_dev: float
    sample_variance: float
    hypothesized_mean: float
    degrees_of_freedom: int
    t_statistic: float
    p_value: float


@dataclass(frozen=True)
class ZTestResult(_ResultMixin):
    population_size: int
    sample_size: int
    population_mean: float
    sample_mean: float
    population_std_dev: float
    population_variance: float
    fpc_applied: bool
    z_score: float
    p_value: float


@dataclass(frozen=True)
class PairedZTestResult(_ResultMixin):
    sample_size: int
    first_mean: float
    second_mean: float
    mean_difference: float
    population_std_dev: float
    z_statistic: float
    p_value: float


def _require_finite(value: Any, name: str) -> float:
    if not is_finite_number(value):
        raise InvalidParameterError(
            f"Invalid {name}. Expected a finite number, but received: {value!r}."
        )
    return float(value)


def _sample_variance(values: np.ndarray) -> float:
    """Bessel-corrected variance (``N - 1`` divisor); exactly 0 for constant data."""
    if np.all(values == values[0]):
        return 0.0
    return float(np.var(values, ddof=1))


def _welford(values: np.ndarray) -> Tuple[float, float]:
    """Single-pass mean and sample variance."""
    mean = 0.0
    m2 = 0.0
    for i, x in enumerate(values, start=1):
        delta = x - mean
        mean += delta / i
        m2 += delta * (x - mean)
    variance = m2 / (len(values) - 1) if len(values) > 1 else 0.0
    return float(mean), float(variance)


def _degenerate(effect: float, null: float, tail: str) -> Tuple[float, float]:
    """Statistic and p-value when the standard error is zero."""
    if effect == null:
        return 0.0, 1.0
    statistic = math.inf if effect > null else -math.inf
    return statistic, tail_p_value(lambda s: 1.0 if s > 0 else 0.0, statistic, tail)


def _paired_values(
    data: Sequence[Any], first_key: str, second_key: str
) -> Tuple[np.ndarray, np.ndarray]:
    first = []
    second = []
    # Both keys are checked per record so the first bad index is reported.
    for index, item in enumerate(as_records(data)):
        first.append(numeric_value(item, first_key, index))
        second.append(numeric_value(item, second_key, index))
    return np.array(first, dtype=float), np.array(second, dtype=float)


def paired_t_test(
    data: Sequence[Any],
    first_key: str,
    second_key: str,
    *,
    tail: str = "two-tailed",
    hypothesized_difference: float = 0.0,
) -> PairedTTestResult:
    """Paired t-test on two related measurements stored on each record.

    Differences are ``first - second``. The statistic is
    ``(mean_diff - hypothesized_difference) / (sd_diff / sqrt(N))`` with
    ``N - 1`` degrees of freedom.

    Args:
        data: Records holding both measurements.
        first_key: Field of the first measurement (for example ``"before"``).
        second_key: Field of the second measurement.
        tail: ``"two-tailed"`` (default), ``"left-tailed"`` or
            ``"right-tailed"``.
        hypothesized_difference: Mean difference under the null hypothesis.

    Returns:
        PairedTTestResult: Sample statistics, ``t_statistic``,
        ``degrees_of_freedom`` and ``p_value``.

    Raises:
        InvalidDataError: If a record lacks a finite number under either key.
        InsufficientSampleError: If there are fewer than two pairs.
        InvalidParameterError: If ``tail`` or ``hypothesized_difference`` is
            invalid.
    """
    hypothesized_difference = _require_finite(
        hypothesized_difference, "hypothesized difference"
    )
    check_tail(tail)
    first, second = _paired_values(data, first_key, second_key)
    n = len(first)
    if n < 2:
        raise InsufficientSampleError("Paired data must contain at least 2 pairs.")

    differences = first - second
    mean_difference = float(np.mean(differences))
    variance = _sample_variance(differences)
    std_dev = math.sqrt(variance)
    dof = n - 1

    if std_dev == 0:
        logger.debug("Paired differences have zero variance; returning limiting statistic")
        t_statistic, p_value = _degenerate(mean_difference, hypothesized_difference, tail)
    else:
        t_statistic = (mean_difference - hypothesized_difference) / (std_dev / math.sqrt(n))
        p_value = tail_p_value(partial(t_cdf, df=dof), t_statistic, tail)

    return PairedTTestResult(
        sample_size=n,
        first_mean=float(np.mean(first)),
        second_mean=float(np.mean(second)),
        mean_difference=mean_difference,
        hypothesized_difference=hypothesized_difference,
        difference_std_dev=std_dev,
        difference_variance=variance,
        degrees_of_freedom=dof,
        t_statistic=float(t_statistic),
        p_value=p_value,
    )


def two_sample_t_test(
    group1: Sequence[Any],
    group2: Sequence[Any],
    key: str,
    *,
    tail: str = "two-tailed",
) -> TwoSampleTTestResult:
    """Welch's two-sample t-test for independent groups.

    The standard error is ``sqrt(var1/n1 + var2/n2)`` and the degrees of
    freedom follow the Welch-Satterthwaite equation, so they are usually not
    an integer.

    Raises:
        InvalidDataError: If a record lacks a finite number under ``key``, or
            both groups have zero variance with different means (perfect
            separation).
        InsufficientSampleError: If either group has fewer than two
            observations.
        InvalidParameterError: If ``tail`` is invalid.
    """
    check_tail(tail)
    values1 = extract_numeric(as_records(group1), key, label="group1")
    values2 = extract_numeric(as_records(group2), key, label="group2")
    n1, n2 = len(values1), len(values2)
    if n1 < 2:
        raise InsufficientSampleError("Group 1 must contain at least 2 observations.")
    if n2 < 2:
        raise InsufficientSampleError("Group 2 must contain at least 2 observations.")

    mean1, mean2 = float(np.mean(values1)), float(np.mean(values2))
    var1, var2 = _sample_variance(values1), _sample_variance(values2)
    mean_difference = mean1 - mean2

    if var1 == 0 and var2 == 0:
        if mean1 != mean2:
            raise InvalidDataError(
                "Cannot perform t-test: both groups have zero variance (all values "
                "are identical within each group) but different means. This "
                "indicates a perfect separation between groups."
            )
        dof: float = float(n1 + n2 - 2)
        t_statistic, p_value = 0.0, 1.0
    else:
        a, b = var1 / n1, var2 / n2
        t_statistic = mean_difference / math.sqrt(a + b)
        dof = (a + b) ** 2 / (a**2 / (n1 - 1) + b**2 / (n2 - 1))
        logger.debug("Welch degrees of freedom: %.4f", dof)
        p_value = tail_p_value(partial(t_cdf, df=dof), t_statistic, tail)

    return TwoSampleTTestResult(
        group1_sample_size=n1,
        group2_sample_size=n2,
        group1_mean=mean1,
        group2_mean=mean2,
        group1_std_dev=math.sqrt(var1),
        group2_std_dev=math.sqrt(var2),
        group1_variance=var1,
        group2_variance=var2,
        mean_difference=mean_difference,
        degrees_of_freedom=float(dof),
        t_statistic=float(t_statistic),
        p_value=p_value,
    )


def one_sample_t_test(
    data: Sequence[Any],
    key: str,
    hypothesized_mean: float,
    *,
    tail: str = "two-tailed",
) -> OneSampleTTestResult:
    """One-sample t-test of the mean of ``key`` against ``hypothesized_mean``."""
    hypothesized_mean = _require_finite(hypothesized_mean, "hypothesized mean")
    check_tail(tail)
    values = extract_numeric(as_records(data), key, label="sample array")
    n = len(values)
    if n < 2:
        raise InsufficientSampleError("Sample must contain at least 2 data points.")

    mean, variance = _welford(values)
    std_dev = math.sqrt(variance)
    dof = n - 1
    if std_dev == 0:
        t_statistic, p_value = _degenerate(mean, hypothesized_mean, tail)
    else:
        t_statistic = (mean - hypothesized_mean) / (std_dev / math.sqrt(n))
        p_value = tail_p_value(partial(t_cdf, df=dof), t_statistic, tail)

    return OneSampleTTestResult(
        sample_size=n,
        sample_mean=mean,
        sample_std_dev=std_dev,
        sample_variance=variance,
        hypothesized_mean=hypothesized_mean,
        degrees_of_freedom=dof,
        t_statistic=float(t_statistic),
        p_value=p_value,
    )


def z_test(
    population: Sequence[Any],
    sample: Sequence[Any],
    key: str,
    *,
    tail: str = "two-tailed",
) -> ZTestResult:
    """Z-test of a sample mean against a fully known population.

    The population mean and (population) standard deviation come from the
    ``population`` records. A finite population correction
    ``sqrt((N - n) / (N - 1))`` is applied to the standard error when the
    sample exceeds 5% of the population.
    """
    check_tail(tail)
    pop = extract_numeric(as_records(population), key, label="population")
    smp = extract_numeric(as_records(sample), key, label="sample")
    N, n = len(pop), len(smp)
    if N < 2 or n < 2:
        raise InsufficientSampleError(
            "Population and sample must contain at least 2 data points."
        )

    population_mean = float(np.mean(pop))
    sample_mean = float(np.mean(smp))
    population_variance = float(np.var(pop))
    population_std_dev = math.sqrt(population_variance)

    standard_error = population_std_dev / math.sqrt(n)
    fpc_applied = n / N > 0.05
    if fpc_applied:
        standard_error *= math.sqrt(max(N - n, 0) / (N - 1))

    if standard_error == 0:
        z_score, p_value = _degenerate(sample_mean, population_mean, tail)
    else:
        z_score = (sample_mean - population_mean) / standard_error
        p_value = tail_p_value(normal_cdf, z_score, tail)

    return ZTestResult(
        population_size=N,
        sample_size=n,
        population_mean=population_mean,
        sample_mean=sample_mean,
        population_std_dev=population_std_dev,
        population_variance=population_variance,
        fpc_applied=fpc_applied,
        z_score=float(z_score),
        p_value=p_value,
    )


def paired_z_test(
    data: Sequence[Any],
    first_key: str,
    second_key: str,
    population_std_dev: float,
    *,
    tail: str = "two-tailed",
) -> PairedZTestResult:
    """Paired z-test with a known standard deviation of the differences."""
    if not is_finite_number(population_std_dev) or population_std_dev <= 0:
        raise InvalidParameterError(
            "Invalid population standard deviation. Expected a positive finite "
            f"number, but received: {population_std_dev!r}."
        )
    check_tail(tail)
    first, second = _paired_values(data, first_key, second_key)
    n = len(first)
    if n < 2:
        raise InsufficientSampleError("Paired data must contain at least 2 pairs.")

    mean_difference = float(np.mean(first - second))
    z_statistic = mean_difference / (float(population_std_dev) / math.sqrt(n))
    return PairedZTestResult(
        sample_size=n,
        first_mean=float(np.mean(first)),
        second_mean=float(np.mean(second)),
        mean_difference=mean_difference,
        population_std_dev=float(population_std_dev),
        z_statistic=z_statistic,
        p_value=tail_p_value(normal_cdf, z_statistic, tail),
    )
