"""Distribution functions used to turn test statistics into p-values."""

from __future__ import annotations

import math
from typing import Callable

from scipy import special

from ..errors import InvalidParameterError

TAILS = ("two-tailed", "left-tailed", "right-tailed")

# Above this many degrees of freedom the t and normal CDFs agree to working precision.
NORMAL_APPROXIMATION_DF = 1000

# Abramowitz & Stegun 7.1.26
_ERF_P = 0.3275911
_ERF_A = (0.254829592, -0.284496736, 1.421413741, -1.453152027, 1.061405429)


def erf(x: float) -> float:
    """Error function polynomial approximation (absolute error < 1.5e-7)."""
    sign = 1.0 if x >= 0 else -1.0
    x = abs(float(x))
    t = 1.0 / (1.0 + _ERF_P * x)
    a1, a2, a3, a4, a5 = _ERF_A
    y = 1.0 - (((((a5 * t + a4) * t) + a3) * t + a2) * t + a1) * t * math.exp(-x * x)
    return sign * y


def normal_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    if math.isinf(x):
        return 1.0 if x > 0 else 0.0
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def t_cdf(t: float, df: float) -> float:
    """Student-t cumulative distribution function.

    Uses the regularized incomplete beta function,
    ``P(T <= t) = 1 - I_x(df/2, 1/2) / 2`` with ``x = df / (df + t^2)`` for
    ``t > 0`` (mirrored for ``t < 0``). Degrees of freedom above
    ``NORMAL_APPROXIMATION_DF`` fall back to :func:`normal_cdf`.

    Raises:
        InvalidParameterError: If ``df`` is not positive.
    """
    if not df > 0:
        raise InvalidParameterError("Degrees of freedom must be positive")
    if math.isinf(t):
        return 1.0 if t > 0 else 0.0
    if df > NORMAL_APPROXIMATION_DF:
        return normal_cdf(t)
    if t == 0:
        return 0.5

    x = df / (df + t * t)
    lower_tail = 0.5 * float(special.betainc(df / 2.0, 0.5, x))
    return 1.0 - lower_tail if t > 0 else lower_tail


def chi_squared_sf_wilson_hilferty(statistic: float, df: float) -> float:
    """Upper-tail chi-squared probability via the Wilson-Hilferty transform.

    ``(X / k)^(1/3)`` is approximately normal with mean ``1 - 2/(9k)`` and
    variance ``2/(9k)``.
    """
    _check_chi_squared_args(statistic, df)
    if statistic == 0:
        return 1.0
    h = 2.0 / (9.0 * df)
    z = ((statistic / df) ** (1.0 / 3.0) - (1.0 - h)) / math.sqrt(h)
    return clamp_probability(1.0 - normal_cdf(z))


def chi_squared_sf(statistic: float, df: float) -> float:
    """Exact upper-tail chi-squared probability, ``Q(k/2, x/2)``."""
    _check_chi_squared_args(statistic, df)
    if statistic == 0:
        return 1.0
    return clamp_probability(float(special.gammaincc(df / 2.0, statistic / 2.0)))


def _check_chi_squared_args(statistic: float, df: float) -> None:
    if not df > 0:
        raise InvalidParameterError("Degrees of freedom must be greater than 0.")
    if statistic < 0:
        raise InvalidParameterError("Chi-squared statistic cannot be negative.")


def clamp_probability(p: float) -> float:
    return min(1.0, max(0.0, float(p)))


def check_tail(tail: str) -> str:
    if tail not in TAILS:
        raise InvalidParameterError(
            f'Invalid tail option: {tail}. Use "two-tailed", "left-tailed", or "right-tailed".'
        )
    return tail


def tail_p_value(cdf: Callable[[float], float], statistic: float, tail: str) -> float:
    """Convert a test statistic into a p-value for the requested tail.

    Args:
        cdf: Cumulative distribution function of the statistic under the
            null hypothesis.
        statistic: Observed statistic (may be infinite).
        tail: ``"two-tailed"``, ``"left-tailed"`` or ``"right-tailed"``.

    Returns:
        float: p-value clamped to ``[0, 1]``.
    """
    check_tail(tail)
    if tail == "two-tailed":
        p = 2.0 * (1.0 - cdf(abs(statistic)))
    elif tail == "right-tailed":
        p = 1.0 - cdf(statistic)
    else:
        p = cdf(statistic)
    return clamp_probability(p)
