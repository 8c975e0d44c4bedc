"""Chi-squared tests on count data stored as records.

Both tests report assumption problems (small expected frequencies) as
advisory warnings on the result instead of raising: the statistic and
p-value are still returned, and each warning is also logged.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..errors import InsufficientSampleError, InvalidDataError
from ..records import as_records, extract_category, numeric_value
from .distributions import chi_squared_sf, chi_squared_sf_wilson_hilferty

logger = logging.getLogger(__name__)

CHI_SQUARED_MIN_EXPECTED = 5.0
CHI_SQUARED_MIN_SHARE = 0.8
CHI_SQUARED_TINY_EXPECTED = 0.5

Frequencies = Dict[str, Dict[str, float]]


@dataclass(frozen=True)
class ContingencyTable:
    rows: Tuple[str, ...]
    columns: Tuple[str, ...]
    row_totals: Tuple[float, ...]
    col_totals: Tuple[float, ...]
    grand_total: float


@dataclass(frozen=True)
class ChiSquaredIndependenceResult:
    chi_squared: float
    degrees_of_freedom: int
    p_value: float
    observed_frequencies: Frequencies
    expected_frequencies: Frequencies
    contingency_table: ContingencyTable
    warnings: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChiSquaredGoodnessOfFitResult:
    chi_squared: float
    degrees_of_freedom: int
    p_value: float
    warnings: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _expected_frequency_warnings(expected: np.ndarray) -> Tuple[List[str], int, int]:
    """Rule-of-thumb checks on expected cell frequencies.

    Returns the general warnings plus the number of cells below 5 and
    below 0.5, which callers use for their table-specific messages.
    """
    messages: List[str] = []
    expected = np.asarray(expected, dtype=float).ravel()

    below_one = int(np.sum(expected < 1))
    if below_one:
        messages.append(
            f"Warning: {below_one} expected frequencies are less than 1. "
            "Chi-squared test assumptions may be violated."
        )

    share = 100.0 * float(np.mean(expected >= CHI_SQUARED_MIN_EXPECTED))
    if share < 100.0 * CHI_SQUARED_MIN_SHARE:
        messages.append(
            f"Warning: Only {share:.1f}% of expected frequencies are ≥ 5 "
            "(recommended: ≥ 80%). Results may be unreliable."
        )

    return messages, int(np.sum(expected < CHI_SQUARED_MIN_EXPECTED)), int(
        np.sum(expected < CHI_SQUARED_TINY_EXPECTED)
    )


def _tiny_warning(count: int) -> str:
    return (
        f"Warning: {count} expected frequencies are very small (< 0.5). "
        "Consider combining categories or collecting more data."
    )


def _log_warnings(messages: Sequence[str]) -> None:
    for message in messages:
        logger.warning(message)


def chi_squared_independence_test(
    data: Sequence[Any], row_key: str, col_key: str, count_key: str
) -> ChiSquaredIndependenceResult:
    """Pearson chi-squared test of independence between two categorical fields.

    Counts are summed per ``(row category, column category)`` into a
    contingency table. Expected frequencies are
    ``row_total * col_total / grand_total``; the statistic sums
    ``(observed - expected)^2 / expected`` over cells with non-zero expected
    frequency, with ``(rows - 1)(cols - 1)`` degrees of freedom. The p-value
    uses the Wilson-Hilferty normal approximation.

    Args:
        data: Records with a row category, a column category and a count.
        row_key: Field holding the row category (string or number).
        col_key: Field holding the column category (string or number).
        count_key: Field holding a non-negative count.

    Returns:
        ChiSquaredIndependenceResult: Statistic, degrees of freedom, p-value,
        observed and expected frequencies keyed by row then column, the
        sorted contingency table margins and advisory ``warnings``.

    Raises:
        InvalidDataError: If data is empty, a category is not a string or
            number, a count is negative or non-finite, or the grand total is
            zero.
        InsufficientSampleError: If either variable has a single category
            (zero degrees of freedom).
    """
    records = as_records(data)
    if not records:
        raise InvalidDataError("Data must be a non-empty array.")

    rows = []
    for index, item in enumerate(records):
        rows.append(
            (
                extract_category(item, row_key, index),
                extract_category(item, col_key, index),
                numeric_value(item, count_key, index, non_negative=True),
            )
        )
    frame = pd.DataFrame(rows, columns=["row", "col", "count"])
    observed = frame.pivot_table(
        index="row", columns="col", values="count", aggfunc="sum", fill_value=0.0
    ).sort_index(axis=0).sort_index(axis=1)

    row_labels = tuple(str(r) for r in observed.index)
    col_labels = tuple(str(c) for c in observed.columns)
    table = observed.to_numpy(dtype=float)
    row_totals = table.sum(axis=1)
    col_totals = table.sum(axis=0)
    grand_total = float(table.sum())
    if grand_total == 0:
        raise InvalidDataError("Total count cannot be zero.")

    expected = np.outer(row_totals, col_totals) / grand_total
    dof = (len(row_labels) - 1) * (len(col_labels) - 1)

    if dof <= 0:
        raise InsufficientSampleError(
            "Chi-squared independence test needs at least two row categories "
            "and two column categories."
        )

    messages, below_five, tiny = _expected_frequency_warnings(expected)
    if dof == 1 and below_five:
        messages.append(
            "Warning: For 2×2 contingency tables, all expected frequencies should "
            f"be ≥ 5. Found {below_five} frequencies below 5."
        )
    if tiny:
        messages.append(_tiny_warning(tiny))
    _log_warnings(messages)

    nonzero = expected > 0
    chi_squared = float(
        np.sum((table[nonzero] - expected[nonzero]) ** 2 / expected[nonzero])
    )
    p_value = chi_squared_sf_wilson_hilferty(chi_squared, dof)

    observed_frequencies = {
        r: {c: float(table[i, j]) for j, c in enumerate(col_labels)}
        for i, r in enumerate(row_labels)
    }
    expected_frequencies = {
        r: {c: float(expected[i, j]) for j, c in enumerate(col_labels)}
        for i, r in enumerate(row_labels)
    }

    return ChiSquaredIndependenceResult(
        chi_squared=chi_squared,
        degrees_of_freedom=dof,
        p_value=p_value,
        observed_frequencies=observed_frequencies,
        expected_frequencies=expected_frequencies,
        contingency_table=ContingencyTable(
            rows=row_labels,
            columns=col_labels,
            row_totals=tuple(float(v) for v in row_totals),
            col_totals=tuple(float(v) for v in col_totals),
            grand_total=grand_total,
        ),
        warnings=tuple(messages),
    )


def chi_squared_goodness_of_fit_test(
    data: Sequence[Any], category_key: str, observed_key: str, expected_key: str
) -> ChiSquaredGoodnessOfFitResult:
    """Pearson chi-squared goodness-of-fit test.

    Observed and expected counts are summed per category. The totals must
    agree within 0.1% and every category needs a positive expected count.
    The p-value uses the exact chi-squared upper tail; with a single
    category (zero degrees of freedom) it is ``1`` for a perfect fit and
    ``0`` otherwise.

    Raises:
        InvalidDataError: If data is empty, a value is invalid, an expected
            count is not positive, or the totals disagree.
    """
    records = as_records(data)
    if not records:
        raise InvalidDataError("Data must be a non-empty array.")

    observed: Dict[str, float] = {}
    expected: Dict[str, float] = {}
    for index, item in enumerate(records):
        category = extract_category(item, category_key, index)
        observed[category] = observed.get(category, 0.0) + numeric_value(
            item, observed_key, index, non_negative=True
        )
        expected[category] = expected.get(category, 0.0) + numeric_value(
            item, expected_key, index, non_negative=True
        )

    for category, value in expected.items():
        if value <= 0:
            raise InvalidDataError(
                f'Expected frequency must be greater than 0 for category "{category}".'
            )

    total_observed = sum(observed.values())
    total_expected = sum(expected.values())
    relative = abs(total_observed - total_expected) / max(total_observed, total_expected)
    if relative > 0.001:
        raise InvalidDataError(
            f"Total observed frequencies ({total_observed}) must approximately equal "
            f"total expected frequencies ({total_expected}). For goodness of fit "
            "tests, both totals should represent the same sample size."
        )

    categories = list(observed)
    obs = np.array([observed[c] for c in categories], dtype=float)
    exp = np.array([expected[c] for c in categories], dtype=float)
    dof = len(categories) - 1

    messages, below_five, tiny = _expected_frequency_warnings(exp)
    if len(categories) == 2 and below_five:
        messages.append(
            "Warning: For tests with 1 degree of freedom, all expected frequencies "
            f"should be ≥ 5. Found {below_five} frequencies below 5."
        )
    if tiny:
        messages.append(_tiny_warning(tiny))
    _log_warnings(messages)

    chi_squared = float(np.sum((obs - exp) ** 2 / exp))
    if dof == 0:
        p_value = 1.0 if chi_squared == 0 else 0.0
    else:
        p_value = chi_squared_sf(chi_squared, dof)

    return ChiSquaredGoodnessOfFitResult(
        chi_squared=chi_squared,
        degrees_of_freedom=dof,
        p_value=p_value,
        warnings=tuple(messages),
    )
