import pandas as pd
import pytest
from scipy import stats

from scoop.errors import InsufficientSampleError, InvalidDataError
from scoop.stats.chi_squared import (
    chi_squared_goodness_of_fit_test,
    chi_squared_independence_test,
)


def test_independence_voting(voting_counts):
    result = chi_squared_independence_test(voting_counts, "age_group", "candidate", "count")

    assert result.degrees_of_freedom == 2
    assert round(result.chi_squared, 3) == 13.029
    assert 0.0 <= result.p_value < 0.01
    assert result.contingency_table.rows == ("18-30", "31-50", "51+")
    assert result.contingency_table.columns == ("A", "B")
    assert result.contingency_table.row_totals == (100.0, 100.0, 100.0)
    assert result.contingency_table.col_totals == (175.0, 125.0)
    assert result.contingency_table.grand_total == 300.0
    assert result.expected_frequencies["18-30"]["A"] == pytest.approx(58.3333, abs=1e-4)
    assert result.observed_frequencies["51+"]["B"] == 30.0
    assert result.warnings == ()


def test_independence_statistic_matches_scipy():
    rows = [
        ("high_school", "low", 150),
        ("high_school", "medium", 100),
        ("high_school", "high", 50),
        ("college", "low", 80),
        ("college", "medium", 120),
        ("college", "high", 100),
        ("graduate", "low", 30),
        ("graduate", "medium", 70),
        ("graduate", "high", 150),
    ]
    data = [{"education": e, "income": i, "count": c} for e, i, c in rows]
    result = chi_squared_independence_test(data, "education", "income", "count")

    table = pd.DataFrame(data).pivot(index="education", columns="income", values="count")
    reference = stats.chi2_contingency(table.to_numpy(), correction=False)
    assert result.degrees_of_freedom == 4
    assert result.contingency_table.grand_total == 850.0
    assert result.chi_squared == pytest.approx(reference.statistic)


def test_independence_sums_duplicate_cells_and_mixed_categories():
    data = [
        {"category": 1, "candidate": "A", "count": 10},
        {"category": 1, "candidate": "A", "count": 15},
        {"category": 1, "candidate": "B", "count": 35},
        {"category": "2", "candidate": "A", "count": 40},
        {"category": "2", "candidate": "B", "count": 30},
    ]
    result = chi_squared_independence_test(data, "category", "candidate", "count")
    assert result.contingency_table.rows == ("1", "2")
    assert result.observed_frequencies["1"]["A"] == 25.0
    assert result.degrees_of_freedom == 1


def test_independence_merges_integral_floats_with_ints():
    data = [
        {"r": 1.0, "c": "a", "count": 10},
        {"r": 1, "c": "b", "count": 20},
        {"r": 2, "c": "a", "count": 30},
        {"r": 2.0, "c": "b", "count": 40},
    ]
    result = chi_squared_independence_test(data, "r", "c", "count")
    assert result.contingency_table.rows == ("1", "2")
    assert result.observed_frequencies["1"] == {"a": 10.0, "b": 20.0}
    assert result.degrees_of_freedom == 1


def test_independence_low_expected_warnings():
    data = [
        {"group": "A", "outcome": "X", "count": 2},
        {"group": "A", "outcome": "Y", "count": 3},
        {"group": "B", "outcome": "X", "count": 1},
        {"group": "B", "outcome": "Y", "count": 4},
    ]
    result = chi_squared_independence_test(data, "group", "outcome", "count")
    assert any(
        "For 2×2 contingency tables, all expected frequencies should be ≥ 5" in w
        for w in result.warnings
    )
    assert any("Only 0.0% of expected frequencies" in w for w in result.warnings)
    assert 0.0 <= result.p_value <= 1.0


def test_independence_errors():
    with pytest.raises(InvalidDataError, match="non-empty"):
        chi_squared_independence_test([], "a", "b", "count")

    negative = [
        {"category": "A", "preference": "yes", "count": -5},
        {"category": "B", "preference": "no", "count": 15},
    ]
    with pytest.raises(InvalidDataError, match="non-negative finite number"):
        chi_squared_independence_test(negative, "category", "preference", "count")

    zeros = [
        {"r": "A", "c": "x", "count": 0},
        {"r": "B", "c": "y", "count": 0},
    ]
    with pytest.raises(InvalidDataError, match="zero"):
        chi_squared_independence_test(zeros, "r", "c", "count")

    single_row = [{"r": "A", "c": "x", "count": 3}, {"r": "A", "c": "y", "count": 4}]
    with pytest.raises(InsufficientSampleError):
        chi_squared_independence_test(single_row, "r", "c", "count")

    with pytest.raises(InvalidDataError):
        chi_squared_independence_test(
            [{"r": None, "c": "x", "count": 1}], "r", "c", "count"
        )


def test_goodness_of_fit_crimes():
    data = [
        {"crime_type": "theft", "observed_count": 120, "expected_count": 100},
        {"crime_type": "assault", "observed_count": 80, "expected_count": 90},
        {"crime_type": "fraud", "observed_count": 45, "expected_count": 50},
        {"crime_type": "vandalism", "observed_count": 55, "expected_count": 60},
    ]
    result = chi_squared_goodness_of_fit_test(
        data, "crime_type", "observed_count", "expected_count"
    )
    assert result.chi_squared == pytest.approx(6.027777777777778)
    assert result.degrees_of_freedom == 3
    assert result.p_value == pytest.approx(stats.chi2.sf(6.027777777777778, 3), rel=1e-6)
    assert result.warnings == ()


def test_goodness_of_fit_dice():
    observed = [5, 25, 19, 30, 22, 19]
    data = [
        {"face": str(i + 1), "observed": o, "expected": 20} for i, o in enumerate(observed)
    ]
    result = chi_squared_goodness_of_fit_test(data, "face", "observed", "expected")
    reference = stats.chisquare(observed, [20] * 6)
    assert result.chi_squared == pytest.approx(17.8)
    assert result.p_value == pytest.approx(reference.pvalue, rel=1e-6)


def test_goodness_of_fit_single_category():
    perfect = chi_squared_goodness_of_fit_test(
        [{"k": "a", "o": 10, "e": 10}], "k", "o", "e"
    )
    assert perfect.degrees_of_freedom == 0
    assert perfect.p_value == 1.0


def test_goodness_of_fit_errors():
    with pytest.raises(InvalidDataError, match="approximately equal"):
        chi_squared_goodness_of_fit_test(
            [{"k": "a", "o": 10, "e": 5}, {"k": "b", "o": 10, "e": 5}], "k", "o", "e"
        )
    with pytest.raises(InvalidDataError, match="greater than 0"):
        chi_squared_goodness_of_fit_test(
            [{"k": "a", "o": 0, "e": 0}, {"k": "b", "o": 10, "e": 10}], "k", "o", "e"
        )
    with pytest.raises(InvalidDataError):
        chi_squared_goodness_of_fit_test([], "k", "o", "e")


def test_goodness_of_fit_small_expected_warnings():
    data = [{"k": "a", "o": 1, "e": 0.4}, {"k": "b", "o": 9, "e": 9.6}]
    result = chi_squared_goodness_of_fit_test(data, "k", "o", "e")
    assert any("less than 1" in w for w in result.warnings)
    assert any("very small (< 0.5)" in w for w in result.warnings)
    assert any("1 degree of freedom" in w for w in result.warnings)


def test_warnings_are_logged(caplog):
    data = [
        {"group": "A", "outcome": "X", "count": 2},
        {"group": "A", "outcome": "Y", "count": 3},
        {"group": "B", "outcome": "X", "count": 1},
        {"group": "B", "outcome": "Y", "count": 4},
    ]
    with caplog.at_level("WARNING", logger="scoop.stats.chi_squared"):
        result = chi_squared_independence_test(data, "group", "outcome", "count")
    assert len(caplog.records) == len(result.warnings)
    assert all(r.levelname == "WARNING" for r in caplog.records)
