"""Pytest configuration for repository-relative imports and shared datasets."""

import os
import sys

import matplotlib
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")


@pytest.fixture
def parking_fines():
    """Fines per district before and after a policy change."""
    return [
        {"district_id": 1, "fines_before": 125, "fines_after": 142},
        {"district_id": 2, "fines_before": 98, "fines_after": 108},
        {"district_id": 3, "fines_before": 156, "fines_after": 175},
        {"district_id": 4, "fines_before": 87, "fines_after": 95},
        {"district_id": 5, "fines_before": 203, "fines_after": 228},
        {"district_id": 6, "fines_before": 134, "fines_after": 149},
    ]


@pytest.fixture
def planar_points():
    """Two tight pairs and one far-away point."""
    return [
        {"id": "a", "x": 1, "y": 2},
        {"id": "b", "x": 2, "y": 3},
        {"id": "c", "x": 10, "y": 10},
        {"id": "d", "x": 11, "y": 11},
        {"id": "e", "x": 50, "y": 50},
    ]


@pytest.fixture
def voting_counts():
    return [
        {"age_group": "18-30", "candidate": "A", "count": 45},
        {"age_group": "18-30", "candidate": "B", "count": 55},
        {"age_group": "31-50", "candidate": "A", "count": 60},
        {"age_group": "31-50", "candidate": "B", "count": 40},
        {"age_group": "51+", "candidate": "A", "count": 70},
        {"age_group": "51+", "candidate": "B", "count": 30},
    ]
