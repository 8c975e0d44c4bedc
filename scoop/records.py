"""Validate dataset records and pull numeric vectors out of them.

Datasets are sequences of open mappings. Numeric fields are checked once
here and handed to the ``scoop.stats`` routines as float arrays; every other
field on a record is left untouched.
"""

from __future__ import annotations

import json
import math
import numbers
from typing import Any, List, Mapping, MutableMapping, Sequence

import numpy as np
import pandas as pd

from .errors import InvalidDataError


def as_records(data: Any) -> List[MutableMapping[str, Any]]:
    """Return ``data`` as a list of mutable record mappings.

    A :class:`pandas.DataFrame` is converted with ``to_dict("records")`` (so
    in-place enrichment applies to the new dicts, not the frame). A list is
    returned as-is so enrichment is visible to the caller.
    """
    if isinstance(data, pd.DataFrame):
        return data.to_dict("records")
    if isinstance(data, list):
        return data
    return list(data)


def _describe(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def is_finite_number(value: Any) -> bool:
    """Return ``True`` for real, finite, non-boolean numbers."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))


def numeric_value(
    record: Mapping[str, Any],
    key: str,
    index: int,
    *,
    label: str | None = None,
    non_negative: bool = False,
) -> float:
    """Return ``record[key]`` as a float or raise a descriptive error."""
    value = record.get(key) if isinstance(record, Mapping) else None
    where = f"in {label} " if label else ""
    if not is_finite_number(value):
        raise InvalidDataError(
            f"Invalid data {where}at index {index}. Expected a finite number for "
            f'key "{key}", but received: {_describe(value)}.'
        )
    value = float(value)
    if non_negative and value < 0:
        raise InvalidDataError(
            f"Invalid data {where}at index {index}. Expected a non-negative finite "
            f'number for key "{key}", but received: {_describe(value)}.'
        )
    return value


def extract_numeric(
    data: Sequence[Mapping[str, Any]],
    key: str,
    *,
    label: str | None = None,
    non_negative: bool = False,
) -> np.ndarray:
    """Extract one numeric column from ``data`` as a float vector.

    Args:
        data: Dataset records.
        key: Field to read from every record.
        label: Optional dataset name used in error messages (for example
            ``"group1"``).
        non_negative: Reject negative values as well.

    Returns:
        numpy.ndarray: Shape ``(len(data),)`` float array.

    Raises:
        InvalidDataError: If any value is missing, boolean, non-numeric or
            non-finite. The message names the index and key.
    """
    return np.array(
        [
            numeric_value(item, key, index, label=label, non_negative=non_negative)
            for index, item in enumerate(data)
        ],
        dtype=float,
    )


def extract_numeric_matrix(
    data: Sequence[Mapping[str, Any]], keys: Sequence[str]
) -> np.ndarray:
    """Extract ``keys`` from every record into an ``N x len(keys)`` matrix."""
    rows = [
        [numeric_value(item, key, index) for key in keys]
        for index, item in enumerate(data)
    ]
    return np.array(rows, dtype=float).reshape(len(rows), len(keys))


def extract_category(record: Mapping[str, Any], key: str, index: int) -> str:
    """Return a category label as a string.

    Strings are used as-is and numbers are stringified, so ``1``, ``1.0``
    and ``"1"`` land in the same category.
    """
    value = record.get(key) if isinstance(record, Mapping) else None
    if isinstance(value, bool) or not isinstance(value, (str, numbers.Real)):
        raise InvalidDataError(
            f"Invalid data at index {index}. Expected a string or number for key "
            f'"{key}", but received: {_describe(value)}.'
        )
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if not isinstance(value, str) and float(value).is_integer():
        return str(int(value))
    return str(value)
