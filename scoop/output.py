"""Write enriched records and test results to CSV files.

This module is the output boundary between in-memory analysis and
shareable tabular artifacts.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import pandas as pd

from .records import as_records

logger = logging.getLogger(__name__)


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _flatten(value: Any, prefix: str, out: Dict[str, Any]) -> None:
    """Flatten nested mappings into ``a.b.c`` keys; sequences become strings."""
    if isinstance(value, dict):
        for key, inner in value.items():
            _flatten(inner, f"{prefix}.{key}" if prefix else str(key), out)
    elif isinstance(value, (list, tuple)):
        out[prefix] = "; ".join(str(v) for v in value)
    else:
        out[prefix] = value


def save_records_to_csv(records: Any, path: str) -> str:
    """Save records (list of dicts or DataFrame) to ``path``.

    Columns follow first appearance across the records; missing fields are
    left empty.

    Returns:
        str: The written path.
    """
    _ensure_parent(path)
    frame = pd.DataFrame(as_records(records))
    frame.to_csv(path, index=False)
    logger.info("Saved %d records to %s", len(frame), path)
    return path


def save_test_result_to_csv(result: Any, path: str) -> str:
    """Save a hypothesis-test result as a two-column ``Field,Value`` table.

    ``result`` is any result object with ``to_dict()`` or a plain dict.
    Nested tables (such as chi-squared frequencies) are flattened into
    dotted field names.

    Returns:
        str: The written path.
    """
    data = result.to_dict() if hasattr(result, "to_dict") else dict(result)
    flat: Dict[str, Any] = {}
    _flatten(data, "", flat)

    _ensure_parent(path)
    frame = pd.DataFrame({"Field": list(flat.keys()), "Value": list(flat.values())})
    frame.to_csv(path, index=False)
    logger.info("Saved %s to %s", type(result).__name__, path)
    return path
