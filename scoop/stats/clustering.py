"""Density-based clustering (DBSCAN) over records with a caller-supplied metric.

Points are labelled:
- ``core`` when at least ``min_neighbours`` points (itself included) lie
  within ``min_distance``,
- ``border`` when they are not core but sit within ``min_distance`` of a
  core point,
- ``noise`` otherwise (cluster identifier ``None``).

:func:`dbscan` is pure and returns one :class:`ClusterLabel` per record.
:func:`add_clusters` writes those labels back onto the records.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence

from ..errors import DimensionMismatchError, InvalidParameterError
from ..records import as_records
from ..schema import DEFAULT_FIELDS, RecordFields

logger = logging.getLogger(__name__)

CORE = "core"
BORDER = "border"
NOISE = "noise"
CLUSTER_TYPES = (CORE, BORDER, NOISE)

_CLUSTER_ID = re.compile(r"^cluster(\d+)$")


@dataclass(frozen=True)
class ClusterLabel:
    """Cluster assignment for the record at ``index``.

    ``id`` is the record's own identifier when ``id_key`` was given to
    :func:`dbscan`, otherwise the index.
    """

    index: int
    id: Any
    cluster_id: Optional[str]
    cluster_type: str


def _cluster_label(number: int) -> str:
    return f"cluster{number}"


def _last_cluster_number(cluster_ids: Sequence[Optional[str]]) -> int:
    numbers = [
        int(m.group(1))
        for m in (_CLUSTER_ID.match(str(cid)) for cid in cluster_ids if cid is not None)
        if m
    ]
    return max(numbers, default=0)


def dbscan(
    data: Sequence[Any],
    min_distance: float,
    min_neighbours: int,
    distance: Callable[[Any, Any], float],
    *,
    labels: Sequence[ClusterLabel | None] | None = None,
    id_key: str | None = None,
) -> List[ClusterLabel]:
    """Cluster ``data`` with DBSCAN and return one label per record.

    Args:
        data (Sequence): Records; passed unchanged to ``distance``.
        min_distance (float): Neighbourhood radius (epsilon). Two points are
            neighbours when ``distance(a, b) <= min_distance``.
        min_neighbours (int): Minimum neighbourhood size, counting the point
            itself, for a point to be core.
        distance (Callable): Metric taking two records.
        labels (Sequence[ClusterLabel | None] | None, optional): Labels from
            an earlier run to resume from, aligned with ``data``; ``None``
            entries are unlabelled. When omitted clustering starts fresh.
        id_key (str | None, optional): Record field copied into
            ``ClusterLabel.id``.

    Returns:
        list[ClusterLabel]: Labels aligned with ``data``.

    Raises:
        InvalidParameterError: If ``min_distance`` is negative or
            ``min_neighbours`` is below 1.
        DimensionMismatchError: If ``labels`` is not aligned with ``data``.

    Note:
        Identifiers are assigned in the order core points are discovered.
        When resuming, numbering continues after the highest existing
        ``cluster<N>`` so identifiers are never reused. Neighbourhood queries
        are brute force, ``O(N^2)`` distance calls in total.
    """
    if not min_distance >= 0:
        raise InvalidParameterError("min_distance must be a non-negative number.")
    if min_neighbours < 1:
        raise InvalidParameterError("min_neighbours must be at least 1.")

    n = len(data)
    cluster_ids: List[Optional[str]] = [None] * n
    cluster_types: List[Optional[str]] = [None] * n
    assigned = [False] * n

    if labels is not None:
        if len(labels) != n:
            raise DimensionMismatchError(
                f"labels has {len(labels)} entries but data has {n} records."
            )
        for i, label in enumerate(labels):
            if label is not None and label.cluster_type in CLUSTER_TYPES:
                cluster_ids[i] = label.cluster_id
                cluster_types[i] = label.cluster_type
                assigned[i] = True

    neighbourhoods: Dict[int, List[int]] = {}

    def neighbours_of(i: int) -> List[int]:
        if i not in neighbourhoods:
            neighbourhoods[i] = [
                j for j in range(n) if distance(data[i], data[j]) <= min_distance
            ]
        return neighbourhoods[i]

    def expand(frontier_seed: List[int], cluster_id: str) -> None:
        frontier = deque(frontier_seed)
        queued = set(frontier_seed)
        while frontier:
            j = frontier.popleft()
            if not assigned[j]:
                assigned[j] = True
                cluster_ids[j] = cluster_id
                reach = neighbours_of(j)
                if len(reach) >= min_neighbours:
                    cluster_types[j] = CORE
                    for k in reach:
                        if k not in queued:
                            queued.add(k)
                            frontier.append(k)
                else:
                    cluster_types[j] = BORDER
            elif cluster_ids[j] is None:
                cluster_ids[j] = cluster_id
                cluster_types[j] = BORDER

    counter = _last_cluster_number(cluster_ids)
    for i in range(n):
        if assigned[i]:
            continue
        reach = neighbours_of(i)
        assigned[i] = True
        if len(reach) < min_neighbours:
            cluster_ids[i] = None
            cluster_types[i] = NOISE
            continue
        counter += 1
        cluster_id = _cluster_label(counter)
        cluster_ids[i] = cluster_id
        cluster_types[i] = CORE
        logger.debug("Discovered %s from core point %d", cluster_id, i)
        expand(reach, cluster_id)

    for i in range(n):
        if cluster_ids[i] is not None:
            continue
        core = next((j for j in neighbours_of(i) if cluster_types[j] == CORE), None)
        if core is not None:
            cluster_ids[i] = cluster_ids[core]
            cluster_types[i] = BORDER

    logger.debug(
        "DBSCAN labelled %d points into %d clusters (%d noise)",
        n,
        len({cid for cid in cluster_ids if cid is not None}),
        sum(1 for t in cluster_types if t == NOISE),
    )

    return [
        ClusterLabel(
            index=i,
            id=_record_id(data[i], id_key, i),
            cluster_id=cluster_ids[i],
            cluster_type=cluster_types[i],
        )
        for i in range(n)
    ]


def _record_id(record: Any, id_key: str | None, index: int) -> Any:
    if id_key is None:
        return index
    try:
        return record[id_key]
    except (KeyError, TypeError, IndexError):
        return None


def add_clusters(
    data: Any,
    min_distance: float,
    min_neighbours: int,
    distance: Callable[[Any, Any], float],
    *,
    reset: bool = False,
    fields: RecordFields = DEFAULT_FIELDS,
) -> List[MutableMapping[str, Any]]:
    """Run :func:`dbscan` and write ``clusterId``/``clusterType`` onto records.

    Without ``reset`` existing labels on the records are kept and
    clustering resumes around them. With ``reset`` they are discarded first.

    Returns:
        list[dict]: The labelled records (the same list when ``data`` is a
        list).
    """
    records = as_records(data)
    if reset:
        for record in records:
            record.pop(fields.cluster_id, None)
            record.pop(fields.cluster_type, None)
        previous = None
    else:
        previous = [
            ClusterLabel(
                index=i,
                id=i,
                cluster_id=record.get(fields.cluster_id),
                cluster_type=record[fields.cluster_type],
            )
            if record.get(fields.cluster_type) in CLUSTER_TYPES
            else None
            for i, record in enumerate(records)
        ]

    for label in dbscan(
        records, min_distance, min_neighbours, distance, labels=previous
    ):
        records[label.index][fields.cluster_id] = label.cluster_id
        records[label.index][fields.cluster_type] = label.cluster_type
    return records
