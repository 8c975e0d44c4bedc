"""Define standardized attribute names written onto enriched records."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecordFields:
    """Container for the attribute names that enrichment functions add.

    These names are used everywhere a dataset record is annotated in place,
    so CSV exports, plots and the CLI all agree on the same columns.

    Attributes:
        distance: Mahalanobis distance from the origin point. Written by
            ``add_mahalanobis_distance``.

        similarity: ``1 - distance / max(distance)`` over one annotated
            batch. The value is relative to the dataset it was computed on
            and must not be compared across batches.

        cluster_id: Cluster identifier (``"cluster1"``, ``"cluster2"``, ...)
            or ``None`` for noise. Written by ``add_clusters``.

        cluster_type: One of ``"core"``, ``"border"`` or ``"noise"``.

        z_score: Standard score written by ``add_z_score``.
    """

    distance: str = "distance"
    similarity: str = "similarity"
    cluster_id: str = "clusterId"
    cluster_type: str = "clusterType"
    z_score: str = "zScore"


DEFAULT_FIELDS = RecordFields()
