"""
Diagnostic figures for clustering and distance annotations.

- Cluster scatter: one colour per cluster, noise in grey, border points hollow.
- Distance ranking: records sorted by Mahalanobis distance as horizontal bars.

Both functions read the attributes written by ``add_clusters`` and
``add_mahalanobis_distance`` and save PNG files.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from .errors import InvalidDataError
from .records import as_records, extract_numeric
from .schema import DEFAULT_FIELDS, RecordFields
from .stats.clustering import BORDER, NOISE

logger = logging.getLogger(__name__)

NOISE_COLOR = (0.6, 0.6, 0.6)


def setup_plot_style() -> None:
    """Legible defaults for report figures."""
    plt.style.use("default")
    plt.rcParams.update(
        {
            "font.size": 12,
            "axes.titlesize": 16,
            "axes.labelsize": 13,
            "legend.fontsize": 10,
            "figure.dpi": 120,
            "savefig.dpi": 200,
            "savefig.bbox": "tight",
            "axes.spines.top": False,
            "axes.spines.right": False,
            "grid.alpha": 0.25,
            "grid.linestyle": "--",
            "legend.frameon": False,
        }
    )


def _sanitize(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_") or "figure"


def plot_clusters(
    data: Any,
    x_key: str,
    y_key: str,
    output_dir: str = "output",
    *,
    title: Optional[str] = None,
    filename: Optional[str] = None,
    fields: RecordFields = DEFAULT_FIELDS,
) -> str:
    """Scatter ``x_key`` against ``y_key`` coloured by cluster.

    Records must already carry cluster labels (see ``add_clusters``).

    Returns:
        str: Path of the saved PNG.

    Raises:
        InvalidDataError: If a coordinate is not a finite number or a record
            has no cluster type.
    """
    records = as_records(data)
    xs = extract_numeric(records, x_key)
    ys = extract_numeric(records, y_key)
    for index, record in enumerate(records):
        if fields.cluster_type not in record:
            raise InvalidDataError(
                f'Record at index {index} has no "{fields.cluster_type}". '
                "Run add_clusters first."
            )

    cluster_ids = [r.get(fields.cluster_id) for r in records]
    cluster_types = [r[fields.cluster_type] for r in records]
    clusters = sorted({cid for cid in cluster_ids if cid is not None}, key=str)
    cmap = plt.get_cmap("tab10")

    setup_plot_style()
    os.makedirs(output_dir, exist_ok=True)
    fig, ax = plt.subplots(figsize=(8, 6))

    for k, cid in enumerate(clusters):
        color = cmap(k % 10)
        members = [i for i, c in enumerate(cluster_ids) if c == cid]
        filled = [i for i in members if cluster_types[i] != BORDER]
        hollow = [i for i in members if cluster_types[i] == BORDER]
        ax.scatter(xs[filled], ys[filled], color=color, s=40, label=str(cid))
        if hollow:
            ax.scatter(
                xs[hollow], ys[hollow], facecolors="none", edgecolors=color, s=40
            )

    noise = [i for i, t in enumerate(cluster_types) if t == NOISE]
    if noise:
        ax.scatter(
            xs[noise], ys[noise], color=NOISE_COLOR, marker="x", s=30, label=NOISE
        )

    ax.set_xlabel(x_key)
    ax.set_ylabel(y_key)
    ax.set_title(title or "Clusters")
    ax.grid(True)
    if clusters or noise:
        ax.legend(loc="best")

    out_path = os.path.join(
        output_dir, filename or f"clusters_{_sanitize(x_key)}_{_sanitize(y_key)}.png"
    )
    fig.savefig(out_path)
    plt.close(fig)
    logger.info("Saved cluster plot to %s", out_path)
    return out_path


def plot_distance_ranking(
    data: Any,
    output_dir: str = "output",
    *,
    label_key: Optional[str] = None,
    top: Optional[int] = None,
    title: Optional[str] = None,
    filename: str = "distance_ranking.png",
    fields: RecordFields = DEFAULT_FIELDS,
) -> str:
    """Horizontal bars of Mahalanobis distance, largest at the top.

    ``label_key`` names the field used for bar labels (record index when
    omitted); ``top`` keeps only the most distant records.

    Returns:
        str: Path of the saved PNG.
    """
    records = as_records(data)
    distances = extract_numeric(records, fields.distance, non_negative=True)
    order = list(np.argsort(-distances, kind="stable"))
    if top is not None:
        order = order[:top]

    labels: List[str] = [
        str(records[i].get(label_key, i)) if label_key else str(i) for i in order
    ]
    values = distances[order]

    setup_plot_style()
    os.makedirs(output_dir, exist_ok=True)
    fig, ax = plt.subplots(figsize=(8, max(3.0, 0.35 * len(order) + 1.5)))
    positions = np.arange(len(order))
    ax.barh(positions, values, color="0.3")
    ax.set_yticks(positions)
    ax.set_yticklabels(labels)
    ax.invert_yaxis()
    ax.set_xlabel("Mahalanobis distance")
    ax.set_title(title or "Distance from origin")
    ax.grid(True, axis="x")

    out_path = os.path.join(output_dir, filename)
    fig.savefig(out_path)
    plt.close(fig)
    logger.info("Saved distance ranking to %s", out_path)
    return out_path
