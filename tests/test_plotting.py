import os

import pytest

from scoop.errors import InvalidDataError
from scoop.plotting import plot_clusters, plot_distance_ranking
from scoop.stats.clustering import add_clusters
from scoop.stats.distance import add_mahalanobis_distance, euclidean_distance


def test_plot_clusters_writes_png(tmp_path, planar_points):
    add_clusters(
        planar_points,
        5,
        2,
        lambda a, b: euclidean_distance(a["x"], a["y"], b["x"], b["y"]),
    )
    path = plot_clusters(planar_points, "x", "y", str(tmp_path / "figs"))
    assert os.path.exists(path)
    assert path.endswith("clusters_x_y.png")
    assert os.path.getsize(path) > 0


def test_plot_clusters_requires_labels(tmp_path, planar_points):
    with pytest.raises(InvalidDataError, match="add_clusters"):
        plot_clusters(planar_points, "x", "y", str(tmp_path))


def test_plot_distance_ranking(tmp_path):
    data = [
        {"name": "a", "x": 1.0, "y": 2.0},
        {"name": "b", "x": 2.0, "y": 1.0},
        {"name": "c", "x": 3.0, "y": 5.0},
        {"name": "d", "x": 4.0, "y": 3.0},
    ]
    add_mahalanobis_distance({"x": 2.5, "y": 2.5}, data)
    path = plot_distance_ranking(data, str(tmp_path), label_key="name", top=3)
    assert os.path.exists(path)
    assert os.path.basename(path) == "distance_ranking.png"
