import pytest

from scoop.errors import DimensionMismatchError, InvalidParameterError
from scoop.stats.clustering import ClusterLabel, add_clusters, dbscan
from scoop.stats.distance import euclidean_distance


def planar(a, b):
    return euclidean_distance(a["x"], a["y"], b["x"], b["y"])


def _partition(labels):
    groups = {}
    for label in labels:
        if label.cluster_id is not None:
            groups.setdefault(label.cluster_id, set()).add(label.index)
    return sorted(sorted(g) for g in groups.values())


def test_two_clusters_and_noise(planar_points):
    labels = dbscan(planar_points, 5, 2, planar, id_key="id")

    assert [l.cluster_id for l in labels] == [
        "cluster1",
        "cluster1",
        "cluster2",
        "cluster2",
        None,
    ]
    assert [l.cluster_type for l in labels] == ["core", "core", "core", "core", "noise"]
    assert [l.id for l in labels] == ["a", "b", "c", "d", "e"]
    # The pure variant leaves the records alone.
    assert "clusterId" not in planar_points[0]


def test_border_point():
    points = [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 2, "y": 0}, {"x": 3.6, "y": 0}]
    labels = dbscan(points, 1.5, 3, planar)
    assert [l.cluster_type for l in labels] == ["border", "core", "border", "noise"]
    assert labels[0].cluster_id == labels[1].cluster_id == labels[2].cluster_id
    assert labels[3].cluster_id is None


def test_noise_seen_first_becomes_border():
    # Index 0 is visited before the core point that reaches it.
    points = [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 2, "y": 0}, {"x": 1, "y": 1}]
    labels = dbscan(points, 1.0, 4, planar)
    assert labels[1].cluster_type == "core"
    assert labels[0].cluster_type == "border"
    assert labels[0].cluster_id == labels[1].cluster_id


def test_min_neighbours_counts_self():
    labels = dbscan([{"x": 0, "y": 0}], 0, 1, planar)
    assert labels[0].cluster_type == "core"
    assert labels[0].cluster_id == "cluster1"


def test_empty_dataset():
    assert dbscan([], 1.0, 2, planar) == []


def test_invalid_parameters(planar_points):
    with pytest.raises(InvalidParameterError):
        dbscan(planar_points, -1, 2, planar)
    with pytest.raises(InvalidParameterError):
        dbscan(planar_points, 1, 0, planar)
    with pytest.raises(DimensionMismatchError):
        dbscan(planar_points, 5, 2, planar, labels=[None])


def test_reset_is_deterministic(planar_points):
    first = _partition(dbscan(planar_points, 5, 2, planar))
    add_clusters(planar_points, 5, 2, planar)
    second = [dict(p) for p in planar_points]
    add_clusters(planar_points, 5, 2, planar, reset=True)
    assert first == [[0, 1], [2, 3]]
    assert [p["clusterId"] for p in planar_points] == [p["clusterId"] for p in second]


def test_add_clusters_writes_labels(planar_points):
    out = add_clusters(planar_points, 5, 2, planar)
    assert out is planar_points
    assert planar_points[0]["clusterId"] == "cluster1"
    assert planar_points[2]["clusterType"] == "core"
    assert planar_points[4]["clusterId"] is None
    assert planar_points[4]["clusterType"] == "noise"


def test_resume_keeps_labels_and_continues_numbering(planar_points):
    add_clusters(planar_points, 5, 2, planar)
    planar_points.append({"id": "f", "x": 80, "y": 80})
    planar_points.append({"id": "g", "x": 81, "y": 80})
    add_clusters(planar_points, 5, 2, planar)

    assert [p["clusterId"] for p in planar_points[:4]] == [
        "cluster1",
        "cluster1",
        "cluster2",
        "cluster2",
    ]
    assert planar_points[5]["clusterId"] == "cluster3"
    assert planar_points[6]["clusterId"] == "cluster3"
    # Previously labelled noise stays noise.
    assert planar_points[4]["clusterType"] == "noise"


def test_resume_from_pure_labels():
    points = [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 20, "y": 0}]
    previous = [ClusterLabel(0, 0, "cluster7", "core"), None, None]
    labels = dbscan(points, 1.5, 3, planar, labels=previous)
    assert labels[0].cluster_id == "cluster7"
    # An unlabelled point next to the resumed core joins it as border.
    assert labels[1].cluster_id == "cluster7"
    assert labels[1].cluster_type == "border"
    assert labels[2].cluster_type == "noise"


def test_custom_fields():
    from scoop.schema import RecordFields

    fields = RecordFields(cluster_id="group", cluster_type="role")
    points = [{"x": 0, "y": 0}, {"x": 1, "y": 0}]
    add_clusters(points, 2, 2, planar, fields=fields)
    assert points[0]["group"] == "cluster1"
    assert points[1]["role"] == "core"
