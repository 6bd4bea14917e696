"""Tests for the DBSCAN-style density clusterer."""

import numpy as np
import pytest

from doctopictree import ClusteringConfig, DensityClusterer, DensityParams, DensityStep


def test_schedule_by_corpus_size():
    cosine = DensityClusterer("cosine")
    assert cosine.params_for(5).min_cluster_size == 2
    assert cosine.params_for(5).similarity_threshold == pytest.approx(0.30)
    assert cosine.params_for(29).similarity_threshold == pytest.approx(0.35)
    assert cosine.params_for(50).min_cluster_size == 3
    assert cosine.params_for(50).similarity_threshold == pytest.approx(0.40)
    assert cosine.params_for(200).min_cluster_size == 6
    assert cosine.params_for(200).similarity_threshold == pytest.approx(0.45)

    euclidean = DensityClusterer("euclidean")
    assert euclidean.params_for(5).eps == pytest.approx(0.25)
    assert euclidean.params_for(20).eps == pytest.approx(0.15)
    assert euclidean.params_for(99).eps == pytest.approx(0.12)
    assert euclidean.params_for(100).eps == pytest.approx(0.08)


def test_tightened_params_shrink_with_depth():
    clusterer = DensityClusterer("cosine")
    base = clusterer.params_for(20)  # radius 0.65
    assert clusterer.tightened_params(base, 1).radius == pytest.approx(0.55)
    assert clusterer.tightened_params(base, 2).similarity_threshold == pytest.approx(0.55)
    assert clusterer.tightened_params(base, 5).radius == pytest.approx(0.2)

    wide = DensityParams(min_cluster_size=6, radius=0.9, metric="cosine")
    assert [clusterer.tightened_params(wide, d).min_cluster_size for d in (1, 2, 3)] == [6, 3, 2]


def test_tightened_params_never_loosen():
    clusterer = DensityClusterer("euclidean")
    base = clusterer.params_for(20)  # eps 0.15, below the 0.2 floor
    assert clusterer.tightened_params(base, 1).eps == pytest.approx(0.15)
    with pytest.raises(ValueError):
        clusterer.tightened_params(base, 0)


def test_euclidean_groups_and_noise():
    points = np.array([[0, 0], [0.1, 0], [0, 0.1], [5, 5], [5.1, 5], [10, -10]])
    labels = DensityClusterer("euclidean").cluster(
        points, params=DensityParams(min_cluster_size=2, radius=0.25, metric="euclidean")
    )
    assert labels.tolist() == [0, 0, 0, 1, 1, -1]


def test_border_point_visited_earlier_still_joins_cluster():
    # p0 has one neighbour (not core) and is visited first; p1 is core.
    points = np.array([[0.0, 0.0], [0.2, 0.0], [0.4, 0.0], [0.8, 0.0]])
    labels = DensityClusterer("euclidean").cluster(
        points, params=DensityParams(min_cluster_size=3, radius=0.25, metric="euclidean")
    )
    assert labels.tolist() == [0, 0, 0, -1]


def test_cosine_threshold_mode():
    vectors = np.array([[1.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    assert DensityClusterer("cosine").cluster(vectors).tolist() == [0, 0, -1]


def test_zero_vectors_are_never_neighbours():
    vectors = np.zeros((2, 3))
    assert DensityClusterer("cosine").cluster(vectors).tolist() == [-1, -1]
    assert DensityClusterer("cosine").cluster(np.zeros((2, 0))).tolist() == [-1, -1]


def test_cluster_ids_follow_discovery_order():
    vectors = np.array([[0.0, 1.0], [1.0, 0.0], [0.0, 1.0], [1.0, 0.0]])
    assert DensityClusterer("cosine").cluster(vectors).tolist() == [0, 1, 0, 1]


def test_custom_schedule():
    config = ClusteringConfig(density_schedule=[DensityStep(max_documents=None, min_cluster_size=3, similarity_threshold=0.9)])
    vectors = np.array([[1.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    assert DensityClusterer("cosine", config).cluster(vectors).tolist() == [-1, -1, -1]


def test_invalid_inputs():
    with pytest.raises(ValueError):
        DensityClusterer("manhattan")
    clusterer = DensityClusterer("cosine")
    with pytest.raises(ValueError):
        clusterer.cluster(np.ones(3))
    with pytest.raises(ValueError):
        clusterer.cluster(np.ones((2, 2)), params=DensityParams(2, 0.25, "euclidean"))
    assert clusterer.cluster(np.zeros((0, 2))).tolist() == []


def test_schedule_validation():
    with pytest.raises(ValueError):
        ClusteringConfig(density_schedule=[])
    with pytest.raises(ValueError):
        ClusteringConfig(density_schedule=[DensityStep(max_documents=None), DensityStep(max_documents=10)])
