"""Тесты кластеризации цветов методом k-средних."""

import numpy as np
import pytest

from utils.kmeans import (
    InsufficientDataError,
    assign_points,
    cluster_colors,
    color_distance,
    has_converged,
    run_kmeans,
    seed_centroids,
    update_centroids,
)


class ScriptedRng:
    """Генератор с заранее заданными индексами и цветами добора."""

    def __init__(self, indices, fills=()):
        self._indices = list(indices)
        self._fills = list(fills)

    def integers(self, high):
        return self._indices.pop(0)

    def uniform(self, low, high, size):
        return np.array(self._fills.pop(0), dtype=np.float64)


def test_color_distance_is_euclidean():
    assert color_distance((0, 0, 0), (3, 4, 0)) == 5.0
    assert color_distance((10, 20, 30), (10, 20, 30)) == 0.0


@pytest.mark.parametrize("k", [1, 2, 5, 10])
def test_returns_exactly_k_integer_colors(k):
    rng = np.random.default_rng(3)
    points = rng.integers(0, 256, size=(200, 3))

    centroids = cluster_colors(points, k, rng=np.random.default_rng(11))

    assert len(centroids) == k
    for centroid in centroids:
        assert len(centroid) == 3
        assert all(isinstance(channel, int) and 0 <= channel <= 255 for channel in centroid)


def test_fewer_points_than_k_fills_with_random_colors():
    points = [(10, 10, 10), (200, 200, 200), (90, 40, 10)]

    centroids = cluster_colors(points, 8, rng=np.random.default_rng(5))

    assert len(centroids) == 8
    assert all(0 <= channel <= 255 for centroid in centroids for channel in centroid)
    for point in points:
        assert point in centroids


def test_single_color_input_converges_immediately():
    points = [(10, 20, 30)] * 25

    result = run_kmeans(points, 3)

    assert result.iterations == 1
    assert result.converged
    assert result.centroids == [(10, 20, 30)] * 3


def test_single_point_with_random_fill_keeps_dominant_color():
    centroids = cluster_colors([(10, 20, 30)], 5)

    assert len(centroids) == 5
    assert centroids[0] == (10, 20, 30)


def test_two_separated_clusters_converge():
    dark = [(i % 5, (2 * i) % 5, (3 * i) % 5) for i in range(50)]
    light = [(255 - r, 255 - g, 255 - b) for r, g, b in dark]

    result = run_kmeans(dark + light, 2, rng=np.random.default_rng(7))

    assert result.converged
    assert result.iterations < 20
    low, high = sorted(result.centroids, key=sum)
    assert color_distance(low, (0, 0, 0)) < 5
    assert color_distance(high, (255, 255, 255)) < 5


def test_empty_cluster_keeps_its_seed():
    points = [(10, 10, 10)] * 5 + [(20, 20, 20)] * 5
    # индексы 0 и 1 – один и тот же цвет, второй центроид никогда не выигрывает
    rng = ScriptedRng(indices=[0, 1, 5])

    result = run_kmeans(points, 3, rng=rng)

    assert result.centroids == [(10, 10, 10), (10, 10, 10), (20, 20, 20)]


def test_random_fill_centroid_without_points_is_returned_unchanged():
    points = [(10, 10, 10), (20, 20, 20)]
    rng = ScriptedRng(indices=[0, 1], fills=[(250, 240, 230)])

    centroids = cluster_colors(points, 3, rng=rng)

    assert centroids == [(10, 10, 10), (20, 20, 20), (250, 240, 230)]


def test_seeding_skips_already_used_indices():
    points = np.array([(1, 1, 1), (2, 2, 2), (3, 3, 3)], dtype=np.float64)
    rng = ScriptedRng(indices=[2, 2, 2, 0])

    seeds = seed_centroids(points, 2, rng)

    np.testing.assert_array_equal(seeds, [[3, 3, 3], [1, 1, 1]])


def test_assignment_prefers_lowest_index_on_tie():
    points = np.array([(10.0, 10.0, 10.0)])
    centroids = np.array([(0.0, 0.0, 0.0), (20.0, 20.0, 20.0)])

    assert assign_points(points, centroids).tolist() == [0]


def test_update_is_component_wise_mean_and_does_not_mutate_input():
    points = np.array([(0.0, 0.0, 0.0), (10.0, 20.0, 30.0), (100.0, 100.0, 100.0)])
    centroids = np.array([(1.0, 1.0, 1.0), (90.0, 90.0, 90.0), (200.0, 0.0, 0.0)])
    labels = np.array([0, 0, 1])

    updated = update_centroids(points, labels, centroids)

    np.testing.assert_array_equal(updated, [[5, 10, 15], [100, 100, 100], [200, 0, 0]])
    np.testing.assert_array_equal(centroids[0], [1, 1, 1])


def test_convergence_requires_every_shift_below_one():
    old = np.array([(0.0, 0.0, 0.0), (50.0, 50.0, 50.0)])

    assert has_converged(old, old + 0.5)
    assert not has_converged(old, old + np.array([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]))


def test_iteration_cap_is_respected():
    rng = np.random.default_rng(1)
    points = rng.integers(0, 256, size=(300, 3))

    result = run_kmeans(points, 6, max_iterations=1, rng=np.random.default_rng(2))

    assert result.iterations == 1
    assert len(result.centroids) == 6


def test_output_rounds_half_up():
    points = [(0, 0, 0), (1, 1, 1)]

    assert cluster_colors(points, 1) == [(1, 1, 1)]


def test_empty_input_is_rejected():
    with pytest.raises(InsufficientDataError):
        cluster_colors([], 3)


def test_invalid_cluster_count_is_rejected():
    with pytest.raises(ValueError):
        cluster_colors([(1, 2, 3)], 0)


def test_malformed_points_are_rejected():
    with pytest.raises(ValueError):
        cluster_colors([(1, 2), (3, 4)], 1)
