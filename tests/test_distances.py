# tests/test_distances.py
"""
Distance metrics and the vector-level ``distance`` function.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
import torch

from kclust import Distance, distance, get_distance
from kclust.base.exceptions import DimensionMismatchError, InvalidArgumentError
from kclust.distances import EuclideanDistance, ManhattanDistance, CosineDistance


def test_euclidean_is_true_distance():
    assert distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)
    assert distance([0.0, 0.0], [3.0, 4.0], Distance.EUCLIDEAN) == pytest.approx(5.0)


def test_l1_and_cosine_values():
    assert distance([1.0, -2.0, 3.0], [0.0, 0.0, 0.0], Distance.L1) == pytest.approx(6.0)
    assert distance([1.0, 0.0], [0.0, 1.0], Distance.COSINE) == pytest.approx(1.0)
    assert distance([1.0, 1.0], [2.0, 2.0], Distance.COSINE) == pytest.approx(0.0, abs=1e-12)
    assert distance([1.0, 0.0], [-1.0, 0.0], Distance.COSINE) == pytest.approx(2.0)


@pytest.mark.parametrize("metric", list(Distance))
def test_symmetric_and_zero_on_self(metric, rng):
    a = rng.normal(size=5)
    b = rng.normal(size=5)
    assert distance(a, b, metric) == pytest.approx(distance(b, a, metric))
    assert distance(a, a, metric) == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("metric", list(Distance))
def test_dimension_mismatch(metric):
    with pytest.raises(DimensionMismatchError):
        distance([1.0, 2.0], [1.0, 2.0, 3.0], metric)


def test_get_distance_resolution():
    assert isinstance(get_distance('euclidean'), EuclideanDistance)
    assert isinstance(get_distance('L2'), EuclideanDistance)
    assert isinstance(get_distance('manhattan'), ManhattanDistance)
    assert isinstance(get_distance(Distance.COSINE), CosineDistance)
    metric = ManhattanDistance()
    assert get_distance(metric) is metric

    with pytest.raises(InvalidArgumentError):
        get_distance('chebyshev')
    with pytest.raises(TypeError):
        get_distance(3)


def test_pairwise_matches_vector_distance(rng):
    points = torch.from_numpy(rng.normal(size=(7, 3)))
    centroids = torch.from_numpy(rng.normal(size=(4, 3)))
    for metric in Distance:
        impl = get_distance(metric)
        D = impl.pairwise(points, centroids)
        assert D.shape == (7, 4)
        for i in (0, 3, 6):
            for k in range(4):
                assert float(D[i, k]) == pytest.approx(distance(points[i], centroids[k], metric))


def test_euclidean_assignment_cost_is_squared(rng):
    points = torch.from_numpy(rng.normal(size=(6, 2)))
    centroids = torch.from_numpy(rng.normal(size=(3, 2)))
    metric = EuclideanDistance()
    torch.testing.assert_close(metric.assignment_cost(points, centroids),
                               metric.pairwise(points, centroids) ** 2)
    torch.testing.assert_close(EuclideanDistance(squared=True).pairwise(points, centroids),
                               metric.assignment_cost(points, centroids))


def test_cosine_zero_vector_stays_finite():
    D = CosineDistance().pairwise(torch.zeros(1, 3, dtype=torch.float64),
                                  torch.tensor([[1.0, 0.0, 0.0]], dtype=torch.float64))
    assert torch.isfinite(D).all()
    assert float(D[0, 0]) == pytest.approx(1.0)


def test_distance_enum_is_string_like():
    assert Distance('l1') is Distance.L1
    assert Distance.COSINE == 'cosine'
    assert not math.isnan(distance(np.ones(3), np.zeros(3), 'l1'))
