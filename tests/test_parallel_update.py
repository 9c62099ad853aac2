# tests/test_parallel_update.py
"""
Parallel update engine: reduction of thread-local partials and the
per-centroid division spread over the pool.
"""

from __future__ import annotations

import pytest
import torch

from kclust.assignments import ParallelAssignment
from kclust.base import CentroidStore, ShardResult
from kclust.updates import MeanUpdater
from kclust.utils.parallel import WorkerPool


def _shard(start, stop, sums, counts):
    return ShardResult(start=start, stop=stop, labels=torch.zeros(stop - start, dtype=torch.long),
                       sums=torch.tensor(sums, dtype=torch.float64),
                       counts=torch.tensor(counts), objective=0.0)


def test_reduce_is_order_independent():
    a = _shard(0, 3, [[1.0, 2.0], [0.0, 0.0]], [3, 0])
    b = _shard(3, 5, [[1.0, 0.0], [4.0, 4.0]], [1, 1])
    sums_ab, counts_ab = MeanUpdater.reduce([a, b])
    sums_ba, counts_ba = MeanUpdater.reduce([b, a])
    torch.testing.assert_close(sums_ab, sums_ba)
    assert torch.equal(counts_ab, counts_ba)
    assert counts_ab.tolist() == [4, 1]


def test_reduce_does_not_mutate_partials():
    a = _shard(0, 1, [[1.0, 1.0]], [1])
    b = _shard(1, 2, [[2.0, 2.0]], [1])
    MeanUpdater.reduce([a, b])
    assert a.sums.tolist() == [[1.0, 1.0]]
    assert a.counts.tolist() == [1]


def test_reduce_requires_shards():
    with pytest.raises(ValueError):
        MeanUpdater.reduce([])


@pytest.mark.parametrize("n_threads", [1, 2, 5])
def test_update_moves_centroids_to_means(n_threads):
    points = torch.tensor([[0.0, 0.0], [0.0, 2.0], [10.0, 10.0], [12.0, 10.0]], dtype=torch.float64)
    store = CentroidStore(torch.tensor([[0.0, 1.0], [11.0, 9.0], [50.0, 50.0]], dtype=torch.float64))

    with WorkerPool(n_threads) as pool:
        result = ParallelAssignment().assign(points, store.current_centroids(), pool)
        counts = MeanUpdater().update(store, result.shards, pool)

    assert counts.tolist() == [2, 2, 0]
    expected = torch.tensor([[0.0, 1.0], [11.0, 10.0], [50.0, 50.0]], dtype=torch.float64)
    torch.testing.assert_close(store.current_centroids(), expected)


def test_update_many_centroids_over_pool():
    g = torch.Generator().manual_seed(5)
    points = torch.randn(300, 2, generator=g, dtype=torch.float64)
    initial = points[:17].clone()

    stores = []
    for n_threads in (1, 4):
        store = CentroidStore(initial)
        with WorkerPool(n_threads) as pool:
            result = ParallelAssignment().assign(points, store.current_centroids(), pool)
            MeanUpdater().update(store, result.shards, pool)
        stores.append(store.current_centroids())

    torch.testing.assert_close(stores[0], stores[1])
    assert torch.isfinite(stores[1]).all()
