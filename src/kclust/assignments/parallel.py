"""
Parallel hard assignment (the expectation step).

The points are cut into contiguous shards, one per worker. Each worker finds
the nearest centroid for every point of its shard and, in the same pass,
accumulates thread-local per-centroid sums and counts for the update step.
Nothing is written to shared state until every shard has finished.
"""

from typing import Optional

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric
from ..base.data_structures import AssignmentResult, ShardResult
from ..base.exceptions import DimensionMismatchError
from ..distances.registry import MetricLike, get_distance
from ..utils.parallel import WorkerPool, shard_ranges


class ParallelAssignment:
    """Hard (discrete) assignment to the nearest centroid, sharded over threads.

    Ties are broken in favour of the lowest centroid index, and each point's
    label depends only on that point and the centroids, so labels are
    identical for any number of threads.
    """

    def __init__(self, metric: MetricLike = 'euclidean'):
        """
        Args:
            metric: Distance used to pick the nearest centroid
        """
        self.metric: DistanceMetric = get_distance(metric)

    @property
    def is_soft(self) -> bool:
        return False

    def assign_shard(self, points: Tensor, centroids: Tensor,
                     start: int, stop: int,
                     with_partials: bool = True) -> ShardResult:
        """Assign ``points[start:stop]`` and aggregate its partial statistics.

        Args:
            points: (n, d) all data points
            centroids: (K, d) current centroids
            start, stop: Shard bounds
            with_partials: Also compute per-centroid sums and counts

        Returns:
            ShardResult for this slice
        """
        shard = points[start:stop]
        n_clusters = centroids.shape[0]

        costs = self.metric.assignment_cost(shard, centroids)
        # argmin returns the first minimal index: lowest centroid wins ties
        labels = torch.argmin(costs, dim=1)
        objective = float(torch.gather(costs, 1, labels.unsqueeze(1)).sum())

        sums = counts = None
        if with_partials:
            sums = torch.zeros(n_clusters, shard.shape[1], dtype=shard.dtype, device=shard.device)
            sums.index_add_(0, labels, shard)
            counts = torch.bincount(labels, minlength=n_clusters)

        return ShardResult(start=start, stop=stop, labels=labels,
                           sums=sums, counts=counts, objective=objective)

    def assign(self, points: Tensor, centroids: Tensor,
               pool: Optional[WorkerPool] = None,
               with_partials: bool = True) -> AssignmentResult:
        """Assign every point to its nearest centroid.

        Blocks until all shards are complete.

        Args:
            points: (n, d) data points
            centroids: (K, d) centroids
            pool: Worker pool; runs on the calling thread if None
            with_partials: Also compute per-shard sums and counts

        Returns:
            AssignmentResult with the (n,) labels and the per-shard results
        """
        if points.shape[1] != centroids.shape[1]:
            raise DimensionMismatchError(f"Points have dimension {points.shape[1]}, "
                                         f"centroids have dimension {centroids.shape[1]}")

        n_threads = pool.n_threads if pool is not None else 1
        ranges = shard_ranges(points.shape[0], n_threads)

        def run(bounds):
            return self.assign_shard(points, centroids, bounds[0], bounds[1],
                                     with_partials=with_partials)

        if pool is None:
            shards = [run(bounds) for bounds in ranges]
        else:
            shards = pool.map(run, ranges)

        if shards:
            labels = torch.cat([shard.labels for shard in shards])
        else:
            labels = torch.empty(0, dtype=torch.long, device=points.device)

        return AssignmentResult(labels=labels, shards=shards)

    def __repr__(self) -> str:
        return f"ParallelAssignment(metric={self.metric!r})"
