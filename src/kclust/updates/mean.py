"""
Mean update strategy for centroid-based clustering (the maximization step).
"""

from typing import List, Optional, Sequence, Tuple

import torch
from torch import Tensor

from ..base.data_structures import CentroidStore, ShardResult, mean_or_keep
from ..utils.parallel import WorkerPool, shard_ranges


class MeanUpdater:
    """Updates centroids to the mean of their assigned points.

    Per-shard partial sums and counts are merged at the barrier by an
    ordered sum (associative and commutative, so the shard layout only
    affects floating-point rounding). The division is then spread over the
    pool by centroid range: centroids are independent, so each worker owns
    a disjoint block of rows and returns it instead of writing in place.
    Centroids with no assigned points keep their previous position.
    """

    @staticmethod
    def reduce(shards: Sequence[ShardResult]) -> Tuple[Tensor, Tensor]:
        """Merge thread-local partials into global sums and counts.

        Args:
            shards: Results of the assignment step, each carrying partials

        Returns:
            sums: (K, d) sum of the points assigned to each centroid
            counts: (K,) number of points assigned to each centroid
        """
        if not shards:
            raise ValueError("Nothing to reduce: no shard results")
        if any(shard.sums is None or shard.counts is None for shard in shards):
            raise ValueError("Shard results were computed without partial sums")

        sums = shards[0].sums.clone()
        counts = shards[0].counts.clone()
        for shard in shards[1:]:
            sums += shard.sums
            counts += shard.counts
        return sums, counts

    def update(self, store: CentroidStore,
               shards: Sequence[ShardResult],
               pool: Optional[WorkerPool] = None) -> Tensor:
        """Replace every centroid in ``store`` by its new mean.

        Args:
            store: Centroid store to update
            shards: Results of the assignment step
            pool: Worker pool; runs on the calling thread if None

        Returns:
            (K,) counts used for the update
        """
        sums, counts = self.reduce(shards)
        previous = store.current_centroids()

        n_threads = pool.n_threads if pool is not None else 1
        ranges = shard_ranges(store.n_clusters, n_threads)

        def run(bounds):
            start, stop = bounds
            return mean_or_keep(previous[start:stop], sums[start:stop], counts[start:stop])

        if pool is None:
            blocks: List[Tensor] = [run(bounds) for bounds in ranges]
        else:
            blocks = pool.map(run, ranges)

        store.replace(torch.cat(blocks, dim=0))
        return counts

    def __repr__(self) -> str:
        return "MeanUpdater()"
