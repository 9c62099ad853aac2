"""
Random initialization strategy for clustering algorithms.

Selects random points from the dataset as initial cluster centers.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..base.exceptions import InvalidArgumentError


class RandomInit(InitializationStrategy):
    """Random initialization by selecting points from the dataset.

    Selects n_clusters distinct points (without replacement), uniformly at
    random, as initial centers. The same generator state always picks the
    same points.
    """

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize centroids with random points.

        Args:
            points: (n, d) data points
            n_clusters: Number of clusters
            generator: Seeded random source

        Returns:
            (n_clusters, d) tensor of initial centroids
        """
        n_points = points.shape[0]

        if n_clusters > n_points:
            raise InvalidArgumentError(f"Cannot create {n_clusters} clusters from {n_points} points")

        # Permutation is drawn on CPU so the seed means the same thing everywhere
        indices = torch.randperm(n_points, generator=generator)[:n_clusters]

        return points[indices.to(points.device)].clone()
