"""
Euclidean distance metric for clustering.

The most common distance metric, and the one K-means minimizes.
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


def _squared_distances(points: Tensor, centroids: Tensor) -> Tensor:
    # One column per centroid; each entry depends only on its own point,
    # so results do not change with how the points are sharded.
    distances = torch.empty(points.shape[0], centroids.shape[0],
                            dtype=points.dtype, device=points.device)
    for k in range(centroids.shape[0]):
        diff = points - centroids[k].unsqueeze(0)
        distances[:, k] = torch.sum(diff * diff, dim=1)
    return distances


class EuclideanDistance(DistanceMetric):
    """Euclidean distance ``||x - mu||``.

    Nearest-centroid search compares squared distances, which give the same
    ordering without the square root.
    """

    name = 'euclidean'

    def __init__(self, squared: bool = False):
        """
        Args:
            squared: If True, :meth:`pairwise` returns squared distances.
                     The default returns actual Euclidean distances.
        """
        self.squared = squared

    def pairwise(self, points: Tensor, centroids: Tensor) -> Tensor:
        """Compute Euclidean distances from points to centroids.

        Args:
            points: (n, d) tensor of points
            centroids: (K, d) tensor of centroids

        Returns:
            (n, K) tensor of distances
        """
        squared_distances = _squared_distances(points, centroids)
        if self.squared:
            return squared_distances
        return torch.sqrt(squared_distances)

    def assignment_cost(self, points: Tensor, centroids: Tensor) -> Tensor:
        return _squared_distances(points, centroids)

    def __repr__(self) -> str:
        return f"EuclideanDistance(squared={self.squared})"
