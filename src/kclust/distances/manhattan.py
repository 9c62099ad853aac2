"""
L1 (Manhattan) distance metric.
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class ManhattanDistance(DistanceMetric):
    """L1 distance ``sum_i |x_i - mu_i|``."""

    name = 'l1'

    def pairwise(self, points: Tensor, centroids: Tensor) -> Tensor:
        distances = torch.empty(points.shape[0], centroids.shape[0],
                                dtype=points.dtype, device=points.device)
        for k in range(centroids.shape[0]):
            distances[:, k] = torch.sum(torch.abs(points - centroids[k].unsqueeze(0)), dim=1)
        return distances
