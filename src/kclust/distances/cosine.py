"""
Cosine distance metric.

Compares directions only, so it suits data where vector magnitude is noise
(term counts, embeddings).
"""

import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric


class CosineDistance(DistanceMetric):
    """Cosine distance ``1 - <x, mu> / (||x|| ||mu||)``.

    Zero vectors are treated as having norm ``eps`` so the distance stays
    finite (it evaluates to 1 against everything).
    """

    name = 'cosine'

    def __init__(self, eps: float = 1e-12):
        self.eps = eps

    def pairwise(self, points: Tensor, centroids: Tensor) -> Tensor:
        points_unit = points / torch.norm(points, dim=1, keepdim=True).clamp(min=self.eps)
        centroids_unit = centroids / torch.norm(centroids, dim=1, keepdim=True).clamp(min=self.eps)
        distances = torch.empty(points.shape[0], centroids.shape[0],
                                dtype=points.dtype, device=points.device)
        for k in range(centroids.shape[0]):
            similarity = torch.sum(points_unit * centroids_unit[k].unsqueeze(0), dim=1)
            distances[:, k] = 1 - similarity
        return distances.clamp(min=0.0)
