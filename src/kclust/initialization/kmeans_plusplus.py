"""
K-means++ initialization strategy.

Selects initial cluster centers using the K-means++ algorithm, which chooses
centers that are far apart to improve convergence speed and quality.
"""

import math
from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy, DistanceMetric
from ..base.exceptions import InvalidArgumentError
from ..distances.euclidean import EuclideanDistance


class KMeansPlusPlusInit(InitializationStrategy):
    """K-means++ initialization for better starting positions.

    Algorithm:
    1. Choose first center uniformly at random
    2. For each remaining center:
       - Compute distance from each point to nearest existing center
       - Choose next center with probability proportional to squared distance
    """

    def __init__(self, n_local_trials: Optional[int] = None,
                 metric: Optional[DistanceMetric] = None):
        """
        Args:
            n_local_trials: Number of candidates to try for each center.
                           If None, uses 2 + log(k) as in sklearn
            metric: Distance used for the D^2 weighting (Euclidean if None)
        """
        self.n_local_trials = n_local_trials
        self.metric = metric if metric is not None else EuclideanDistance()

    def _sq_distances(self, points: Tensor, center: Tensor) -> Tensor:
        return self.metric.pairwise(points, center.unsqueeze(0))[:, 0] ** 2

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize cluster centers using K-means++.

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

        if self.n_local_trials is None:
            n_local_trials = 2 + int(math.log(n_clusters))
        else:
            n_local_trials = self.n_local_trials

        center_indices = []

        # Choose first center uniformly at random
        first_idx = torch.randint(n_points, (1,), generator=generator).item()
        center_indices.append(first_idx)

        distances = self._sq_distances(points, points[first_idx])

        for c in range(1, n_clusters):
            total = distances.sum()
            if total <= 0:
                # Every point already coincides with a center; fall back to
                # uniform sampling among the points not yet chosen
                remaining = torch.ones(n_points, dtype=torch.float64)
                remaining[center_indices] = 0.0
                probabilities = remaining / remaining.sum()
            else:
                probabilities = (distances / total).to(torch.float64).cpu()

            candidates_idx = torch.multinomial(probabilities, n_local_trials,
                                               replacement=True, generator=generator)

            # Keep the candidate that lowers the potential the most
            best_potential = float('inf')
            best_candidate = None
            best_distances = None

            for idx in candidates_idx.tolist():
                candidate_distances = self._sq_distances(points, points[idx])
                new_distances = torch.minimum(distances, candidate_distances)
                potential = new_distances.sum().item()

                if potential < best_potential:
                    best_potential = potential
                    best_candidate = idx
                    best_distances = new_distances

            center_indices.append(best_candidate)
            distances = best_distances

        return points[center_indices].clone()
