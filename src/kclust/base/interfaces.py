"""
Core interfaces for the kclust clustering engine.

The engine is assembled from a handful of small, swappable parts: a distance
metric, an initialization policy and a convergence criterion. Trainers and
trained models expose a deliberately narrow capability surface: ``train`` on
one side and ``predict`` on the other.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import torch
from torch import Tensor


class DistanceMetric(ABC):
    """Abstract base class for point-to-centroid distances."""

    #: Name used by the ``Distance`` registry and in ``repr``.
    name: str = 'abstract'

    @abstractmethod
    def pairwise(self, points: Tensor, centroids: Tensor) -> Tensor:
        """Compute true distances between every point and every centroid.

        Args:
            points: (n, d) tensor of points
            centroids: (K, d) tensor of centroids

        Returns:
            (n, K) tensor of distances
        """
        pass

    def assignment_cost(self, points: Tensor, centroids: Tensor) -> Tensor:
        """Cost used for nearest-centroid search.

        Any monotonic transform of :meth:`pairwise` gives identical
        assignments; metrics may override this with a cheaper form.

        Returns:
            (n, K) tensor of costs
        """
        return self.pairwise(points, centroids)

    def compute(self, a: Tensor, b: Tensor) -> float:
        """Distance between two single vectors."""
        return self.pairwise(a.unsqueeze(0), b.unsqueeze(0))[0, 0].item()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class InitializationStrategy(ABC):
    """Abstract base class for centroid initialization policies."""

    @abstractmethod
    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Choose initial centroids.

        Args:
            points: (n, d) data points
            n_clusters: Number of centroids K
            generator: Seeded random source; the only randomness used
            **kwargs: Strategy-specific parameters

        Returns:
            (K, d) tensor of initial centroids
        """
        pass


class ConvergenceCriterion(ABC):
    """Abstract base class for convergence checking."""

    def __init__(self):
        self.history = []

    @abstractmethod
    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if the algorithm has converged.

        Args:
            current_state: Dictionary containing current algorithm state

        Returns:
            True if converged, False otherwise
        """
        pass

    def reset(self):
        """Reset convergence history."""
        self.history = []


class ClusteringModel(ABC):
    """A frozen clustering model. Inference only."""

    @abstractmethod
    def predict(self, X) -> Tensor:
        """Assign each row of ``X`` to a cluster.

        Returns:
            (n,) long tensor of cluster indices
        """
        pass


class ClusteringTrainer(ABC):
    """Something that turns a dataset into a :class:`ClusteringModel`."""

    @abstractmethod
    def train(self, X) -> ClusteringModel:
        """Fit on ``X`` and return a frozen model."""
        pass
