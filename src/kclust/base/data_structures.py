"""
Core data structures for the kclust engine.

Holds the dataset container, the mutable centroid store that a training run
iterates on, the per-shard partial results emitted by the assignment step and
the per-iteration state recorded in a run's history.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import torch
from torch import Tensor

from .interfaces import InitializationStrategy
from ..utils.convergence import TrainingStatus
from ..utils.validation import validate_data, validate_labels


class Dataset:
    """Ordered points with optional ground-truth labels.

    Points are immutable once loaded: the constructor takes a private copy
    only when conversion requires one, and neither tensor is modified
    afterwards.
    """

    def __init__(self, points, labels=None,
                 dtype: torch.dtype = torch.float64,
                 device: Optional[torch.device] = None):
        """
        Args:
            points: (n, d) array-like of points
            labels: Optional (n,) array-like of integer labels
            dtype: Floating point type for the points
            device: Target device
        """
        self.points = validate_data(points, dtype=dtype, device=device)
        self.labels = None
        if labels is not None:
            self.labels = validate_labels(labels, n_samples=self.points.shape[0])

    @property
    def n_samples(self) -> int:
        return self.points.shape[0]

    @property
    def dimension(self) -> int:
        return self.points.shape[1]

    @property
    def has_labels(self) -> bool:
        return self.labels is not None

    def __len__(self) -> int:
        return self.n_samples

    def __repr__(self) -> str:
        return (f"Dataset(n_samples={self.n_samples}, dimension={self.dimension}, "
                f"labelled={self.has_labels})")


def mean_or_keep(previous: Tensor, sums: Tensor, counts: Tensor) -> Tensor:
    """New centroid rows: ``sums / counts``, or the previous row when empty.

    Args:
        previous: (m, d) current centroids
        sums: (m, d) sum of the points assigned to each centroid
        counts: (m,) number of points assigned to each centroid

    Returns:
        (m, d) updated centroids
    """
    empty = counts == 0
    safe_counts = counts.clamp(min=1).to(sums.dtype).unsqueeze(1)
    means = sums / safe_counts
    return torch.where(empty.unsqueeze(1), previous, means)


class CentroidStore:
    """Mutable collection of K centroids for one training run.

    Centroid indices are stable for the lifetime of the run. A centroid that
    receives no points during an update keeps its previous position; it is
    never re-seeded.
    """

    def __init__(self, centroids: Tensor):
        """
        Args:
            centroids: (K, d) initial centroids (copied)
        """
        if centroids.dim() != 2:
            raise ValueError(f"Expected 2D centroid tensor, got {centroids.dim()}D")
        self._centroids = centroids.detach().clone()

    @classmethod
    def initialize(cls, n_clusters: int, generator: torch.Generator, points: Tensor,
                   init: Optional[InitializationStrategy] = None) -> 'CentroidStore':
        """Seed a store from ``points``.

        Args:
            n_clusters: Number of centroids K
            generator: Seeded random source for the policy
            points: (n, d) training points
            init: Initialization policy (uniform distinct-point sampling if None)
        """
        if init is None:
            from ..initialization.random import RandomInit
            init = RandomInit()
        centroids = init.initialize(points, n_clusters, generator=generator)
        return cls(centroids.to(dtype=points.dtype, device=points.device))

    @property
    def n_clusters(self) -> int:
        return self._centroids.shape[0]

    @property
    def dimension(self) -> int:
        return self._centroids.shape[1]

    def current_centroids(self) -> Tensor:
        """Copy of the (K, d) centroid matrix."""
        return self._centroids.clone()

    def apply_update(self, sums: Tensor, counts: Tensor) -> None:
        """Replace every centroid by its mean; empty clusters stay put."""
        if sums.shape != self._centroids.shape:
            raise ValueError(f"Expected sums of shape {tuple(self._centroids.shape)}, "
                             f"got {tuple(sums.shape)}")
        self.replace(mean_or_keep(self._centroids, sums, counts))

    def replace(self, centroids: Tensor) -> None:
        """Swap in a whole new centroid matrix."""
        assert centroids.shape == self._centroids.shape
        self._centroids = centroids

    def freeze(self) -> Tensor:
        """Immutable snapshot handed to the trained model."""
        return self._centroids.clone()

    def __repr__(self) -> str:
        return f"CentroidStore(n_clusters={self.n_clusters}, dimension={self.dimension})"


@dataclass
class ShardResult:
    """What one worker produces for its contiguous slice of the data."""
    start: int
    stop: int
    labels: Tensor              # (stop - start,) nearest-centroid indices
    sums: Optional[Tensor]      # (K, d) sum of assigned points, thread-local
    counts: Optional[Tensor]    # (K,) number of assigned points, thread-local
    objective: float            # sum of assignment costs


@dataclass
class AssignmentResult:
    """Merged output of the assignment step."""
    labels: Tensor
    shards: List[ShardResult]

    @property
    def objective(self) -> float:
        return sum(shard.objective for shard in self.shards)


@dataclass
class AlgorithmState:
    """State of a training run at the end of one iteration.

    Used for convergence diagnostics and debugging.
    """
    iteration: int
    centroids: Tensor
    n_changed: Optional[int]
    objective_value: float
    status: TrainingStatus = TrainingStatus.RUNNING
    metadata: Dict[str, Any] = field(default_factory=dict)
