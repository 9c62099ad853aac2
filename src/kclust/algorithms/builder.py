"""
Builder pattern for configuring K-means trainers.

Provides a fluent interface as an alternative to passing every keyword to
the :class:`KMeans` constructor.
"""

from typing import Optional, Union

import numpy as np
import torch
from torch import Tensor

from ..base.interfaces import ConvergenceCriterion
from ..distances.registry import MetricLike
from ..utils.convergence import (
    ChangeInAssignments, ChangeInObjective, ParameterChange, CombinedCriterion
)
from ..utils.device import parse_device
from .kmeans import KMeans


class ClusteringBuilder:
    """Fluent builder for K-means trainers.

    Examples
    --------
    >>> trainer = (ClusteringBuilder()
    ...     .with_distance('l1')
    ...     .with_threads(4)
    ...     .with_kmeans_plusplus_init()
    ...     .with_max_iter(50)
    ...     .with_random_state(0)
    ...     .build(n_clusters=5))
    """

    def __init__(self):
        self._metric: MetricLike = 'euclidean'
        self._n_threads = 1
        self._init: Union[str, Tensor, np.ndarray, list] = 'random'
        self._criterion: Optional[ConvergenceCriterion] = None

        self._max_iter = 100
        self._verbose = 0
        self._random_state = None
        self._device = None
        self._dtype = torch.float64

    def with_distance(self, metric: MetricLike) -> 'ClusteringBuilder':
        """Set the distance metric used for assignment."""
        self._metric = metric
        return self

    def with_threads(self, n_threads: int) -> 'ClusteringBuilder':
        """Set the number of worker threads."""
        self._n_threads = n_threads
        return self

    def with_random_init(self) -> 'ClusteringBuilder':
        """Use K distinct points drawn uniformly."""
        self._init = 'random'
        return self

    def with_kmeans_plusplus_init(self) -> 'ClusteringBuilder':
        """Use K-means++ initialization."""
        self._init = 'k-means++'
        return self

    def with_initial_centers(self, centers: Union[Tensor, np.ndarray, list]) -> 'ClusteringBuilder':
        """Start from explicit centers."""
        self._init = centers
        return self

    def with_convergence_criterion(self, criterion: ConvergenceCriterion) -> 'ClusteringBuilder':
        """Set convergence criterion."""
        self._criterion = criterion
        return self

    def with_assignment_convergence(self, tol: float = 0.0,
                                    patience: int = 1) -> 'ClusteringBuilder':
        """Use convergence based on assignment changes."""
        return self.with_convergence_criterion(
            ChangeInAssignments(min_change_fraction=tol, patience=patience)
        )

    def with_objective_convergence(self, rel_tol: float = 1e-4,
                                   abs_tol: float = 1e-8,
                                   patience: int = 1) -> 'ClusteringBuilder':
        """Use convergence based on objective changes."""
        return self.with_convergence_criterion(
            ChangeInObjective(rel_tol=rel_tol, abs_tol=abs_tol, patience=patience)
        )

    def with_parameter_convergence(self, tol: float = 1e-6,
                                   patience: int = 1) -> 'ClusteringBuilder':
        """Use convergence based on centroid movement."""
        return self.with_convergence_criterion(ParameterChange(tol=tol, patience=patience))

    def with_combined_convergence(self, criteria: list[ConvergenceCriterion],
                                  mode: str = 'any') -> 'ClusteringBuilder':
        """Use combined convergence criteria."""
        return self.with_convergence_criterion(CombinedCriterion(criteria, mode=mode))

    def with_max_iter(self, max_iter: int) -> 'ClusteringBuilder':
        """Set maximum iterations."""
        self._max_iter = max_iter
        return self

    def with_verbose(self, verbose: int) -> 'ClusteringBuilder':
        """Set verbosity level."""
        self._verbose = verbose
        return self

    def with_random_state(self, random_state: Union[int, torch.Generator]) -> 'ClusteringBuilder':
        """Set random seed."""
        self._random_state = random_state
        return self

    def with_device(self, device: Union[str, torch.device]) -> 'ClusteringBuilder':
        """Set computation device."""
        self._device = parse_device(device)
        return self

    def with_dtype(self, dtype: torch.dtype) -> 'ClusteringBuilder':
        """Set floating point type."""
        self._dtype = dtype
        return self

    def build(self, n_clusters: int) -> KMeans:
        """Build the configured trainer.

        Parameters
        ----------
        n_clusters : int
            Number of clusters

        Returns
        -------
        algorithm : KMeans
            Unfitted trainer; arguments are validated when it trains
        """
        return KMeans(
            n_clusters=n_clusters,
            init=self._init,
            max_iter=self._max_iter,
            metric=self._metric,
            n_threads=self._n_threads,
            criterion=self._criterion,
            verbose=self._verbose,
            random_state=self._random_state,
            device=self._device,
            dtype=self._dtype
        )


def create_kmeans(n_clusters: int, **kwargs) -> KMeans:
    """Create a K-means trainer using the builder.

    Parameters
    ----------
    n_clusters : int
        Number of clusters
    **kwargs : dict
        Builder settings by name, e.g. ``threads=4`` calls ``with_threads(4)``

    Returns
    -------
    algorithm : KMeans
        Configured trainer
    """
    builder = ClusteringBuilder()

    for key, value in kwargs.items():
        method = getattr(builder, f'with_{key}', None)
        if method is None:
            raise TypeError(f"Unknown builder option '{key}'")
        method(value)

    return builder.build(n_clusters)
