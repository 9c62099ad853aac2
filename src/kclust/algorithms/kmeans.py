"""
K-means clustering algorithm.

The classic K-means algorithm on top of the parallel assignment/update
engine, plus a small functional API (``train`` / ``predict``).
"""

from typing import Optional, Union

import numpy as np
import torch
from torch import Tensor

from ..base.clustering_base import BaseClusteringAlgorithm
from ..base.data_structures import Dataset
from ..base.exceptions import DimensionMismatchError
from ..base.interfaces import ClusteringModel, ConvergenceCriterion
from ..assignments.parallel import ParallelAssignment
from ..distances.registry import Distance, MetricLike, get_distance
from ..initialization.random import RandomInit
from ..initialization.kmeans_plusplus import KMeansPlusPlusInit
from ..initialization.from_previous import FromPreviousInit
from ..updates.mean import MeanUpdater
from ..utils.convergence import ChangeInAssignments, TrainingStatus
from ..utils.parallel import WorkerPool
from ..utils.validation import validate_data, validate_init_params, check_n_threads


class KMeansModel(ClusteringModel):
    """Frozen result of a K-means training run.

    Holds its own copy of the centroids and never modifies it, so one model
    can serve concurrent ``predict`` calls from several threads.

    Attributes
    ----------
    n_iter : int
        Update rounds performed during training
    status : TrainingStatus
        Why training stopped
    inertia : float
        Objective on the training data (sum of squared distances for
        Euclidean, sum of distances otherwise)
    """

    def __init__(self, centroids: Tensor,
                 metric: MetricLike = Distance.EUCLIDEAN,
                 n_threads: int = 1,
                 n_iter: int = 0,
                 status: TrainingStatus = TrainingStatus.CONVERGED,
                 inertia: float = float('nan')):
        self._centroids = centroids.detach().clone()
        self.metric = get_distance(metric)
        self.n_threads = check_n_threads(n_threads)
        self.n_iter = n_iter
        self.status = status
        self.inertia = inertia
        self._assignment = ParallelAssignment(self.metric)

    @property
    def centroids(self) -> Tensor:
        """(K, d) copy of the centroids."""
        return self._centroids.clone()

    @property
    def n_clusters(self) -> int:
        return self._centroids.shape[0]

    @property
    def dimension(self) -> int:
        return self._centroids.shape[1]

    def _prepare(self, X) -> Tensor:
        if isinstance(X, Dataset):
            X = X.points
        X = validate_data(X, dtype=self._centroids.dtype, device=self._centroids.device,
                          ensure_min_samples=0)
        if X.shape[1] != self.dimension:
            raise DimensionMismatchError(f"Model has dimension {self.dimension}, "
                                         f"data has dimension {X.shape[1]}")
        return X

    def predict(self, X, n_threads: Optional[int] = None) -> Tensor:
        """Assign each row of ``X`` to its nearest centroid.

        Args:
            X: (n, d) data or a :class:`Dataset`
            n_threads: Worker threads for this call (model default if None)

        Returns:
            (n,) long tensor of cluster indices
        """
        X = self._prepare(X)
        n_threads = self.n_threads if n_threads is None else check_n_threads(n_threads)
        with WorkerPool(n_threads) as pool:
            result = self._assignment.assign(X, self._centroids, pool, with_partials=False)
        return result.labels

    def score(self, X) -> float:
        """Negative objective of ``X`` under this model."""
        X = self._prepare(X)
        result = self._assignment.assign(X, self._centroids, with_partials=False)
        return -result.objective

    def __repr__(self) -> str:
        return (f"KMeansModel(n_clusters={self.n_clusters}, dimension={self.dimension}, "
                f"metric={self.metric!r}, status={self.status.value})")


class KMeans(BaseClusteringAlgorithm):
    """K-means clustering algorithm.

    Classic K-means that partitions data into K clusters by alternating
    nearest-centroid assignment and mean updates, both spread over a pool of
    worker threads.

    Parameters
    ----------
    n_clusters : int
        Number of clusters
    init : str or array-like, default='random'
        Initialization method:
        - 'random' : K distinct points sampled uniformly
        - 'k-means++' : K-means++ initialization
        - array of shape (n_clusters, n_features) : Use as initial centers
    max_iter : int, default=100
        Maximum number of update rounds
    metric : str, Distance or DistanceMetric, default='euclidean'
        Distance used for assignment
    n_threads : int, default=1
        Worker threads
    tol : float, default=0.0
        Largest fraction of points allowed to change cluster for the
        assignment to count as stable (0.0 means no point changed)
    criterion : ConvergenceCriterion, optional
        Replaces the assignment-stability test (``tol`` is then ignored)
    verbose : int, default=0
        Verbosity level
    random_state : int or torch.Generator, optional
        Seed for reproducibility
    device : str or torch.device, optional
        Device for the tensors (CPU by default)

    Attributes
    ----------
    cluster_centers_ : Tensor of shape (n_clusters, n_features)
        Cluster centroids
    labels_ : Tensor of shape (n_samples,)
        Cluster assignments for training data
    inertia_ : float
        Objective value of the final assignment
    n_iter_ : int
        Number of update rounds run
    status_ : TrainingStatus
        CONVERGED or MAX_ITERS_REACHED
    model_ : KMeansModel
        Frozen model from the last training run
    """

    def __init__(self,
                 n_clusters: int,
                 init: Union[str, Tensor, np.ndarray, list] = 'random',
                 max_iter: int = 100,
                 metric: MetricLike = 'euclidean',
                 n_threads: int = 1,
                 tol: float = 0.0,
                 criterion: Optional[ConvergenceCriterion] = None,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 device: Optional[Union[str, torch.device]] = None,
                 dtype: torch.dtype = torch.float64):
        super().__init__(
            n_clusters=n_clusters,
            max_iter=max_iter,
            metric=metric,
            n_threads=n_threads,
            verbose=verbose,
            random_state=random_state,
            device=device,
            dtype=dtype
        )
        self.init = init
        self.tol = tol
        self.criterion = criterion

    def _create_components(self, n_features: int) -> None:
        """Create K-means specific components."""
        metric = get_distance(self.metric)

        self.assignment_strategy = ParallelAssignment(metric)
        self.update_strategy = MeanUpdater()

        init = validate_init_params(self.init, self.n_clusters, n_features)
        if isinstance(init, str):
            if init == 'k-means++':
                self.initialization_strategy = KMeansPlusPlusInit(metric=metric)
            else:
                self.initialization_strategy = RandomInit()
        else:
            self.initialization_strategy = FromPreviousInit(init)

        if self.criterion is not None:
            self.convergence_criterion = self.criterion
        else:
            self.convergence_criterion = ChangeInAssignments(min_change_fraction=self.tol)

    def _build_model(self, centroids: Tensor, objective: float) -> KMeansModel:
        return KMeansModel(
            centroids,
            metric=self.assignment_strategy.metric,
            n_threads=self.n_threads,
            n_iter=self.n_iter_,
            status=self.status_,
            inertia=objective
        )

    @property
    def cluster_centers_(self) -> Tensor:
        """Get cluster centroids."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return self.model_.centroids

    @property
    def inertia_(self) -> float:
        """Get final objective value."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return self.model_.inertia

    def score(self, X, y=None) -> float:
        """Opposite of the value of X on the K-means objective.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            New data
        y : Ignored

        Returns
        -------
        score : float
            Negative of the summed assignment costs
        """
        if not self.fitted_:
            raise RuntimeError("Model must be fitted before calling score")
        return self.model_.score(X)

    def get_params(self, deep: bool = True):
        params = super().get_params(deep)
        params.update({'init': self.init, 'tol': self.tol, 'criterion': self.criterion})
        return params


def train(dataset, k: int, max_iter: int = 100,
          metric: MetricLike = Distance.EUCLIDEAN,
          n_threads: int = 1,
          seed: Optional[int] = None,
          init: Union[str, Tensor, np.ndarray, list] = 'random',
          verbose: int = 0) -> KMeansModel:
    """Train K-means and return the frozen model.

    Args:
        dataset: (n, d) data or a :class:`Dataset`
        k: Number of clusters, ``1 <= k <= n``
        max_iter: Maximum number of update rounds (>= 1)
        metric: Distance metric
        n_threads: Worker threads (>= 1)
        seed: Seed for the initialization policy
        init: 'random', 'k-means++' or explicit centers
        verbose: Verbosity level

    Raises:
        InvalidArgumentError: Invalid k, max_iter or n_threads
    """
    trainer = KMeans(n_clusters=k, init=init, max_iter=max_iter, metric=metric,
                     n_threads=n_threads, verbose=verbose, random_state=seed)
    return trainer.train(dataset)


def predict(model: ClusteringModel, dataset) -> Tensor:
    """Cluster index of every point of ``dataset`` under ``model``."""
    return model.predict(dataset)
