"""
Base class for clustering trainers in kclust.

Provides the common algorithmic skeleton for alternating optimization
between a parallel assignment step and a parallel update step.
"""

from abc import abstractmethod
from typing import Optional, Dict, Any, List, Union
import time
import warnings

import torch
from torch import Tensor

from .interfaces import (
    InitializationStrategy, ConvergenceCriterion, ClusteringModel, ClusteringTrainer
)
from .data_structures import Dataset, CentroidStore, AlgorithmState
from ..assignments.parallel import ParallelAssignment
from ..updates.mean import MeanUpdater
from ..distances.registry import MetricLike, get_distance
from ..utils.convergence import ConvergenceController, TrainingStatus
from ..utils.device import parse_device
from ..utils.parallel import WorkerPool
from ..utils.validation import (
    validate_data, check_n_clusters, check_max_iter, check_n_threads, check_random_state
)


class BaseClusteringAlgorithm(ClusteringTrainer):
    """Base class implementing the alternating optimization framework.

    Subclasses need to specify:
    - Initialization strategy
    - Convergence criterion
    - How a frozen model is built from the final centroids

    One training run goes through these steps:

    1. Validate every argument (no thread exists yet).
    2. Seed the centroid store from an explicit generator.
    3. Open a worker pool and alternate assignment and update until the
       convergence controller leaves RUNNING.
    4. Close the pool and freeze the centroids into a model.
    """

    def __init__(self,
                 n_clusters: int,
                 max_iter: int = 100,
                 metric: MetricLike = 'euclidean',
                 n_threads: int = 1,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 device: Optional[Union[str, torch.device]] = None,
                 dtype: torch.dtype = torch.float64):
        """
        Args:
            n_clusters: Number of clusters K
            max_iter: Maximum number of update rounds
            metric: Distance metric name, ``Distance`` member or instance
            n_threads: Worker threads for assignment and update
            verbose: Verbosity level (0=silent, 1=progress, 2=detailed)
            random_state: Seed or generator for initialization
            device: Torch device (CPU if None)
            dtype: Floating point type used for training
        """
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.metric = metric
        self.n_threads = n_threads
        self.verbose = verbose
        self.random_state = random_state
        self.device = parse_device(device)
        self.dtype = dtype

        # These will be set by subclasses
        self.assignment_strategy: Optional[ParallelAssignment] = None
        self.update_strategy: Optional[MeanUpdater] = None
        self.initialization_strategy: Optional[InitializationStrategy] = None
        self.convergence_criterion: Optional[ConvergenceCriterion] = None

        # Training results
        self.fitted_ = False
        self.model_: Optional[ClusteringModel] = None
        self.labels_: Optional[Tensor] = None
        self.n_iter_ = 0
        self.status_: Optional[TrainingStatus] = None
        self.history_: List[AlgorithmState] = []

    @abstractmethod
    def _create_components(self, n_features: int) -> None:
        """Create algorithm-specific components.

        Subclasses must implement this to instantiate:
        - self.assignment_strategy
        - self.update_strategy
        - self.initialization_strategy
        - self.convergence_criterion
        """
        pass

    @abstractmethod
    def _build_model(self, centroids: Tensor, objective: float) -> ClusteringModel:
        """Freeze final centroids into a model."""
        pass

    def _validate_data(self, X) -> Tensor:
        """Validate and prepare input data."""
        if isinstance(X, Dataset):
            X = X.points
        return validate_data(X, dtype=self.dtype, device=self.device)

    def train(self, X) -> ClusteringModel:
        """Run one training session and return the frozen model.

        Args:
            X: (n, d) data, or a :class:`Dataset`

        Returns:
            Trained model
        """
        X = self._validate_data(X)
        n_points, n_features = X.shape
        n_clusters = check_n_clusters(self.n_clusters, n_points)
        max_iter = check_max_iter(self.max_iter)
        n_threads = check_n_threads(self.n_threads)
        get_distance(self.metric)
        generator = check_random_state(self.random_state)

        self._create_components(n_features)

        if self.verbose:
            print(f"Initializing {n_clusters} clusters...")

        start_time = time.time()
        store = CentroidStore.initialize(n_clusters, generator, X,
                                         init=self.initialization_strategy)

        controller = ConvergenceController(max_iter, self.convergence_criterion)
        controller.reset()
        self.history_ = []

        with WorkerPool(n_threads) as pool:
            while True:
                iter_start_time = time.time()
                centroids = store.current_centroids()

                # Assignment step (all shards joined before returning)
                result = self.assignment_strategy.assign(X, centroids, pool)

                status = controller.observe({
                    'assignments': result.labels,
                    'objective': result.objective,
                    'centroids': centroids
                })
                if status is TrainingStatus.CONVERGED:
                    self._record(controller, centroids, result.objective, status,
                                 iter_start_time, empty_clusters=None)
                    if self.verbose:
                        print(f"Converged at iteration {controller.iteration}")
                    break

                # Update step
                counts = self.update_strategy.update(store, result.shards, pool)
                status = controller.advance()
                n_empty = int((counts == 0).sum())
                self._record(controller, store.current_centroids(), result.objective, status,
                             iter_start_time, empty_clusters=n_empty)

                if status is TrainingStatus.MAX_ITERS_REACHED:
                    # Final labels must agree with the final centroids
                    result = self.assignment_strategy.assign(X, store.current_centroids(), pool)
                    break

        total_time = time.time() - start_time

        if self.verbose:
            if status is not TrainingStatus.CONVERGED:
                warnings.warn(f"Failed to converge after {max_iter} iterations")
            print(f"Total fitting time: {total_time:.3f}s")

        self.labels_ = result.labels
        self.n_iter_ = controller.iteration
        self.status_ = status
        self.model_ = self._build_model(store.freeze(), result.objective)
        self.fitted_ = True
        return self.model_

    def _record(self, controller: ConvergenceController, centroids: Tensor,
                objective: float, status: TrainingStatus, iter_start_time: float,
                empty_clusters: Optional[int]) -> None:
        iteration = controller.iteration
        n_changed = controller.last_n_changed
        self.history_.append(AlgorithmState(
            iteration=iteration,
            centroids=centroids,
            n_changed=n_changed,
            objective_value=objective,
            status=status,
            metadata={'empty_clusters': empty_clusters,
                      'time': time.time() - iter_start_time}
        ))

        if self.verbose >= 2 or (self.verbose >= 1 and iteration % 10 == 0):
            changed = '-' if n_changed is None else n_changed
            print(f"Iteration {iteration:3d}: objective = {objective:.6f} "
                  f"changed = {changed} ({time.time() - iter_start_time:.3f}s)")
        if self.verbose >= 2 and empty_clusters:
            print(f"  {empty_clusters} empty cluster(s) kept at previous position")

    def fit(self, X, y=None) -> 'BaseClusteringAlgorithm':
        """Fit the clustering model.

        Args:
            X: (n, d) data
            y: Ignored (for sklearn compatibility)

        Returns:
            Self
        """
        self.train(X)
        return self

    def fit_predict(self, X, y=None) -> Tensor:
        """Fit and return cluster assignments for the training data."""
        self.train(X)
        return self.labels_

    def predict(self, X) -> Tensor:
        """Predict cluster assignments for new data.

        Args:
            X: (n, d) data

        Returns:
            (n,) tensor of cluster assignments
        """
        if not self.fitted_:
            raise RuntimeError("Model must be fitted before calling predict")
        return self.model_.predict(X)

    def get_params(self, deep: bool = True) -> Dict[str, Any]:
        """Get parameters (sklearn compatibility)."""
        return {
            'n_clusters': self.n_clusters,
            'max_iter': self.max_iter,
            'metric': self.metric,
            'n_threads': self.n_threads,
            'verbose': self.verbose,
            'random_state': self.random_state,
            'device': self.device,
            'dtype': self.dtype
        }

    def set_params(self, **params) -> 'BaseClusteringAlgorithm':
        """Set parameters (sklearn compatibility)."""
        valid = self.get_params()
        for key, value in params.items():
            if key not in valid:
                raise ValueError(f"Invalid parameter '{key}' for {self.__class__.__name__}")
            if key == 'device':
                value = parse_device(value)
            setattr(self, key, value)
        return self
