"""
kclust: multithreaded K-means clustering with information-theoretic evaluation.

This package provides:
- K-means training with sharded parallel assignment and update steps
- Euclidean, L1 and cosine distances
- NMI / AMI evaluation against ground-truth labels

Example usage:
    >>> import torch
    >>> from kclust import train, predict, evaluate_labels
    >>>
    >>> # Generate sample data
    >>> X = torch.randn(1000, 10)
    >>>
    >>> # Fit K-means with 4 worker threads
    >>> model = train(X, k=5, max_iter=20, n_threads=4, seed=0)
    >>>
    >>> # Get cluster assignments
    >>> labels = predict(model, X)
"""

__version__ = '0.1.0'

# Base types first: the algorithm modules import from them
from .base import (
    KClustError,
    InvalidArgumentError,
    DimensionMismatchError,
    LengthMismatchError,
    EmptyInputError,
    Dataset,
    TrainingStatus
)

from .distances import Distance, distance, get_distance

# Import main algorithms
from .algorithms.kmeans import KMeans, KMeansModel, train, predict
from .algorithms.builder import ClusteringBuilder, create_kmeans

from .evaluation import (
    EvaluationReport,
    ClusteringEvaluator,
    evaluate,
    evaluate_labels
)

# Import visualization
from .visualization import plot_clusters_2d, plot_training_history

__all__ = [
    # API
    'train',
    'predict',
    'evaluate',
    'evaluate_labels',

    # Algorithms
    'KMeans',
    'KMeansModel',

    # Builder
    'ClusteringBuilder',
    'create_kmeans',

    # Evaluation
    'EvaluationReport',
    'ClusteringEvaluator',

    # Data and distances
    'Dataset',
    'Distance',
    'distance',
    'get_distance',
    'TrainingStatus',

    # Errors
    'KClustError',
    'InvalidArgumentError',
    'DimensionMismatchError',
    'LengthMismatchError',
    'EmptyInputError',

    # Visualization
    'plot_clusters_2d',
    'plot_training_history',

    # Version
    '__version__'
]
