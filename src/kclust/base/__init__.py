"""Base classes and interfaces for kclust."""

from .exceptions import (
    KClustError,
    InvalidArgumentError,
    DimensionMismatchError,
    LengthMismatchError,
    EmptyInputError
)

from .interfaces import (
    DistanceMetric,
    InitializationStrategy,
    ConvergenceCriterion,
    ClusteringModel,
    ClusteringTrainer
)

from .data_structures import (
    Dataset,
    CentroidStore,
    ShardResult,
    AssignmentResult,
    TrainingStatus,
    AlgorithmState,
    mean_or_keep
)

from .clustering_base import BaseClusteringAlgorithm

__all__ = [
    # Errors
    'KClustError',
    'InvalidArgumentError',
    'DimensionMismatchError',
    'LengthMismatchError',
    'EmptyInputError',

    # Interfaces
    'DistanceMetric',
    'InitializationStrategy',
    'ConvergenceCriterion',
    'ClusteringModel',
    'ClusteringTrainer',

    # Data structures
    'Dataset',
    'CentroidStore',
    'ShardResult',
    'AssignmentResult',
    'TrainingStatus',
    'AlgorithmState',
    'mean_or_keep',

    # Base algorithm
    'BaseClusteringAlgorithm'
]
