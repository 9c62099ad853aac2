"""Utility functions for kclust."""

from .validation import (
    validate_data,
    validate_labels,
    check_same_length,
    check_n_clusters,
    check_max_iter,
    check_n_threads,
    check_random_state,
    validate_init_params
)

from .convergence import (
    TrainingStatus,
    ChangeInAssignments,
    ChangeInObjective,
    ParameterChange,
    CombinedCriterion,
    ConvergenceController
)

from .metrics import (
    ContingencyTable,
    contingency_matrix,
    entropy,
    mutual_info_score,
    expected_mutual_information,
    normalized_mutual_info_score,
    adjusted_mutual_info_score,
    adjusted_rand_score,
    inertia
)

from .parallel import (
    WorkerPool,
    shard_ranges
)

from .device import (
    get_default_device,
    parse_device
)

__all__ = [
    # Validation
    'validate_data',
    'validate_labels',
    'check_same_length',
    'check_n_clusters',
    'check_max_iter',
    'check_n_threads',
    'check_random_state',
    'validate_init_params',

    # Convergence
    'TrainingStatus',
    'ChangeInAssignments',
    'ChangeInObjective',
    'ParameterChange',
    'CombinedCriterion',
    'ConvergenceController',

    # Metrics
    'ContingencyTable',
    'contingency_matrix',
    'entropy',
    'mutual_info_score',
    'expected_mutual_information',
    'normalized_mutual_info_score',
    'adjusted_mutual_info_score',
    'adjusted_rand_score',
    'inertia',

    # Parallelism
    'WorkerPool',
    'shard_ranges',

    # Device management
    'get_default_device',
    'parse_device'
]
