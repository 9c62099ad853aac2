"""
Named distance metrics and the vector-level ``distance`` function.
"""

from enum import Enum
from typing import Union

import torch
from torch import Tensor

from ..base.exceptions import DimensionMismatchError, InvalidArgumentError
from ..base.interfaces import DistanceMetric
from .euclidean import EuclideanDistance
from .manhattan import ManhattanDistance
from .cosine import CosineDistance


class Distance(str, Enum):
    """Distance metrics available by name."""
    EUCLIDEAN = 'euclidean'
    L1 = 'l1'
    COSINE = 'cosine'


_ALIASES = {
    'euclidean': Distance.EUCLIDEAN,
    'l2': Distance.EUCLIDEAN,
    'l1': Distance.L1,
    'manhattan': Distance.L1,
    'cityblock': Distance.L1,
    'cosine': Distance.COSINE,
}

_FACTORIES = {
    Distance.EUCLIDEAN: EuclideanDistance,
    Distance.L1: ManhattanDistance,
    Distance.COSINE: CosineDistance,
}

MetricLike = Union[Distance, str, DistanceMetric]


def get_distance(metric: MetricLike) -> DistanceMetric:
    """Resolve a metric given as enum member, name, or instance.

    Raises:
        InvalidArgumentError: Unknown metric name
    """
    if isinstance(metric, DistanceMetric):
        return metric
    if isinstance(metric, Distance):
        return _FACTORIES[metric]()
    if isinstance(metric, str):
        key = _ALIASES.get(metric.lower())
        if key is None:
            raise InvalidArgumentError(
                f"Unknown distance '{metric}', expected one of {sorted(_ALIASES)}"
            )
        return _FACTORIES[key]()
    raise TypeError(f"metric must be Distance, str or DistanceMetric, got {type(metric)}")


def distance(a, b, metric: MetricLike = Distance.EUCLIDEAN) -> float:
    """Distance between two vectors.

    Args:
        a: (d,) vector (tensor, array or sequence)
        b: (d,) vector
        metric: Which distance to use

    Returns:
        The true (not squared) distance

    Raises:
        DimensionMismatchError: ``len(a) != len(b)``
    """
    a = torch.as_tensor(a, dtype=torch.float64).reshape(-1)
    b = torch.as_tensor(b, dtype=torch.float64).reshape(-1)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatchError(f"Vectors have different lengths: {a.shape[0]} != {b.shape[0]}")
    return get_distance(metric).compute(a, b)
