"""Distance metrics for clustering algorithms."""

from .euclidean import EuclideanDistance
from .manhattan import ManhattanDistance
from .cosine import CosineDistance
from .registry import Distance, get_distance, distance

__all__ = [
    'Distance',
    'get_distance',
    'distance',
    'EuclideanDistance',
    'ManhattanDistance',
    'CosineDistance'
]
