"""Assignment strategies for clustering algorithms."""

from .parallel import ParallelAssignment

__all__ = [
    'ParallelAssignment'
]
