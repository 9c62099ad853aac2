"""
Error taxonomy for kclust.

Every error is a ``ValueError`` so callers that already guard against bad
input with ``except ValueError`` keep working.
"""


class KClustError(ValueError):
    """Base class for all kclust input errors."""


class InvalidArgumentError(KClustError):
    """Bad configuration value (n_clusters, max_iter, n_threads, metric...)."""


class DimensionMismatchError(KClustError):
    """Vectors or points with incompatible dimensionality."""


class LengthMismatchError(KClustError):
    """Two sequences that must be aligned have different lengths."""


class EmptyInputError(KClustError):
    """An operation received zero samples."""
