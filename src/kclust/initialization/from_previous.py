"""
Initialization from previous solution or custom centers.

Useful for warm starts or when you have good initial guesses.
"""

from typing import Optional, Union
import numpy as np
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..base.exceptions import DimensionMismatchError, InvalidArgumentError
from ..utils.validation import validate_data


class FromPreviousInit(InitializationStrategy):
    """Initialize from previous cluster centers or custom starting points.

    Accepts a tensor, array or nested list of shape (n_clusters, dimension),
    for example ``model.centroids`` from an earlier run.
    """

    def __init__(self, initial_centers: Union[Tensor, np.ndarray, list]):
        """
        Args:
            initial_centers: Centers to start from
        """
        self.initial_centers = validate_data(initial_centers, ensure_2d=True)

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize from the stored centers.

        Args:
            points: (n, d) data points (used for validation)
            n_clusters: Expected number of clusters
            generator: Unused

        Returns:
            (n_clusters, d) tensor of centroids
        """
        dimension = points.shape[1]
        centers = self.initial_centers.to(dtype=points.dtype, device=points.device)

        if centers.shape[0] != n_clusters:
            raise InvalidArgumentError(f"Initial centers has {centers.shape[0]} clusters, "
                                       f"but n_clusters={n_clusters}")
        if centers.shape[1] != dimension:
            raise DimensionMismatchError(f"Initial centers has dimension {centers.shape[1]}, "
                                         f"but data has dimension {dimension}")

        return centers.clone()
