"""
Input validation utilities.

Every public entry point funnels its arguments through these helpers before
any work (and any worker thread) starts, so invalid input fails fast and
leaves nothing half-done.
"""

from numbers import Integral
from typing import Optional, Union, List, Sequence

import torch
from torch import Tensor
import numpy as np
import warnings

from ..base.exceptions import (
    InvalidArgumentError,
    DimensionMismatchError,
    LengthMismatchError,
    EmptyInputError
)


def _check_rectangular(X: Sequence) -> None:
    """Raise DimensionMismatchError for ragged nested sequences."""
    lengths = set()
    for row in X:
        if isinstance(row, (list, tuple, np.ndarray, Tensor)):
            lengths.add(len(row))
        else:
            lengths.add(None)
    if len(lengths) > 1:
        described = sorted(str(n) if n is not None else 'scalar' for n in lengths)
        raise DimensionMismatchError(
            f"All points must share one dimensionality, found lengths {described}"
        )


def validate_data(X: Union[Tensor, np.ndarray, list],
                  dtype: torch.dtype = torch.float64,
                  device: Optional[torch.device] = None,
                  ensure_2d: bool = True,
                  ensure_finite: bool = True,
                  ensure_min_samples: int = 1,
                  ensure_min_features: int = 1,
                  copy: bool = False) -> Tensor:
    """Validate and convert input data to tensor.

    Args:
        X: Input data (tensor, numpy array, or list)
        dtype: Target data type
        device: Target device
        ensure_2d: Whether to ensure 2D shape
        ensure_finite: Whether to check for inf/nan
        ensure_min_samples: Minimum number of samples required
        ensure_min_features: Minimum number of features required
        copy: Whether to force a copy

    Returns:
        Validated tensor

    Raises:
        DimensionMismatchError: Ragged input
        EmptyInputError: Fewer than ``ensure_min_samples`` rows
        ValueError: Any other validation failure
    """
    # Convert to tensor
    if isinstance(X, Tensor):
        if copy or X.dtype != dtype or (device is not None and X.device != device):
            X = X.to(dtype=dtype, device=device, copy=copy)
    elif isinstance(X, np.ndarray):
        if X.dtype == object:
            _check_rectangular(X)
        X = torch.from_numpy(np.asarray(X, dtype=np.float64)).to(dtype=dtype, device=device)
    elif isinstance(X, (list, tuple)):
        _check_rectangular(X)
        X = torch.tensor(X, dtype=dtype, device=device)
    else:
        raise TypeError(f"Cannot convert {type(X)} to tensor")

    # Ensure 2D
    if ensure_2d:
        if X.dim() == 1:
            X = X.unsqueeze(1)
        elif X.dim() != 2:
            raise ValueError(f"Expected 2D array, got {X.dim()}D")

        n_samples, n_features = X.shape

        if n_samples < ensure_min_samples:
            if n_samples == 0:
                raise EmptyInputError("Found 0 samples")
            raise ValueError(f"Found {n_samples} samples, but need at least "
                             f"{ensure_min_samples}")

        if n_features < ensure_min_features:
            raise ValueError(f"Found {n_features} features, but need at least "
                             f"{ensure_min_features}")

    # Check for finite values
    if ensure_finite:
        if torch.isnan(X).any():
            raise ValueError("Input contains NaN values")
        if torch.isinf(X).any():
            raise ValueError("Input contains infinite values")

    return X


def validate_labels(labels: Union[Tensor, np.ndarray, list],
                    n_samples: Optional[int] = None,
                    ensure_non_negative: bool = False,
                    ensure_consecutive: bool = False) -> Tensor:
    """Validate integer cluster labels.

    Args:
        labels: Cluster labels
        n_samples: Expected number of samples
        ensure_non_negative: Reject negative labels
        ensure_consecutive: Warn unless labels are 0, 1, ..., k-1

    Returns:
        Validated long tensor

    Raises:
        LengthMismatchError: ``len(labels) != n_samples``
    """
    if isinstance(labels, Tensor):
        labels = labels.long()
    elif isinstance(labels, np.ndarray):
        labels = torch.from_numpy(labels.astype(np.int64, copy=False))
    elif isinstance(labels, (list, tuple, range)):
        labels = torch.tensor(list(labels), dtype=torch.long)
    else:
        raise TypeError(f"Cannot convert {type(labels)} to label tensor")

    if labels.dim() != 1:
        raise ValueError(f"Labels must be 1D, got {labels.dim()}D")

    if n_samples is not None and len(labels) != n_samples:
        raise LengthMismatchError(f"Expected {n_samples} labels, got {len(labels)}")

    if ensure_non_negative and (labels < 0).any():
        raise ValueError("Labels must be non-negative")

    if ensure_consecutive:
        unique_labels = torch.unique(labels)
        expected = torch.arange(len(unique_labels), device=labels.device)
        if not torch.equal(unique_labels, expected):
            warnings.warn("Labels are not consecutive integers starting from 0")

    return labels


def check_same_length(*arrays, names: Optional[List[str]] = None) -> int:
    """Check that arrays are aligned and return their common length.

    Raises:
        LengthMismatchError: If lengths differ
    """
    n_samples = None
    for i, arr in enumerate(arrays):
        if arr is None:
            continue
        if n_samples is None:
            n_samples = len(arr)
        elif len(arr) != n_samples:
            name = names[i] if names else f"Array {i}"
            raise LengthMismatchError(f"{name} has {len(arr)} samples, "
                                      f"expected {n_samples}")
    return 0 if n_samples is None else n_samples


def _check_positive_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidArgumentError(f"{name} must be int, got {type(value).__name__}")
    if value < 1:
        raise InvalidArgumentError(f"{name} must be >= 1, got {value}")
    return int(value)


def check_n_clusters(n_clusters: int, n_samples: int) -> int:
    """Validate number of clusters against the dataset size.

    Raises:
        InvalidArgumentError: If ``n_clusters < 1`` or ``n_clusters > n_samples``
    """
    n_clusters = _check_positive_int(n_clusters, 'n_clusters')
    if n_clusters > n_samples:
        raise InvalidArgumentError(f"n_clusters ({n_clusters}) cannot be larger than "
                                   f"n_samples ({n_samples})")
    return n_clusters


def check_max_iter(max_iter: int) -> int:
    """Validate the iteration cap."""
    return _check_positive_int(max_iter, 'max_iter')


def check_n_threads(n_threads: int) -> int:
    """Validate the worker count."""
    return _check_positive_int(n_threads, 'n_threads')


def check_random_state(random_state: Optional[Union[int, torch.Generator]]) -> torch.Generator:
    """Create a generator from a random state.

    Args:
        random_state: Seed, generator, or None for a non-deterministic seed

    Returns:
        Generator owned by the caller
    """
    if random_state is None:
        generator = torch.Generator()
        generator.seed()
        return generator
    elif isinstance(random_state, torch.Generator):
        return random_state
    elif isinstance(random_state, Integral) and not isinstance(random_state, bool):
        generator = torch.Generator()
        generator.manual_seed(int(random_state))
        return generator
    else:
        raise TypeError(f"random_state must be int or Generator, got {type(random_state)}")


def validate_init_params(init: Union[str, Tensor, np.ndarray, list],
                         n_clusters: int,
                         n_features: int) -> Union[str, Tensor]:
    """Validate initialization parameters.

    Args:
        init: Initialization method or initial centers
        n_clusters: Number of clusters
        n_features: Number of features

    Returns:
        Validated initialization
    """
    if isinstance(init, str):
        valid_methods = ['k-means++', 'random']
        if init not in valid_methods:
            raise InvalidArgumentError(f"init must be one of {valid_methods}, got '{init}'")
        return init

    elif isinstance(init, (Tensor, np.ndarray, list, tuple)):
        init_tensor = validate_data(init, ensure_2d=True)

        if init_tensor.shape[1] != n_features:
            raise DimensionMismatchError(f"init centers have dimension {init_tensor.shape[1]}, "
                                         f"but data has dimension {n_features}")
        if init_tensor.shape[0] != n_clusters:
            raise InvalidArgumentError(f"init array must have {n_clusters} rows, "
                                       f"got {init_tensor.shape[0]}")
        return init_tensor

    else:
        raise TypeError(f"init must be str, array, or list, got {type(init)}")
