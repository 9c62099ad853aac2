"""
Clustering evaluation metrics.

External metrics comparing a predicted partition to ground truth. All of
them are invariant to relabeling: cluster indices carry no meaning across
training runs, so agreement is measured through the contingency table
rather than through label equality.
"""

import math
from typing import Dict, Optional, Tuple, Union

import numpy as np
import torch
from torch import Tensor

from ..base.exceptions import EmptyInputError, InvalidArgumentError
from .validation import validate_labels, check_same_length

LabelsLike = Union[Tensor, np.ndarray, list]

# Entropies and E[MI] come out of log-space sums with ~1e-15 rounding, so
# "zero" is judged relative to the normalizer
_ZERO_TOL = 1e-12


def _is_negligible(value: float, scale: float) -> bool:
    return abs(value) <= _ZERO_TOL * max(1.0, abs(scale))


class ContingencyTable:
    """Co-occurrence counts between a predicted and a true labeling.

    The table is sparse: only pairs that actually occur are stored in
    :attr:`cells`. A dense view indexed by the sorted distinct labels is
    available as :attr:`dense`. Read-only after construction.

    Attributes
    ----------
    cells : dict
        ``(predicted_label, true_label) -> count`` for every non-zero cell
    pred_classes, true_classes : Tensor
        Sorted distinct labels of each side
    dense : Tensor of shape (n_pred_classes, n_true_classes)
        Counts ``n_ij``
    """

    def __init__(self, labels_pred: LabelsLike, labels_true: LabelsLike):
        labels_pred = validate_labels(labels_pred)
        labels_true = validate_labels(labels_true)
        n_samples = check_same_length(labels_pred, labels_true,
                                      names=['labels_pred', 'labels_true'])
        if n_samples == 0:
            raise EmptyInputError("Cannot build a contingency table from 0 samples")

        pred_classes, pred_idx = torch.unique(labels_pred, return_inverse=True)
        true_classes, true_idx = torch.unique(labels_true, return_inverse=True)
        n_pred, n_true = len(pred_classes), len(true_classes)

        codes, counts = torch.unique(pred_idx * n_true + true_idx, return_counts=True)

        dense = torch.zeros(n_pred * n_true, dtype=torch.long)
        dense[codes] = counts
        self._dense = dense.reshape(n_pred, n_true)

        self.pred_classes = pred_classes
        self.true_classes = true_classes
        self.n_samples = n_samples
        self._cells = {
            (int(pred_classes[code // n_true]), int(true_classes[code % n_true])): int(count)
            for code, count in zip(codes.tolist(), counts.tolist())
        }

    @property
    def cells(self) -> Dict[Tuple[int, int], int]:
        return dict(self._cells)

    @property
    def dense(self) -> Tensor:
        return self._dense.clone()

    @property
    def pred_sums(self) -> Tensor:
        """Marginal ``a_i``: points per predicted cluster."""
        return self._dense.sum(dim=1)

    @property
    def true_sums(self) -> Tensor:
        """Marginal ``b_j``: points per true cluster."""
        return self._dense.sum(dim=0)

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self._dense.shape)

    def __getitem__(self, pair: Tuple[int, int]) -> int:
        return self._cells.get(pair, 0)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return (f"ContingencyTable(n_samples={self.n_samples}, "
                f"shape={self.shape}, nonzero={len(self._cells)})")


def contingency_matrix(labels_true: LabelsLike, labels_pred: LabelsLike) -> Tensor:
    """Build contingency matrix for comparing clusterings.

    Args:
        labels_true: (n,) true labels
        labels_pred: (n,) predicted labels

    Returns:
        Contingency matrix C where C[i,j] is the number of samples
        with the i-th true label and the j-th predicted label
    """
    return ContingencyTable(labels_pred, labels_true).dense.t()


def _entropy_from_counts(counts: Tensor) -> float:
    counts = counts.to(torch.float64)
    counts = counts[counts > 0]
    p = counts / counts.sum()
    return float(-torch.sum(p * torch.log(p)))


def entropy(labels: LabelsLike) -> float:
    """Shannon entropy (nats) of a labeling."""
    labels = validate_labels(labels)
    if len(labels) == 0:
        raise EmptyInputError("Cannot compute entropy of 0 samples")
    _, counts = torch.unique(labels, return_counts=True)
    return _entropy_from_counts(counts)


def _mutual_info(table: ContingencyTable) -> float:
    dense = table.dense.to(torch.float64)
    n = float(table.n_samples)
    a = table.pred_sums.to(torch.float64)
    b = table.true_sums.to(torch.float64)

    rows, cols = torch.nonzero(dense, as_tuple=True)
    n_ij = dense[rows, cols]
    mi = torch.sum((n_ij / n) * (torch.log(n_ij) + math.log(n)
                                 - torch.log(a[rows]) - torch.log(b[cols])))
    # Rounding can push an exact zero slightly negative
    return max(float(mi), 0.0)


def mutual_info_score(labels_true: LabelsLike, labels_pred: LabelsLike,
                      contingency: Optional[ContingencyTable] = None) -> float:
    """Mutual information (nats) between two labelings."""
    if contingency is None:
        contingency = ContingencyTable(labels_pred, labels_true)
    return _mutual_info(contingency)


def expected_mutual_information(contingency: ContingencyTable) -> float:
    """Expected mutual information under random relabeling.

    Marginals are held fixed and each cell count follows a hypergeometric
    distribution:

        E[MI] = sum_ij sum_nij  nij/N * log(N*nij / (a_i*b_j))
                * a_i! b_j! (N-a_i)! (N-b_j)!
                / (N! nij! (a_i-nij)! (b_j-nij)! (N-a_i-b_j+nij)!)

    with ``nij`` from ``max(1, a_i+b_j-N)`` to ``min(a_i, b_j)``. Factorials
    are evaluated in log space.
    """
    n = contingency.n_samples
    a = contingency.pred_sums.tolist()
    b = contingency.true_sums.tolist()

    # A single cluster on either side carries no information
    if len(a) == 1 or len(b) == 1:
        return 0.0

    log_n = math.log(n)
    lgamma_n = math.lgamma(n + 1)
    emi = 0.0
    for a_i in a:
        for b_j in b:
            start = max(1, a_i + b_j - n)
            end = min(a_i, b_j)
            if start > end:
                continue
            nij = torch.arange(start, end + 1, dtype=torch.float64)
            term1 = nij / n
            term2 = torch.log(nij) + log_n - math.log(a_i) - math.log(b_j)
            gln = (math.lgamma(a_i + 1) + math.lgamma(b_j + 1)
                   + math.lgamma(n - a_i + 1) + math.lgamma(n - b_j + 1) - lgamma_n
                   - torch.lgamma(nij + 1) - torch.lgamma(a_i - nij + 1)
                   - torch.lgamma(b_j - nij + 1) - torch.lgamma(n - a_i - b_j + nij + 1))
            emi += float(torch.sum(term1 * term2 * torch.exp(gln)))
    return emi


def _generalized_average(h_true: float, h_pred: float, average_method: str) -> float:
    if average_method == 'arithmetic':
        return (h_true + h_pred) / 2
    elif average_method == 'geometric':
        return math.sqrt(h_true * h_pred)
    elif average_method == 'max':
        return max(h_true, h_pred)
    elif average_method == 'min':
        return min(h_true, h_pred)
    else:
        raise InvalidArgumentError(f"Unknown average method: {average_method}")


def _normalizer(table: ContingencyTable, average_method: str) -> float:
    return _generalized_average(_entropy_from_counts(table.true_sums),
                                _entropy_from_counts(table.pred_sums),
                                average_method)


def normalized_mutual_info_score(labels_true: LabelsLike, labels_pred: LabelsLike,
                                 average_method: str = 'arithmetic',
                                 contingency: Optional[ContingencyTable] = None) -> float:
    """Compute Normalized Mutual Information.

    NMI is 1.0 for identical partitions (up to relabeling) and 0.0 for
    independent ones. When the normalizer is zero (both labelings hold a
    single cluster) the score is defined as 0.0.

    Args:
        labels_true: (n,) ground truth labels
        labels_pred: (n,) predicted labels
        average_method: How to average the entropies
            ('arithmetic', 'geometric', 'max', 'min')
        contingency: Precomputed table; the labels are ignored when given

    Returns:
        NMI score in [0, 1]
    """
    if contingency is None:
        contingency = ContingencyTable(labels_pred, labels_true)
    normalizer = _normalizer(contingency, average_method)
    if _is_negligible(normalizer, 1.0):
        return 0.0
    return min(_mutual_info(contingency) / normalizer, 1.0)


def adjusted_mutual_info_score(labels_true: LabelsLike, labels_pred: LabelsLike,
                               average_method: str = 'arithmetic',
                               contingency: Optional[ContingencyTable] = None) -> float:
    """Compute Adjusted Mutual Information.

    AMI = (MI - E[MI]) / (avg(H_true, H_pred) - E[MI])

    1.0 for identical partitions, about 0.0 for random ones, and negative
    when agreement is worse than chance. Returns 0.0 when the denominator is
    within 1e-12 (relative to the entropy average) of zero, as happens when
    every point is its own cluster on both sides.

    Args:
        labels_true: (n,) ground truth labels
        labels_pred: (n,) predicted labels
        average_method: How to average the entropies
        contingency: Precomputed table; the labels are ignored when given

    Returns:
        AMI score (at most 1)
    """
    if contingency is None:
        contingency = ContingencyTable(labels_pred, labels_true)
    normalizer = _normalizer(contingency, average_method)
    emi = expected_mutual_information(contingency)
    denominator = normalizer - emi
    if _is_negligible(denominator, normalizer):
        return 0.0
    numerator = _mutual_info(contingency) - emi
    if _is_negligible(numerator, normalizer):
        return 0.0
    return min(numerator / denominator, 1.0)


def adjusted_rand_score(labels_true: LabelsLike, labels_pred: LabelsLike) -> float:
    """Compute Adjusted Rand Index.

    ARI is 1.0 for perfect match, about 0.0 for random labeling.

    Args:
        labels_true: (n,) ground truth labels
        labels_pred: (n,) predicted labels

    Returns:
        ARI score in [-1, 1]
    """
    table = ContingencyTable(labels_pred, labels_true)
    contingency = table.dense.to(torch.float64)

    def comb2(x: Tensor) -> Tensor:
        return torch.sum(x * (x - 1)) / 2

    n = float(table.n_samples)
    sum_comb = comb2(contingency)
    sum_comb_pred = comb2(table.pred_sums.to(torch.float64))
    sum_comb_true = comb2(table.true_sums.to(torch.float64))

    total_pairs = n * (n - 1) / 2
    if total_pairs == 0:
        return 1.0

    expected_index = sum_comb_pred * sum_comb_true / total_pairs
    max_index = (sum_comb_pred + sum_comb_true) / 2

    if max_index - expected_index == 0:
        return 1.0

    return float((sum_comb - expected_index) / (max_index - expected_index))


def inertia(X: Tensor, labels: Tensor, centers: Tensor, metric=None) -> float:
    """Sum of distances from each point to its assigned center.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        centers: (k, d) cluster centers
        metric: Distance metric (squared Euclidean if None)

    Returns:
        Total inertia (lower is better)
    """
    if metric is None:
        diff = X - centers[labels]
        return float(torch.sum(diff * diff))

    from ..distances import get_distance
    metric = get_distance(metric)
    total = 0.0
    for k in range(centers.shape[0]):
        mask = labels == k
        if mask.any():
            total += float(metric.pairwise(X[mask], centers[k:k + 1]).sum())
    return total
