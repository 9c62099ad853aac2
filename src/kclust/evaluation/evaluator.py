"""
Clustering evaluation against ground-truth labels.

Cluster indices produced by a training run are arbitrary, so the evaluator
compares partitions with information-theoretic scores (NMI and AMI) that
are invariant to relabeling.
"""

from dataclasses import dataclass
from typing import Optional

from ..base.data_structures import Dataset
from ..base.exceptions import InvalidArgumentError
from ..base.interfaces import ClusteringModel
from ..utils.metrics import (
    ContingencyTable,
    LabelsLike,
    adjusted_mutual_info_score,
    normalized_mutual_info_score
)


@dataclass(frozen=True)
class EvaluationReport:
    """Read-only clustering scores.

    Attributes
    ----------
    nmi : float
        Normalized mutual information in [0, 1]
    ami : float
        Adjusted mutual information (may be negative)
    n_samples : int
        Number of labelled points compared
    n_pred_clusters, n_true_clusters : int
        Distinct labels on each side
    """
    nmi: float
    ami: float
    n_samples: int
    n_pred_clusters: int
    n_true_clusters: int

    def format(self, precision: int = 6) -> str:
        """Fixed-point rendering of both scores."""
        return (f"Clustering Evaluation\n"
                f"Normalized MI = {self.nmi:.{precision}f}\n"
                f"Adjusted MI = {self.ami:.{precision}f}")

    def __str__(self) -> str:
        return self.format()


class ClusteringEvaluator:
    """Scores a predicted labeling against a reference labeling.

    Examples
    --------
    >>> report = ClusteringEvaluator().evaluate([0, 0, 1, 1], [1, 1, 0, 0])
    >>> report.nmi, report.ami
    (1.0, 1.0)
    """

    def __init__(self, average_method: str = 'arithmetic'):
        """
        Args:
            average_method: Entropy normalizer for both scores
        """
        self.average_method = average_method

    def evaluate(self, predicted: LabelsLike, true: LabelsLike) -> EvaluationReport:
        """Compute NMI and AMI.

        Raises:
            LengthMismatchError: Sequences of different lengths
            EmptyInputError: Empty sequences
        """
        table = ContingencyTable(predicted, true)
        nmi = normalized_mutual_info_score(true, predicted, average_method=self.average_method,
                                           contingency=table)
        ami = adjusted_mutual_info_score(true, predicted, average_method=self.average_method,
                                         contingency=table)
        return EvaluationReport(
            nmi=nmi,
            ami=ami,
            n_samples=table.n_samples,
            n_pred_clusters=len(table.pred_classes),
            n_true_clusters=len(table.true_classes)
        )


def evaluate_labels(predicted: LabelsLike, true: LabelsLike) -> EvaluationReport:
    """NMI/AMI report for two aligned labelings."""
    return ClusteringEvaluator().evaluate(predicted, true)


def evaluate(model: ClusteringModel, dataset, labels: Optional[LabelsLike] = None) -> EvaluationReport:
    """Predict ``dataset`` with ``model`` and score against ground truth.

    Args:
        model: Trained model
        dataset: A labelled :class:`Dataset`, or raw points with ``labels``
        labels: Ground truth when ``dataset`` carries none

    Raises:
        InvalidArgumentError: No ground truth available
    """
    if labels is None:
        if not isinstance(dataset, Dataset) or not dataset.has_labels:
            raise InvalidArgumentError("evaluate needs ground-truth labels")
        labels = dataset.labels
    predicted = model.predict(dataset)
    return evaluate_labels(predicted, labels)
