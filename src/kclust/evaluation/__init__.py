"""Evaluation of clusterings against ground truth."""

from .evaluator import (
    EvaluationReport,
    ClusteringEvaluator,
    evaluate_labels,
    evaluate
)

__all__ = [
    'EvaluationReport',
    'ClusteringEvaluator',
    'evaluate_labels',
    'evaluate'
]
