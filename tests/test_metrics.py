# tests/test_metrics.py
"""
Information-theoretic clustering metrics.

Reference values for the small example were computed by hand:
true=[0,0,0,1,1,1], pred=[0,0,1,1,2,2]
    MI  = (2/3) ln 2            ≈ 0.462098
    H_t = ln 2, H_p = ln 3
    NMI = MI / ((H_t + H_p) / 2) ≈ 0.515804
    E[MI] = 6 * 0.2 * (1/3) ln 2 ≈ 0.277259
    AMI = (MI - E[MI]) / (avg(H) - E[MI]) ≈ 0.298792
"""

from __future__ import annotations

import math

import numpy as np
import pytest
import torch

from kclust.base.exceptions import EmptyInputError, LengthMismatchError, InvalidArgumentError
from kclust.utils.metrics import (
    ContingencyTable,
    contingency_matrix,
    entropy,
    mutual_info_score,
    expected_mutual_information,
    normalized_mutual_info_score,
    adjusted_mutual_info_score,
    adjusted_rand_score,
    inertia,
)

TRUE = [0, 0, 0, 1, 1, 1]
PRED = [0, 0, 1, 1, 2, 2]


def test_contingency_table_cells_and_marginals():
    table = ContingencyTable(PRED, TRUE)
    assert table.cells == {(0, 0): 2, (1, 0): 1, (1, 1): 1, (2, 1): 2}
    assert table[(0, 1)] == 0
    assert len(table) == 4
    assert table.shape == (3, 2)
    assert table.pred_sums.tolist() == [2, 2, 2]
    assert table.true_sums.tolist() == [3, 3]
    assert contingency_matrix(TRUE, PRED).tolist() == [[2, 1, 0], [0, 1, 2]]


def test_contingency_table_arbitrary_label_values():
    table = ContingencyTable([7, 7, -1], [3, 3, 10])
    assert table.cells == {(7, 3): 2, (-1, 10): 1}
    assert table.pred_classes.tolist() == [-1, 7]


def test_contingency_table_errors():
    with pytest.raises(LengthMismatchError):
        ContingencyTable([0, 1], [0])
    with pytest.raises(EmptyInputError):
        ContingencyTable([], [])


def test_entropy():
    assert entropy([0, 0, 1, 1]) == pytest.approx(math.log(2))
    assert entropy([4, 4, 4]) == pytest.approx(0.0)


def test_hand_computed_scores():
    assert mutual_info_score(TRUE, PRED) == pytest.approx(2 / 3 * math.log(2))
    assert expected_mutual_information(ContingencyTable(PRED, TRUE)) == pytest.approx(
        0.4 * math.log(2))
    assert normalized_mutual_info_score(TRUE, PRED) == pytest.approx(0.515804, abs=1e-6)
    assert adjusted_mutual_info_score(TRUE, PRED) == pytest.approx(0.298792, abs=1e-5)


@pytest.mark.parametrize("labels", [[0, 0, 1, 1], [3, 1, 2, 0, 1, 3], list(range(5)) * 4])
def test_identical_partitions_score_one(labels):
    renamed = [10 + 2 * label for label in labels]
    assert normalized_mutual_info_score(labels, renamed) == pytest.approx(1.0)
    assert adjusted_mutual_info_score(labels, renamed) == pytest.approx(1.0)
    assert adjusted_rand_score(labels, renamed) == pytest.approx(1.0)


def test_single_cluster_prediction_scores_zero():
    true = [0, 1, 2, 0, 1, 2]
    pred = [0] * 6
    assert normalized_mutual_info_score(true, pred) == pytest.approx(0.0, abs=1e-12)
    assert adjusted_mutual_info_score(true, pred) == pytest.approx(0.0, abs=1e-12)


def test_both_single_cluster_scores_zero():
    # Zero entropy on both sides takes the degenerate branch, not 1.0
    assert normalized_mutual_info_score([1, 1, 1], [0, 0, 0]) == 0.0
    assert adjusted_mutual_info_score([1, 1, 1], [0, 0, 0]) == 0.0


@pytest.mark.parametrize("n", [3, 7, 10, 50])
def test_all_singleton_partitions_take_zero_denominator_branch(n):
    # E[MI] equals the entropy exactly, so only rounding separates them
    labels = list(range(n))
    ami = adjusted_mutual_info_score(labels, labels)
    assert math.isfinite(ami)
    assert ami == 0.0
    assert normalized_mutual_info_score(labels, labels) == pytest.approx(1.0)


def test_singletons_against_two_classes_scores_exact_zero():
    singletons = list(range(10))
    halves = [0] * 5 + [1] * 5
    assert adjusted_mutual_info_score(halves, singletons) == 0.0
    assert adjusted_mutual_info_score(singletons, halves) == 0.0


def test_scores_from_precomputed_table():
    table = ContingencyTable(PRED, TRUE)
    assert normalized_mutual_info_score(None, None, contingency=table) == pytest.approx(
        normalized_mutual_info_score(TRUE, PRED))
    assert adjusted_mutual_info_score(None, None, contingency=table) == pytest.approx(
        adjusted_mutual_info_score(TRUE, PRED))


def test_random_labels_ami_near_zero():
    rng = np.random.default_rng(0)
    amis = []
    nmis = []
    for _ in range(30):
        true = rng.integers(0, 5, size=500)
        pred = rng.integers(0, 5, size=500)
        amis.append(adjusted_mutual_info_score(true, pred))
        nmis.append(normalized_mutual_info_score(true, pred))
    assert abs(np.mean(amis)) < 0.02
    # Chance agreement inflates NMI but not AMI
    assert np.mean(nmis) > np.mean(amis)


def test_ami_can_be_negative():
    # Anti-correlated with the structure: every predicted cluster splits every true one
    true = [0, 0, 1, 1]
    pred = [0, 1, 0, 1]
    assert adjusted_mutual_info_score(true, pred) < 0.0
    assert normalized_mutual_info_score(true, pred) == pytest.approx(0.0, abs=1e-12)


def test_average_methods():
    nmi_min = normalized_mutual_info_score(TRUE, PRED, average_method='min')
    nmi_max = normalized_mutual_info_score(TRUE, PRED, average_method='max')
    nmi_geo = normalized_mutual_info_score(TRUE, PRED, average_method='geometric')
    nmi_ari = normalized_mutual_info_score(TRUE, PRED)
    assert nmi_max <= nmi_ari <= nmi_min
    assert nmi_max <= nmi_geo <= nmi_min
    assert nmi_min == pytest.approx(2 / 3)
    with pytest.raises(InvalidArgumentError):
        normalized_mutual_info_score(TRUE, PRED, average_method='median')


def test_metrics_accept_tensors_and_do_not_mutate():
    true = torch.tensor(TRUE)
    pred = np.array(PRED)
    before_true, before_pred = true.clone(), pred.copy()
    assert normalized_mutual_info_score(true, pred) == pytest.approx(0.515804, abs=1e-6)
    assert torch.equal(true, before_true)
    np.testing.assert_array_equal(pred, before_pred)


def test_length_mismatch_and_empty():
    with pytest.raises(LengthMismatchError):
        normalized_mutual_info_score([0, 1], [0, 1, 1])
    with pytest.raises(LengthMismatchError):
        adjusted_mutual_info_score([0, 1], [0])
    with pytest.raises(EmptyInputError):
        adjusted_mutual_info_score([], [])


def test_inertia():
    X = torch.tensor([[0.0, 0.0], [2.0, 0.0], [10.0, 0.0]], dtype=torch.float64)
    labels = torch.tensor([0, 0, 1])
    centers = torch.tensor([[1.0, 0.0], [10.0, 0.0]], dtype=torch.float64)
    assert inertia(X, labels, centers) == pytest.approx(2.0)
    assert inertia(X, labels, centers, metric='l1') == pytest.approx(2.0)
    assert inertia(X, labels, centers, metric='euclidean') == pytest.approx(2.0)
