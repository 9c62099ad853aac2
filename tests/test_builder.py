# tests/test_builder.py
"""
Fluent ClusteringBuilder and the create_kmeans shortcut.
"""

from __future__ import annotations

import pytest
import torch

from kclust import ClusteringBuilder, KMeans, create_kmeans
from kclust.distances import ManhattanDistance
from kclust.initialization import KMeansPlusPlusInit, FromPreviousInit
from kclust.utils.convergence import ChangeInAssignments, ChangeInObjective, CombinedCriterion

from data_gen import make_blobs


def test_builder_configures_trainer():
    trainer = (ClusteringBuilder()
               .with_distance('l1')
               .with_threads(3)
               .with_kmeans_plusplus_init()
               .with_max_iter(25)
               .with_random_state(4)
               .with_verbose(0)
               .with_device('cpu')
               .build(n_clusters=3))

    assert isinstance(trainer, KMeans)
    assert trainer.n_clusters == 3
    assert trainer.n_threads == 3
    assert trainer.max_iter == 25
    assert trainer.init == 'k-means++'
    assert trainer.device == torch.device('cpu')

    X, _ = make_blobs([[0.0, 0.0], [5.0, 0.0], [0.0, 5.0]], n_per=20, std=0.2, seed=0)
    trainer.fit(X)
    assert isinstance(trainer.assignment_strategy.metric, ManhattanDistance)
    assert isinstance(trainer.initialization_strategy, KMeansPlusPlusInit)


def test_builder_initial_centers():
    X, _ = make_blobs([[0.0, 0.0], [5.0, 5.0]], n_per=10, std=0.1, seed=1)
    centers = [[0.0, 0.0], [5.0, 5.0]]
    trainer = ClusteringBuilder().with_initial_centers(centers).build(2)
    model = trainer.train(X)
    assert isinstance(trainer.initialization_strategy, FromPreviousInit)
    # Centroid order follows the provided centers
    torch.testing.assert_close(model.centroids, torch.tensor(centers, dtype=torch.float64),
                               atol=0.2, rtol=0.0)


def test_builder_convergence_criteria():
    builder = ClusteringBuilder().with_assignment_convergence(tol=0.05, patience=2)
    trainer = builder.build(2)
    assert isinstance(trainer.criterion, ChangeInAssignments)
    assert trainer.criterion.min_change_fraction == 0.05

    trainer = ClusteringBuilder().with_objective_convergence(rel_tol=1e-3).build(2)
    assert isinstance(trainer.criterion, ChangeInObjective)

    trainer = (ClusteringBuilder()
               .with_combined_convergence([ChangeInAssignments(), ChangeInObjective()], mode='all')
               .build(2))
    assert isinstance(trainer.criterion, CombinedCriterion)

    X, _ = make_blobs([[0.0, 0.0], [5.0, 5.0]], n_per=10, std=0.1, seed=1)
    trainer.fit(X)
    assert trainer.convergence_criterion is trainer.criterion


def test_create_kmeans_shortcut():
    trainer = create_kmeans(4, threads=2, max_iter=7, distance='cosine')
    assert trainer.n_clusters == 4
    assert trainer.n_threads == 2
    assert trainer.max_iter == 7
    assert trainer.metric == 'cosine'

    with pytest.raises(TypeError):
        create_kmeans(2, unknown_option=True)
