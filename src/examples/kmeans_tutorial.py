"""
K-means tutorial on a five-component Gaussian mixture.

This example shows how to:
1. Sample a labelled 2D Gaussian mixture
2. Train K-means with 5 clusters on one thread, then 20 clusters on four
3. Score both clusterings with normalized and adjusted mutual information
4. Plot the clusters and the centroids
"""

import argparse

import matplotlib.pyplot as plt
import numpy as np
import torch

# Add parent directory to path for imports
import sys
sys.path.append('..')

from kclust import Dataset, KMeans, evaluate, plot_clusters_2d
from kclust.evaluation import ClusteringEvaluator


MEANS = [[0.0, 0.0], [5.0, 5.0], [2.5, 2.5], [10.0, 0.0], [-1.0, 0.0]]
COVARIANCES = [[[1.0, 0.0], [0.0, 1.0]],
               [[1.0, 0.0], [0.0, 1.0]],
               [[1.0, 0.5], [0.5, 1.0]],
               [[0.1, 0.0], [0.0, 0.1]],
               [[1.0, 0.0], [0.0, 0.1]]]
WEIGHTS = [0.1, 0.35, 0.05, 0.25, 0.25]


def generate_mixture(n_samples=500, seed=42):
    """Draw ``n_samples`` points and the index of the component behind each."""
    rng = np.random.default_rng(seed)
    labels = rng.choice(len(WEIGHTS), size=n_samples, p=WEIGHTS)
    points = np.empty((n_samples, 2))
    for c in range(len(WEIGHTS)):
        mask = labels == c
        points[mask] = rng.multivariate_normal(MEANS[c], COVARIANCES[c], size=int(mask.sum()))
    return Dataset(points, labels=labels)


def run(dataset, n_clusters, max_iter, n_threads, seed):
    kmeans = KMeans(n_clusters=n_clusters, max_iter=max_iter, n_threads=n_threads,
                    random_state=seed, verbose=1)
    model = kmeans.train(dataset)
    report = evaluate(model, dataset)

    print(f"\nK-means with K={n_clusters}, {n_threads} thread(s): "
          f"{kmeans.n_iter_} iterations, {kmeans.status_.value}")
    print(report)
    by_min = ClusteringEvaluator(average_method='min').evaluate(kmeans.labels_, dataset.labels)
    print(f"Normalized MI (min entropy) = {by_min.nmi:.6f}")
    return kmeans, report


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument('--seed', type=int, default=0)
    parser.add_argument('--no-plot', action='store_true')
    args = parser.parse_args()

    torch.set_num_threads(1)

    small = generate_mixture(500, seed=args.seed)
    km5, _ = run(small, n_clusters=5, max_iter=10, n_threads=1, seed=args.seed)

    large = generate_mixture(2000, seed=args.seed + 1)
    km20, _ = run(large, n_clusters=20, max_iter=10, n_threads=4, seed=args.seed)

    if args.no_plot:
        return

    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    plot_clusters_2d(small.points, km5.labels_, centers=km5.cluster_centers_,
                     ax=axes[0], title='K=5, 500 points')
    plot_clusters_2d(large.points, km20.labels_, centers=km20.cluster_centers_,
                     ax=axes[1], point_size=8, title='K=20, 2000 points')
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
