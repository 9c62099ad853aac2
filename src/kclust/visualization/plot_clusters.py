"""
Plotting helpers for K-means results.

Scatter plots of 2D clusterings and the objective trace of a training run.
"""

from typing import Optional, List, Sequence

import numpy as np
import torch
from torch import Tensor
import matplotlib.pyplot as plt

from ..base.data_structures import AlgorithmState
from ..base.exceptions import DimensionMismatchError, LengthMismatchError


def _to_numpy(values) -> np.ndarray:
    if isinstance(values, Tensor):
        return values.detach().cpu().numpy()
    return np.asarray(values)


def plot_clusters_2d(X,
                     labels,
                     centers=None,
                     ax: Optional[plt.Axes] = None,
                     colors: Optional[List[str]] = None,
                     alpha: float = 0.7,
                     center_marker: str = 'X',
                     center_size: int = 200,
                     point_size: int = 20,
                     show_legend: bool = True,
                     title: Optional[str] = None) -> plt.Axes:
    """Scatter plot of a 2D clustering.

    Args:
        X: (n, 2) data points
        labels: (n,) cluster labels
        centers: Optional (k, 2) cluster centers
        ax: Matplotlib axes (created if None)
        colors: One color per distinct label
        alpha: Point transparency
        center_marker: Marker for centers
        center_size: Size of center markers
        point_size: Size of data points
        show_legend: Whether to show legend
        title: Plot title

    Returns:
        Matplotlib axes
    """
    X_np = _to_numpy(X)
    labels_np = _to_numpy(labels)
    if X_np.ndim != 2 or X_np.shape[1] != 2:
        raise DimensionMismatchError(f"plot_clusters_2d needs (n, 2) data, got {X_np.shape}")
    if len(labels_np) != len(X_np):
        raise LengthMismatchError(f"{len(X_np)} points but {len(labels_np)} labels")

    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    unique_labels = np.unique(labels_np)
    n_clusters = len(unique_labels)

    if colors is None:
        cmap = plt.get_cmap('tab10' if n_clusters <= 10 else 'tab20')
        colors = [cmap(i % cmap.N) for i in range(n_clusters)]

    for i, label in enumerate(unique_labels):
        mask = labels_np == label
        ax.scatter(X_np[mask, 0], X_np[mask, 1],
                   color=colors[i % len(colors)],
                   s=point_size,
                   alpha=alpha,
                   edgecolors='black',
                   linewidth=0.3,
                   label=f'Cluster {label}')

    if centers is not None:
        centers_np = _to_numpy(centers)
        ax.scatter(centers_np[:, 0], centers_np[:, 1],
                   c='black',
                   marker=center_marker,
                   s=center_size,
                   edgecolors='white',
                   linewidth=2,
                   label='Centers',
                   zorder=10)

    ax.set_xlabel('Feature 1')
    ax.set_ylabel('Feature 2')

    if title:
        ax.set_title(title)

    # Legends with twenty entries bury the plot
    if show_legend and n_clusters <= 10:
        ax.legend()

    return ax


def plot_training_history(history: Sequence[AlgorithmState],
                          ax: Optional[plt.Axes] = None,
                          title: Optional[str] = 'Training objective') -> plt.Axes:
    """Objective value per iteration of a training run (``trainer.history_``)."""
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    iterations = [state.iteration for state in history]
    objectives = [float(torch.as_tensor(state.objective_value)) for state in history]
    ax.plot(iterations, objectives, marker='o')
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Objective')
    if title:
        ax.set_title(title)
    return ax
