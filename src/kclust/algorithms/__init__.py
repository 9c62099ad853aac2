"""Clustering algorithms."""

from .kmeans import KMeans, KMeansModel, train, predict
from .builder import ClusteringBuilder, create_kmeans

__all__ = [
    'KMeans',
    'KMeansModel',
    'train',
    'predict',
    'ClusteringBuilder',
    'create_kmeans'
]
