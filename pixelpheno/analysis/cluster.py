"""Unsupervised land-cover classes from per-pixel features."""

import logging
from typing import Iterable, Optional

import numpy as np
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

from ..grid.apply import GridResult

logger = logging.getLogger(__name__)

UNLABELLED = -1


def cluster_pixels(
    features: np.ndarray,
    n_clusters: int,
    random_state: Optional[int] = None,
    standardize: bool = True,
    n_init: int = 10,
) -> np.ndarray:
    """
    K-means labels for an (n_pixels, n_features) matrix.

    Rows containing NaN are left out of the fit and labelled -1. The seed is
    passed to the estimator, so equal seeds give equal labels.
    """
    features = np.asarray(features, dtype=float)
    if features.ndim != 2:
        raise ValueError("features must be shaped (n_pixels, n_features).")
    if n_clusters < 1:
        raise ValueError("n_clusters must be at least 1.")

    labels = np.full(features.shape[0], UNLABELLED, dtype=int)
    valid = np.all(np.isfinite(features), axis=1)
    n_valid = int(valid.sum())
    if n_valid < n_clusters:
        raise ValueError(f"{n_valid} complete pixels for {n_clusters} clusters.")

    data = features[valid]
    if standardize:
        data = StandardScaler().fit_transform(data)
    model = KMeans(n_clusters=n_clusters, random_state=random_state, n_init=n_init)
    labels[valid] = model.fit_predict(data)
    logger.info("Clustered %d of %d pixels into %d classes", n_valid, features.shape[0], n_clusters)
    return labels


def cluster_cube(
    cube: np.ndarray,
    n_clusters: int,
    random_state: Optional[int] = None,
    standardize: bool = False,
) -> np.ndarray:
    """Cluster pixels of a (rows, cols, time) cube by their raw time series."""
    cube = np.asarray(cube, dtype=float)
    if cube.ndim != 3:
        raise ValueError("cube must be shaped (rows, cols, time).")
    rows, cols, layers = cube.shape
    labels = cluster_pixels(
        cube.reshape(rows * cols, layers),
        n_clusters,
        random_state=random_state,
        standardize=standardize,
    )
    return labels.reshape(rows, cols)


def cluster_grid(
    result: GridResult,
    n_clusters: int,
    transitions: Optional[Iterable[str]] = None,
    year: Optional[int] = None,
    random_state: Optional[int] = None,
) -> np.ndarray:
    """Cluster the transition dates of a grid result into a label raster."""
    names = list(transitions) if transitions is not None else result.transitions
    layers = [result.layer(name, year) for name in names]
    rows, cols = result.shape
    features = np.stack([layer.reshape(rows * cols) for layer in layers], axis=1)
    labels = cluster_pixels(features, n_clusters, random_state=random_state)
    return labels.reshape(rows, cols)
