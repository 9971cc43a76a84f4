import numpy as np
import pytest

from pixelpheno.analysis.cluster import UNLABELLED, cluster_cube, cluster_grid, cluster_pixels
from pixelpheno.grid.apply import GridResult


def two_groups():
    rng = np.random.default_rng(0)
    early = rng.normal([100.0, 250.0], 2.0, size=(10, 2))
    late = rng.normal([150.0, 300.0], 2.0, size=(10, 2))
    return np.vstack([early, late])


def test_two_groups_are_separated():
    labels = cluster_pixels(two_groups(), n_clusters=2, random_state=0)
    assert len(set(labels[:10])) == 1
    assert len(set(labels[10:])) == 1
    assert labels[0] != labels[10]


def test_equal_seeds_give_equal_labels():
    features = np.random.default_rng(3).normal(size=(40, 3))
    first = cluster_pixels(features, n_clusters=4, random_state=42)
    second = cluster_pixels(features, n_clusters=4, random_state=42)
    np.testing.assert_array_equal(first, second)


def test_incomplete_rows_are_unlabelled():
    features = two_groups()
    features[3, 1] = np.nan
    labels = cluster_pixels(features, n_clusters=2, random_state=0)
    assert labels[3] == UNLABELLED
    assert (labels[np.arange(20) != 3] >= 0).all()


def test_too_few_complete_rows():
    with pytest.raises(ValueError):
        cluster_pixels(np.full((3, 2), np.nan), n_clusters=2)


def test_cluster_cube_labels_raster():
    cube = np.zeros((2, 2, 5))
    cube[1, :, :] = 1.0
    labels = cluster_cube(cube, n_clusters=2, random_state=0)
    assert labels.shape == (2, 2)
    assert labels[0, 0] == labels[0, 1]
    assert labels[0, 0] != labels[1, 0]


def test_cluster_grid_uses_transition_layers():
    start = np.array([[[100.0, 101.0], [150.0, np.nan]]])
    end = np.array([[[250.0, 251.0], [300.0, np.nan]]])
    result = GridResult(
        years=[2021],
        transitions=["start", "end"],
        doy={"start": start, "end": end},
        status={"start": np.zeros((1, 2, 2), dtype=np.int8), "end": np.zeros((1, 2, 2), dtype=np.int8)},
    )
    labels = cluster_grid(result, n_clusters=2, random_state=0)
    assert labels.shape == (2, 2)
    assert labels[0, 0] == labels[0, 1]
    assert labels[0, 0] != labels[1, 0]
    assert labels[1, 1] == UNLABELLED
