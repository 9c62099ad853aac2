# tests/test_scaffold_smoke.py
"""
Test-harness smoke tests.

Goal: ensure helpers import, timing prints, partition comparison behaves,
and the data generators are reproducible.
"""

from __future__ import annotations

import re
import time

import numpy as np


def test_utils_imports(seed_all):
    import utils
    import data_gen

    for name in ["to_numpy", "same_partition", "time_block", "print_timing"]:
        assert hasattr(utils, name), f"utils.{name} should exist"

    for name in ["make_gaussian_mixture", "make_blobs"]:
        assert hasattr(data_gen, name), f"data_gen.{name} should exist"


def test_time_block_prints_duration(capsys):
    from utils import time_block

    with time_block("noop", {"phase": 0}):
        time.sleep(0.01)

    out = capsys.readouterr().out
    assert re.search(r"\[timing\] noop \{\"phase\":0\} \d+\.\d{3}s", out)


def test_same_partition():
    from utils import same_partition

    assert same_partition([0, 0, 1, 2], [2, 2, 0, 1])
    assert not same_partition([0, 0, 1, 1], [0, 1, 1, 1])
    # Merging two clusters is not a relabeling
    assert not same_partition([0, 1, 2, 2], [0, 0, 1, 1])
    assert not same_partition([0, 1], [0, 1, 1])


def test_gaussian_mixture_is_reproducible():
    from data_gen import make_gaussian_mixture, MIXTURE_WEIGHTS

    X1, y1 = make_gaussian_mixture(500, seed=3)
    X2, y2 = make_gaussian_mixture(500, seed=3)
    assert X1.shape == (500, 2) and y1.shape == (500,)
    np.testing.assert_array_equal(X1, X2)
    np.testing.assert_array_equal(y1, y2)
    assert set(np.unique(y1)) <= set(range(len(MIXTURE_WEIGHTS)))


def test_make_blobs_layout():
    from data_gen import make_blobs

    X, y = make_blobs([[0.0, 0.0], [5.0, 5.0], [9.0, 0.0]], n_per=10, std=0.01, seed=0)
    assert X.shape == (30, 2)
    np.testing.assert_array_equal(y, np.repeat([0, 1, 2], 10))
    np.testing.assert_allclose(X[10:20].mean(axis=0), [5.0, 5.0], atol=0.05)
