"""
Global pytest fixtures for kclust tests.

- Provides deterministic seeding across Python, NumPy, and PyTorch.
- Forces single-threaded torch so worker threads are the only parallelism.
- Standardizes on CPU for all tests.
"""

from __future__ import annotations

import os
import random
import sys
from typing import Generator
from pathlib import Path

import numpy as np
import pytest
import torch

# Add the project's src directory to the Python path so tests can import the code
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Tests plot without a display
import matplotlib  # noqa: E402
matplotlib.use("Agg")


def _get_seed() -> int:
    """Resolve the test seed from env or default."""
    env = os.getenv("TEST_RANDOM_SEED", "1337")
    try:
        return int(env)
    except ValueError:
        return 1337


@pytest.fixture(scope="session", autouse=True)
def seed_all() -> None:
    """
    Seed Python, NumPy, and PyTorch RNGs once per session.

    Seed value comes from TEST_RANDOM_SEED (default 1337). Training itself
    never reads these global states; it takes an explicit seed.
    """
    seed = _get_seed()
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


@pytest.fixture(scope="session", autouse=True)
def set_torch_threads() -> None:
    """
    Keep PyTorch intra-op parallelism at one thread.
    """
    torch.set_num_threads(1)


@pytest.fixture(scope="function")
def rng(seed_all: None) -> Generator[np.random.Generator, None, None]:
    """
    Per-test NumPy Generator seeded from the session seed.
    """
    gen = np.random.default_rng(_get_seed())
    yield gen


@pytest.fixture(scope="session")
def torch_device() -> torch.device:
    """
    Standard device for tests. Pinned to CPU.
    """
    return torch.device("cpu")
