# tests/utils.py
"""
Small, reusable helpers used across the kclust test suite.

Functions:
- to_numpy(x): numpy view of a tensor or array-like.
- same_partition(a, b): whether two labelings agree up to renaming.
- time_block(label, meta=None): context manager that prints wall-clock time with optional metadata.
- print_timing(label, seconds, **meta): convenience printer for timings (used by time_block).
"""

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from typing import Any, Dict

import numpy as np
import torch


def to_numpy(x: Any) -> np.ndarray:
    if isinstance(x, torch.Tensor):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def same_partition(a: Any, b: Any) -> bool:
    """
    True when labelings ``a`` and ``b`` induce the same partition.

    A bijection between the label sets must exist, i.e. each label of ``a``
    maps to exactly one label of ``b`` and vice versa.
    """
    a = to_numpy(a)
    b = to_numpy(b)
    if a.shape != b.shape:
        return False
    pairs = set(zip(a.tolist(), b.tolist()))
    return len(pairs) == len(set(a.tolist())) == len(set(b.tolist()))


@contextmanager
def time_block(label: str, meta: Dict[str, Any] | None = None):
    """
    Context manager to time a block and print a single-line summary.

    Output
    ------
    [timing] train {"n":2000,"K":20,"threads":4} 0.123s
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        print_timing(label, dt, **(meta or {}))


def print_timing(label: str, seconds: float, **meta: Any) -> None:
    """
    Print timing in a compact, machine-readable single line.
    """
    meta_str = " " + json.dumps(meta, separators=(",", ":")) if meta else ""
    print(f"[timing] {label}{meta_str} {seconds:.3f}s")
