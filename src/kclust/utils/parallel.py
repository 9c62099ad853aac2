"""
Worker-pool utilities for the parallel assignment and update steps.

The pool is a scoped resource: it is created when a training run (or a
prediction call) starts and is shut down on every exit path, including
exceptions raised inside a worker.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from .validation import check_n_threads

T = TypeVar('T')
R = TypeVar('R')


def shard_ranges(n_items: int, n_shards: int) -> List[Tuple[int, int]]:
    """Split ``range(n_items)`` into at most ``n_shards`` contiguous ranges.

    Shard sizes differ by at most one, larger shards first (the same layout
    as ``numpy.array_split``). Empty ranges are dropped, so fewer than
    ``n_shards`` ranges come back when ``n_items < n_shards``.

    Returns:
        List of ``(start, stop)`` pairs covering ``[0, n_items)`` in order
    """
    n_shards = check_n_threads(n_shards)
    base, extra = divmod(n_items, n_shards)
    ranges = []
    start = 0
    for shard in range(n_shards):
        stop = start + base + (1 if shard < extra else 0)
        if stop > start:
            ranges.append((start, stop))
        start = stop
    return ranges


class WorkerPool:
    """Fixed-size thread pool used as a context manager.

    With a single worker, tasks run inline on the calling thread and no
    executor is created.

    Examples
    --------
    >>> with WorkerPool(4) as pool:
    ...     squares = pool.map(lambda x: x * x, range(8))
    """

    def __init__(self, n_threads: int = 1):
        self.n_threads = check_n_threads(n_threads)
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> 'WorkerPool':
        if self.n_threads > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.n_threads,
                thread_name_prefix='kclust-worker'
            )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        """Join all workers. Safe to call more than once."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @property
    def is_parallel(self) -> bool:
        return self._executor is not None

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
        """Apply ``fn`` to every item and wait for all of them.

        Results come back in submission order; the first worker exception
        is re-raised here after every task has finished.
        """
        items = list(items)
        if self._executor is None or len(items) <= 1:
            return [fn(item) for item in items]

        futures = [self._executor.submit(fn, item) for item in items]
        # Barrier: collect every result before surfacing any failure
        errors = [f.exception() for f in futures]
        for error in errors:
            if error is not None:
                raise error
        return [f.result() for f in futures]

    def __repr__(self) -> str:
        return f"WorkerPool(n_threads={self.n_threads}, active={self.is_parallel})"
