"""
Lag-Parallel Execution

Each lag writes only its own slots of the running sums, so lags can be
processed by independent workers. The one shared value is the truncation
boundary, which workers lower under a lock.
"""

import threading
from typing import Callable, Iterable

from joblib import Parallel, delayed


class TruncationBoundary:
    """Upper lag bound that concurrent workers may only lower."""

    def __init__(self, limit: int):
        self._limit = int(limit)
        self._lock = threading.Lock()
        self.truncated = False

    @property
    def limit(self) -> int:
        with self._lock:
            return self._limit

    def allows(self, j: int) -> bool:
        with self._lock:
            return j <= self._limit

    def lower_to(self, j: int) -> bool:
        """Set the bound to j if that is lower than the current bound."""
        with self._lock:
            if self.truncated and j >= self._limit:
                return False
            self._limit = min(self._limit, int(j))
            self.truncated = True
            return True


def parallel_for(func: Callable[[int], None], indices: Iterable[int], n_jobs: int = 1) -> None:
    """
    Call func(j) for every index, serially or on a pool of threads.

    Threads are used rather than processes because workers write into
    shared numpy arrays in place.
    """
    if n_jobs == 1:
        for j in indices:
            func(j)
        return

    Parallel(n_jobs=n_jobs, backend='threading')(delayed(func)(j) for j in indices)
