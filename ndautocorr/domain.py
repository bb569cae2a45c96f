"""
Domain Selection

Decides, for every incoming data set, how many lags the correlation
function is accumulated over, and grows the shared storage to match.
"""

from typing import Optional

import numpy as np


def default_domain(n_samples: int) -> int:
    """Automatic domain bound for a data set of n_samples points."""
    return n_samples // 2


def choose_domain(n_samples: int, requested: int, committed: int,
                  periodic: bool, frozen: bool = False) -> int:
    """
    Resolve the domain bound L after a data set of n_samples arrives.

    Parameters
    ----------
    n_samples : int
        Length of the incoming data set.
    requested : int
        Domain size fixed by the caller (0 = automatic).
    committed : int
        Bound already committed by earlier data sets.
    periodic : bool
        Periodic boundary conditions.
    frozen : bool
        True once threshold truncation has fixed the bound for good.

    Returns
    -------
    L : int
        New bound; never smaller than ``committed``.
    """
    if frozen:
        return committed

    if requested <= 0:
        L = default_domain(n_samples)
    elif periodic:
        L = requested
    else:
        L = min(requested, max(n_samples - 1, 0))

    return max(L, committed)


def lag_limit(L: int, n_samples: int, periodic: bool) -> int:
    """Largest lag a data set of n_samples points contributes to."""
    if periodic:
        return L
    return min(L, n_samples - 1)


def resize(values: Optional[np.ndarray], size: int) -> Optional[np.ndarray]:
    """Append zeros to (or drop the tail of) a storage array so it holds size entries."""
    if values is None:
        return None
    current = values.shape[0]
    if size > current:
        return np.concatenate([values, np.zeros(size - current, dtype=values.dtype)])
    if size < current:
        return values[:size].copy()
    return values
