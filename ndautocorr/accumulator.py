"""
Correlation Accumulator

Computes the discretized autocorrelation function of one or more
independent multivariate time series (data sets), averaged over all of them:

    C(j) = < x(i) . x(i+j) >

where the average runs over every pair (i, i+j) in every data set and
"." is the inner product of two samples. Optionally the per-data-set mean is
subtracted first, and the fluctuation of the per-pair inner products is
tracked as well.

Life cycle: construct once, call accumulate_single() for every data set in
order, call finalize() once, then query the curve and the correlation-length
estimators.
"""

import logging
import warnings
from typing import Callable, Iterable, Optional, Sequence, Tuple

import numpy as np

from .base import AccumulatorStateError, ConfigurationError, DimensionMismatch
from .config import AutocorrConfig
from .domain import choose_domain, lag_limit, resize
from .estimators import (
    correlation_length,
    guess_correlation_length,
    integrate,
    threshold_crossing,
)
from .inner_product import inner_product
from .parallel import TruncationBoundary, parallel_for


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def normalize_sums(sums: np.ndarray, counts: np.ndarray,
                   sq_sums: Optional[np.ndarray] = None) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Convert running sums into per-lag means (and standard deviations).

    Lags without samples are set to zero. The variance estimate is clamped at
    zero before taking the square root.
    """
    sums = np.asarray(sums)
    counts = np.asarray(counts)
    has = counts > 0

    mean = np.zeros_like(sums)
    mean[has] = sums[has] / counts[has]

    rms = None
    if sq_sums is not None:
        sq_sums = np.asarray(sq_sums)
        rms = np.zeros_like(sq_sums)
        variance = sq_sums[has] / counts[has] - mean[has] ** 2
        rms[has] = np.sqrt(np.maximum(variance, 0.0))
    return mean, rms


def as_samples(data, dtype=np.float64) -> np.ndarray:
    """
    Copy one data set into an (N, D) array of the accumulation dtype.

    Accepts a sequence of equal-length rows or a 1-D series of scalars.
    Raises DimensionMismatch when rows disagree on their length.
    """
    if isinstance(data, np.ndarray):
        X = np.array(data, dtype=dtype, copy=True)
    else:
        rows = [np.atleast_1d(np.asarray(row, dtype=dtype)) for row in data]
        if not rows:
            return np.empty((0, 0), dtype=dtype)
        D = rows[0].shape[0]
        for i, row in enumerate(rows):
            if row.ndim != 1 or row.shape[0] != D:
                raise DimensionMismatch(
                    f'Inconsistent number of entries on each line '
                    f'(sample {i} has {row.size}, expected {D}).')
        X = np.vstack(rows)

    if X.ndim == 1:
        X = X[:, None]
    elif X.ndim != 2:
        raise DimensionMismatch(f'A data set must be 1-D or 2-D (got shape {X.shape}).')
    return X


class CorrelationAccumulator:
    """
    Running sums of inner products at every lag, shared by all data sets.

    Attributes
    ----------
    L : int
        Inclusive upper bound of the lag domain [0, L].
    C : np.ndarray
        Sum of inner products per lag; the mean correlation after finalize().
    C_rms : np.ndarray | None
        Sum of squared inner products per lag; the standard deviation after
        finalize(). None unless report_rms is enabled.
    num_samples : np.ndarray
        Number of (i, i+j) pairs contributing to C[j].
    """

    def __init__(self, config: Optional[AutocorrConfig] = None, **options):
        if config is None:
            config = AutocorrConfig(**options)
        elif options:
            config = config.replace(**options)
        self.config = config

        self.dtype = config.scalar_type
        self.threshold = config.truncation_threshold
        self.persistence_length_threshold = config.persistence_length_threshold

        self.L = int(config.domain_size)
        self.C = np.zeros(self.L + 1, dtype=self.dtype)
        self.C_rms = np.zeros(self.L + 1, dtype=self.dtype) if config.report_rms else None
        self.num_samples = np.zeros(self.L + 1, dtype=np.int64)

        self.n_data_sets = 0
        self.truncated = False
        self.finalized = False

    @property
    def is_periodic(self) -> bool:
        return self.config.periodic

    @property
    def subtract_ave(self) -> bool:
        return self.config.subtract_ave

    @property
    def report_rms(self) -> bool:
        return self.config.report_rms

    def size(self) -> int:
        """Upper bound L of the lag domain."""
        return self.L

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def accumulate(self, data_sets: Iterable, callback: Optional[ProgressCallback] = None) -> int:
        """Accumulate every data set in order. Returns the final bound L."""
        for data in data_sets:
            self.accumulate_single(data, callback=callback)
        return self.L

    def accumulate_single(self, data, callback: Optional[ProgressCallback] = None) -> int:
        """
        Add the contribution of one data set to the running sums.

        Parameters
        ----------
        data : array-like
            Samples of one time series, shape (N, D) or (N,).
        callback : callable, optional
            Called as callback(j, jmax, message) before each lag is processed.

        Returns
        -------
        L : int
            The (possibly truncated) domain bound.
        """
        if self.finalized:
            raise AccumulatorStateError('accumulate_single() called after finalize().')
        if self.config.explicit_threshold and self.n_data_sets >= 1:
            raise ConfigurationError(
                'Do not use a threshold when analyzing multiple data sets separated by blank lines\n'
                '       (sometimes also called "trajectories"). Fix the domain size (-L)\n'
                '       and leave the threshold out instead.')

        X = as_samples(data, dtype=self.dtype)
        N = X.shape[0]
        if N == 0:
            warnings.warn("Empty data set ignored.", UserWarning)
            return self.L
        self.n_data_sets += 1

        self._choose_L(N)

        if self.subtract_ave:
            X -= X.mean(axis=0)

        jmax = lag_limit(self.L, N, self.is_periodic)
        boundary = TruncationBoundary(jmax)

        def process(j: int) -> None:
            if not boundary.allows(j):
                return
            if callback is not None:
                callback(j, jmax, f'processing separation {j}')
            logger.debug('processing separation %d', j)
            self._accumulate_lag(X, j)
            if j > 0 and self._below_threshold(j):
                boundary.lower_to(j)

        # Lag 0 sets the reference value for the threshold test.
        process(0)
        parallel_for(process, range(1, jmax + 1), n_jobs=self.config.n_jobs)

        if boundary.truncated:
            self._truncate(boundary.limit)
        return self.L

    def _choose_L(self, n_samples: int) -> int:
        L = choose_domain(n_samples, self.config.domain_size, self.L,
                          self.is_periodic, frozen=self.truncated)
        if L + 1 > self.C.shape[0]:
            self.C = resize(self.C, L + 1)
            self.C_rms = resize(self.C_rms, L + 1)
            self.num_samples = resize(self.num_samples, L + 1)
        self.L = L
        return L

    def _lagged_products(self, X: np.ndarray, j: int) -> np.ndarray:
        N = X.shape[0]
        if self.is_periodic:
            partner = np.take(X, (np.arange(N) + j) % N, axis=0)
            return inner_product(X, partner)
        return inner_product(X[:N - j], X[j:])

    def _accumulate_lag(self, X: np.ndarray, j: int) -> None:
        products = self._lagged_products(X, j)
        self.C[j] += products.sum()
        if self.C_rms is not None:
            self.C_rms[j] += np.square(products).sum()
        self.num_samples[j] += products.shape[0]

    def _below_threshold(self, j: int) -> bool:
        """Compare the running sum at lag j against threshold * running sum at lag 0."""
        if self.threshold is None or self.num_samples[j] == 0:
            return False
        return bool(self.C[j] < self.threshold * self.C[0])

    def _truncate(self, L: int) -> None:
        logger.debug('correlation dropped below threshold; domain truncated to %d', L)
        self.truncated = True
        self.L = min(self.L, int(L))
        self.C = resize(self.C, self.L + 1)
        self.C_rms = resize(self.C_rms, self.L + 1)
        self.num_samples = resize(self.num_samples, self.L + 1)

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self) -> None:
        """Divide the sums at every lag by the number of pairs (once, after all data)."""
        if self.finalized:
            raise AccumulatorStateError('finalize() may only be called once.')

        self.C = resize(self.C, self.L + 1)
        self.C_rms = resize(self.C_rms, self.L + 1)
        self.num_samples = resize(self.num_samples, self.L + 1)

        self.C, self.C_rms = normalize_sums(self.C, self.num_samples, self.C_rms)
        self.finalized = True

    # ------------------------------------------------------------------
    # Correlation length
    # ------------------------------------------------------------------

    def _require_finalized(self, name: str) -> None:
        if not self.finalized:
            raise AccumulatorStateError(f'{name}() requires finalize() to be called first.')

    def integrate(self) -> float:
        self._require_finalized('integrate')
        return integrate(self.C, self.num_samples, self.persistence_length_threshold)

    def threshold_crossing(self, threshold: Optional[float] = None) -> float:
        self._require_finalized('threshold_crossing')
        if threshold is None:
            threshold = self.persistence_length_threshold
        return threshold_crossing(self.C, self.num_samples, threshold)

    def correlation_length(self) -> float:
        self._require_finalized('correlation_length')
        return correlation_length(self.C, self.num_samples, self.persistence_length_threshold)

    def guess_correlation_length(self) -> float:
        self._require_finalized('guess_correlation_length')
        return guess_correlation_length(self.C, self.num_samples, self.persistence_length_threshold)

    def lags(self) -> np.ndarray:
        """Lags 0..L that received at least one pair."""
        return np.flatnonzero(self.num_samples > 0)


def autocorrelate(data_sets: Sequence, config: Optional[AutocorrConfig] = None,
                  **options) -> CorrelationAccumulator:
    """Accumulate and finalize in one call; returns the finalized accumulator."""
    acc = CorrelationAccumulator(config, **options)
    acc.accumulate(data_sets)
    acc.finalize()
    return acc
