"""
Correlation-Length Estimators

Read-only post-processing of a finalized correlation curve C[0..L]
(mean inner product per lag) and the number of pairs behind every entry.

Key formulas:
- Threshold crossing: first (interpolated) lag j* where C(j*) < t * C(0)
- Exponential fit through the crossing: C(j) = C(0) exp(-j/xi)
  => xi = -j* / ln(t)
- Integrated length: xi = sum_j C(j) / C(0), summed while C(j) > t * C(0)
"""

import math
import warnings
from typing import Any, Dict, Optional

import numpy as np
from scipy.optimize import curve_fit


NO_CROSSING = -1.0


def integrate(C: np.ndarray, num_samples: np.ndarray, threshold: float) -> float:
    """
    Sum C[j] for j = 0, 1, 2, ... while there are samples at lag j and
    C[j] stays above threshold * C[0].

    Numerically unstable for long noisy tails; used as a fallback.
    """
    C = np.asarray(C, dtype=float)
    num_samples = np.asarray(num_samples)
    if C.size == 0:
        return 0.0
    cutoff = threshold * C[0]
    total = 0.0
    for j in range(C.size):
        if num_samples[j] > 0 and C[j] > cutoff:
            total += C[j]
        else:
            break
    return float(total)


def threshold_crossing(C: np.ndarray, num_samples: np.ndarray, threshold: float) -> float:
    """
    Fractional lag at which C first drops below threshold * C[0].

    Lags without samples are skipped. The crossing is interpolated linearly
    between the last lag above the cutoff and the first lag below it.
    Returns NO_CROSSING (-1) when the curve never drops below the cutoff.
    """
    C = np.asarray(C, dtype=float)
    num_samples = np.asarray(num_samples)
    if C.size < 2:
        return NO_CROSSING

    cutoff = threshold * C[0]
    j_prev = 0
    for j in range(1, C.size):
        if num_samples[j] == 0:
            continue
        if C[j] < cutoff:
            drop = C[j_prev] - C[j]
            if drop <= 0:
                return float(j)
            return float(j_prev + (j - j_prev) * (C[j_prev] - cutoff) / drop)
        j_prev = j
    return NO_CROSSING


def correlation_length(C: np.ndarray, num_samples: np.ndarray, threshold: float) -> float:
    """Integrated correlation length, integrate(...) / C[0]."""
    C = np.asarray(C, dtype=float)
    if C.size == 0 or C[0] <= 0:
        warnings.warn(
            "Zero-lag correlation is not positive; the correlation length is undefined.",
            UserWarning
        )
        return math.nan
    return integrate(C, num_samples, threshold) / float(C[0])


def guess_correlation_length(C: np.ndarray, num_samples: np.ndarray, threshold: float) -> float:
    """
    Headline decay-length estimate.

    Fits a single exponential through the threshold crossing when one exists
    (and the threshold lies strictly between 0 and 1); otherwise falls back
    to the integrated correlation length.
    """
    j_thresh = threshold_crossing(C, num_samples, threshold)
    if j_thresh >= 0 and 0.0 < threshold < 1.0:
        return -j_thresh / math.log(threshold)
    return correlation_length(C, num_samples, threshold)


def _exp_decay(j, amplitude, length):
    return amplitude * np.exp(-j / length)


def fit_exponential_decay(C: np.ndarray, num_samples: np.ndarray,
                          max_lag: Optional[int] = None) -> Dict[str, Any]:
    """
    Least-squares fit of C(j) = A exp(-j / xi).

    Uses the lags that have samples, up to (not including) the first lag at
    which the curve is no longer positive, optionally capped at max_lag.

    Returns
    -------
    dict
        status ('success' or 'error'), amplitude, length, length_error,
        r_squared, n_points
    """
    C = np.asarray(C, dtype=float)
    num_samples = np.asarray(num_samples)
    failed = {
        'status': 'error',
        'amplitude': math.nan,
        'length': math.nan,
        'length_error': math.nan,
        'r_squared': math.nan,
        'n_points': 0,
    }

    lags = []
    values = []
    for j in range(C.size):
        if max_lag is not None and j > max_lag:
            break
        if num_samples[j] == 0:
            continue
        if C[j] <= 0:
            break
        lags.append(j)
        values.append(C[j])

    if len(lags) < 3:
        warnings.warn("Exponential fit needs at least 3 positive lags.", UserWarning)
        failed['n_points'] = len(lags)
        return failed

    lags = np.asarray(lags, dtype=float)
    values = np.asarray(values, dtype=float)

    # Initial guess from the log-slope between the first and last point
    ratio = values[-1] / values[0]
    if 0 < ratio < 1:
        length_guess = -(lags[-1] - lags[0]) / np.log(ratio)
    else:
        length_guess = max(lags[-1], 1.0)

    try:
        popt, pcov = curve_fit(
            _exp_decay, lags, values,
            p0=[values[0], length_guess],
            bounds=([0, 1e-12], [np.inf, np.inf]),
            maxfev=5000
        )
    except (RuntimeError, ValueError) as e:
        warnings.warn(f"Exponential fit failed: {str(e)}")
        failed['n_points'] = len(lags)
        return failed

    fitted = _exp_decay(lags, *popt)
    ss_tot = np.sum((values - np.mean(values)) ** 2)
    r_squared = 1 - np.sum((values - fitted) ** 2) / ss_tot if ss_tot > 0 else 1.0
    errors = np.sqrt(np.abs(np.diag(pcov))) if pcov.size > 0 else np.zeros(2)

    return {
        'status': 'success',
        'amplitude': float(popt[0]),
        'length': float(popt[1]),
        'length_error': float(errors[1]),
        'r_squared': float(r_squared),
        'n_points': int(len(lags)),
    }
