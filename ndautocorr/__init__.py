"""
ndautocorr

Discretized autocorrelation function of one or more multivariate time
series, with adaptive truncation of the lag domain and estimation of the
correlation (decay) length:
- Accumulation of inner products at every lag across independent data sets
- Threshold-driven early truncation, safe under lag-parallel execution
- Normalization into mean and fluctuation per lag
- Correlation length by exponential fit at a threshold crossing or by integration
"""

__version__ = '0.13.0'

from .base import (
    AccumulatorStateError,
    AutocorrError,
    ConfigurationError,
    DimensionMismatch,
    FormatError,
    ParseContext,
)
from .config import AutocorrConfig, DEFAULT_THRESHOLD
from .inner_product import inner_product
from .domain import choose_domain
from .accumulator import CorrelationAccumulator, autocorrelate, normalize_sums
from .estimators import (
    NO_CROSSING,
    correlation_length,
    fit_exponential_decay,
    guess_correlation_length,
    integrate,
    threshold_crossing,
)
from .reader import iter_data_sets, load_data_sets, parse_text, read_data_sets
from .report import correlation_table, summarize, write_table

__all__ = [
    'AccumulatorStateError',
    'AutocorrError',
    'ConfigurationError',
    'DimensionMismatch',
    'FormatError',
    'ParseContext',
    'AutocorrConfig',
    'DEFAULT_THRESHOLD',
    'inner_product',
    'choose_domain',
    'CorrelationAccumulator',
    'autocorrelate',
    'normalize_sums',
    'NO_CROSSING',
    'correlation_length',
    'fit_exponential_decay',
    'guess_correlation_length',
    'integrate',
    'threshold_crossing',
    'iter_data_sets',
    'load_data_sets',
    'parse_text',
    'read_data_sets',
    'correlation_table',
    'summarize',
    'write_table',
]
