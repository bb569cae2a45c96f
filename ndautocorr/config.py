"""
Run Configuration

A single dataclass holds every option of an autocorrelation run. The
threshold bookkeeping follows two rules:

- A fixed domain size disables truncation; a threshold given alongside it is
  only used to estimate the correlation length.
- With an automatic domain and no explicit threshold, the engine truncates at
  1/e of the zero-lag value unless automatic thresholding is switched off.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import yaml

from .base import ConfigurationError


DEFAULT_THRESHOLD = math.exp(-1.0)

_DTYPES = {
    'float32': np.float32,
    'float64': np.float64,
    'double': np.float64,
    'longdouble': np.longdouble,
}


@dataclass
class AutocorrConfig:
    """
    Options for one autocorrelation run.

    Parameters
    ----------
    domain_size : int
        Fixed upper lag bound L (0 selects the domain automatically).
    periodic : bool
        Wrap i+j back into [0, N) when forming lagged pairs.
    subtract_ave : bool
        Compute <(x(i)-<x>).(x(i+j)-<x>)> instead of <x(i).x(i+j)>.
    report_rms : bool
        Track the fluctuation of the per-pair inner products.
    report_nsum : bool
        Include the number of pairs averaged at each lag in the report.
    threshold : float | None
        Explicit cutoff relative to the zero-lag value, in [-1, 1].
    auto_threshold : bool
        Truncate at 1/e when neither threshold nor domain_size is given.
    n_jobs : int
        Number of lag-parallel workers (-1 uses every core).
    dtype : str
        Floating point type used for the running sums.
    """

    domain_size: int = 0
    periodic: bool = False
    subtract_ave: bool = True
    report_rms: bool = False
    report_nsum: bool = False
    threshold: Optional[float] = None
    auto_threshold: bool = True
    n_jobs: int = 1
    dtype: str = 'float64'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.domain_size < 0:
            raise ConfigurationError(
                f'Domain size must be a non-negative integer (got {self.domain_size}).')
        if self.threshold is not None:
            if not (-1.0 <= self.threshold <= 1.0):
                raise ConfigurationError(
                    'Expected a number between -1.0 and 1.0 for the threshold.\n'
                    '       (This "threshold" should be expressed as a fraction of <(x-<x>)^2>)\n'
                    f'       Instead, you specified {self.threshold}.')
        if self.n_jobs == 0:
            raise ConfigurationError('n_jobs must be a positive integer or -1.')
        if self.dtype not in _DTYPES:
            raise ConfigurationError(
                f'Unknown dtype "{self.dtype}". Choose one of: {", ".join(sorted(_DTYPES))}.')

    @property
    def scalar_type(self):
        return _DTYPES[self.dtype]

    @property
    def truncation_threshold(self) -> Optional[float]:
        """Cutoff used to stop accumulating, or None when truncation is off."""
        if self.domain_size > 0:
            return None
        if self.threshold is not None:
            return float(self.threshold)
        if self.auto_threshold:
            return DEFAULT_THRESHOLD
        return None

    @property
    def persistence_length_threshold(self) -> float:
        """Cutoff used when estimating the correlation length."""
        if self.threshold is not None:
            return float(self.threshold)
        return DEFAULT_THRESHOLD

    @property
    def explicit_threshold(self) -> bool:
        """True when the caller supplied a threshold (only one data set is then allowed)."""
        return self.threshold is not None

    def replace(self, **changes) -> 'AutocorrConfig':
        values = asdict(self)
        values.update(changes)
        return AutocorrConfig(**values)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'AutocorrConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values).difference(known))
        if unknown:
            raise ConfigurationError(f'Unknown configuration keys: {unknown}')
        try:
            return cls(**dict(values))
        except TypeError as e:
            raise ConfigurationError(f'Invalid configuration: {e}')

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'AutocorrConfig':
        """Load options from a YAML mapping such as ``{periodic: true, domain_size: 50}``."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                raw = yaml.safe_load(fh) or {}
        except OSError as e:
            raise ConfigurationError(f'Could not read configuration file: {e}', filename=str(path))
        except yaml.YAMLError as e:
            raise ConfigurationError(f'Invalid YAML: {e}', filename=str(path))
        if not isinstance(raw, dict):
            raise ConfigurationError('Configuration file must contain a mapping.', filename=str(path))
        return cls.from_mapping(raw)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
