"""
Report Generation

Turns a finalized accumulator into the flat textual report: one row per lag
that received samples, followed by the correlation-length summary.
"""

import math
from typing import Any, Dict, IO, Optional

import pandas as pd

from .accumulator import CorrelationAccumulator


FLOAT_FORMAT = '%.14g'


def correlation_table(acc: CorrelationAccumulator, report_rms: Optional[bool] = None,
                      report_nsum: Optional[bool] = None) -> pd.DataFrame:
    """
    Correlation curve as a DataFrame with columns lag, C, [C_rms], [num_samples].

    Lags with zero samples are omitted; rows are in increasing lag order.
    """
    if report_rms is None:
        report_rms = acc.report_rms
    if report_nsum is None:
        report_nsum = acc.config.report_nsum

    lags = acc.lags()
    data = {'lag': lags, 'C': acc.C[lags].astype(float)}
    if report_rms and acc.C_rms is not None:
        data['C_rms'] = acc.C_rms[lags].astype(float)
    if report_nsum:
        data['num_samples'] = acc.num_samples[lags]
    return pd.DataFrame(data)


def write_table(table: pd.DataFrame, stream: IO[str]) -> None:
    """Write the table as space-separated rows without a header."""
    if table.empty:
        return
    table.to_csv(stream, sep=' ', header=False, index=False, float_format=FLOAT_FORMAT)


def format_summary(correlation_length: float, fit: Optional[Dict[str, Any]] = None) -> str:
    """Trailer lines reporting the correlation-length estimate."""
    content = []
    content.append("\n#--------------------------------------\n")
    content.append(f"# correlation length = {correlation_length:.14g}\n")
    if fit is not None:
        if fit.get('status') == 'success':
            content.append(
                f"# exponential fit: length = {fit['length']:.6g} "
                f"+/- {fit['length_error']:.2g} (R^2 = {fit['r_squared']:.4f}, "
                f"{fit['n_points']} lags)\n")
        else:
            content.append("# exponential fit: failed\n")
    return "".join(content)


def summarize(acc: CorrelationAccumulator) -> Dict[str, Any]:
    """Scalar results of a finished run."""
    length = acc.guess_correlation_length()
    crossing = acc.threshold_crossing()
    return {
        'L': acc.L,
        'n_data_sets': acc.n_data_sets,
        'truncated': acc.truncated,
        'threshold_crossing': crossing,
        'correlation_length': length,
        'integrated_length': acc.correlation_length() if acc.C[0] > 0 else math.nan,
        'persistence_length_threshold': acc.persistence_length_threshold,
    }
