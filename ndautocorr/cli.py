"""
Command line front end.

Reads numbers from one or more text files (or standard input), prints the
correlation function to standard output and the correlation length to
standard error.

Usage:
    ndautocorr [-L N] [-p] [-ave | -avezero] [-rms] [-nsum] [-t X] [FILE ...] < data.txt
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .accumulator import CorrelationAccumulator
from .base import AutocorrError
from .config import AutocorrConfig
from .estimators import fit_exponential_decay
from .reader import read_data_sets
from .report import correlation_table, format_summary, write_table
from .utils.logging import setup_logging


PROGRAM_NAME = 'ndautocorr'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description='Calculate the auto-correlation function of one or more '
                    'multi-dimensional time series.',
        allow_abbrev=False,
    )
    parser.add_argument('files', nargs='*', metavar='FILE',
                        help="Input files ('-' or none reads standard input)")
    parser.add_argument('-L', dest='domain_size', type=int, default=None,
                        help='Fixed domain size (largest separation reported); 0 = automatic')
    parser.add_argument('-p', '-P', '-periodic', '--periodic', dest='periodic',
                        action='store_const', const=True, default=None,
                        help='Use periodic boundary conditions')
    parser.add_argument('-ave', dest='subtract_ave', action='store_const', const=True,
                        default=None, help='Subtract the average before correlating (default)')
    parser.add_argument('-avezero', dest='subtract_ave', action='store_const', const=False,
                        help='Assume the average is zero (do not subtract it)')
    parser.add_argument('-rms', dest='report_rms', action='store_const', const=True,
                        default=None, help='Report the fluctuation of each C(j)')
    parser.add_argument('-nsum', dest='report_nsum', action='store_const', const=True,
                        default=None, help='Report the number of pairs averaged at each separation')
    parser.add_argument('-t', '-T', '-threshold', '--threshold', dest='threshold', type=float,
                        default=None,
                        help='Stop when C(j) drops below this fraction of C(0), in [-1, 1]')
    parser.add_argument('--no-threshold', dest='auto_threshold', action='store_const',
                        const=False, default=None,
                        help='Do not truncate the domain automatically at 1/e')
    parser.add_argument('-j', '--jobs', dest='n_jobs', type=int, default=None,
                        help='Number of parallel workers over separations (-1 = all cores)')
    parser.add_argument('--dtype', dest='dtype', default=None,
                        choices=['float32', 'float64', 'double', 'longdouble'],
                        help='Floating point type of the running sums')
    parser.add_argument('--config', default=None,
                        help='YAML file with run options (flags override it)')
    parser.add_argument('--fit', action='store_true',
                        help='Also report a least-squares exponential fit')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Report progress for every separation')
    parser.add_argument('--log-file', default=None, help='Also write the log to this file')
    parser.add_argument('--version', action='version',
                        version=f'{PROGRAM_NAME} {__version__}')
    return parser


_OVERRIDES = ('domain_size', 'periodic', 'subtract_ave', 'report_rms', 'report_nsum',
              'threshold', 'auto_threshold', 'n_jobs', 'dtype')


def build_config(args: argparse.Namespace) -> AutocorrConfig:
    """Merge YAML options (if any) with the flags given on the command line."""
    config = AutocorrConfig.from_yaml(args.config) if args.config else AutocorrConfig()
    changes = {name: getattr(args, name) for name in _OVERRIDES
               if getattr(args, name) is not None}
    if changes:
        config = config.replace(**changes)
    return config


def run(config: AutocorrConfig, files: List[str], fit: bool = False,
        logger: Optional[logging.Logger] = None):
    """Accumulate every data set, finalize, and return (table, length, fit)."""
    if logger is None:
        logger = logging.getLogger(PROGRAM_NAME)

    acc = CorrelationAccumulator(config)
    for n, data_set in enumerate(read_data_sets(files), start=1):
        logger.info('processing data set #%d (%d samples)', n, len(data_set))
        acc.accumulate_single(data_set)
    acc.finalize()

    if acc.truncated:
        logger.info('domain truncated at separation %d', acc.L)

    table = correlation_table(acc)
    length = acc.guess_correlation_length()
    fit_result = fit_exponential_decay(acc.C, acc.num_samples) if fit else None
    return table, length, fit_result


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else args.log_level
    logger = setup_logging(level=level, log_file=args.log_file, name=PROGRAM_NAME)
    logger.info('%s, v%s', PROGRAM_NAME, __version__)

    try:
        config = build_config(args)
        if config.periodic:
            logger.info('periodic boundary conditions used')
        if config.truncation_threshold is not None:
            logger.info('the correlation function will stop when dropping below '
                        'threshold = %g (relative to the peak at separation 0)',
                        config.truncation_threshold)
        table, length, fit_result = run(config, args.files, fit=args.fit, logger=logger)
    except AutocorrError as e:
        sys.stderr.write(f'\n{e}\n')
        return 1

    write_table(table, sys.stdout)
    sys.stdout.flush()
    sys.stderr.write(format_summary(length, fit_result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
