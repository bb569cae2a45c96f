"""
Data Set Reader

Reads whitespace-delimited numbers, one sample per line, from text streams.
Blank lines separate independent data sets (trajectories) and everything
after a '#' on a line is a comment. The parsing position is carried in an
explicit ParseContext so diagnostics can name the file and line.
"""

import sys
from contextlib import contextmanager
from typing import IO, Iterator, List, Optional, Sequence

from .base import FormatError, ParseContext


COMMENT_CHAR = '#'
SPACES = ' \t'

Row = List[float]
DataSet = List[Row]


def read_scalar(token: str, context: ParseContext) -> float:
    """Parse one number; raise FormatError with file/line context otherwise."""
    try:
        return float(token)
    except ValueError:
        raise FormatError.at('Expected a number.', context, token=token) from None


def parse_line(text: str, context: ParseContext) -> Row:
    """Return the numbers on one line (empty for blank and comment-only lines)."""
    text = text.split(COMMENT_CHAR, 1)[0]
    tokens = text.replace('\t', ' ').split()
    return [read_scalar(token, context) for token in tokens]


def _is_blank(text: str) -> bool:
    return text.strip(SPACES + '\r\n') == ''


def iter_data_sets(stream: IO[str], filename: str = 'standard-input',
                   context: Optional[ParseContext] = None) -> Iterator[DataSet]:
    """
    Yield the data sets found in a text stream.

    Each data set is a list of rows (lists of floats). Rows are not checked
    for equal length here; that is the accumulator's job.
    """
    if context is None:
        context = ParseContext(filename=filename, line=1)

    current: DataSet = []
    for number, text in enumerate(stream, start=1):
        context.line = number
        if _is_blank(text):
            if current:
                yield current
                current = []
            continue
        row = parse_line(text, context)
        if row:
            current.append(row)
    if current:
        yield current


@contextmanager
def _open_source(path: str):
    if path == '-':
        yield sys.stdin
    else:
        with open(path, 'r', encoding='utf-8') as fh:
            yield fh


def read_data_sets(paths: Optional[Sequence[str]] = None) -> Iterator[DataSet]:
    """
    Yield data sets from several files in order ('-' or no paths reads stdin).

    The end of each file also ends a data set.
    """
    if not paths:
        paths = ['-']
    for path in paths:
        name = 'standard-input' if path == '-' else str(path)
        try:
            with _open_source(path) as fh:
                yield from iter_data_sets(fh, filename=name)
        except OSError as e:
            raise FormatError(f'Unable to open file: {e.strerror}', filename=name) from None


def load_data_sets(paths: Optional[Sequence[str]] = None) -> List[DataSet]:
    """Read every data set into memory."""
    return list(read_data_sets(paths))


def parse_text(text: str, filename: str = 'string') -> List[DataSet]:
    """Data sets contained in a string (convenient for small inputs and tests)."""
    return list(iter_data_sets(text.splitlines(keepends=True), filename=filename))
