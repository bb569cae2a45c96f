"""
Error Types and Parsing Context

Every failure the engine can report derives from AutocorrError and carries
an error kind plus optional input context (file, line, offending token) so
the front end can print one diagnostic and stop.
"""

from dataclasses import dataclass
from typing import Optional


FORMAT_ERROR = 'FormatError'
DIMENSION_MISMATCH = 'DimensionMismatch'
CONFIGURATION_ERROR = 'ConfigurationError'


@dataclass
class ParseContext:
    """Where in the input we are: file identifier and 1-based line number."""

    filename: str = 'standard-input'
    line: int = 1

    def describe(self) -> str:
        return f'"{self.filename}", near line {self.line}'


class AutocorrError(Exception):
    """Base class for errors surfaced to the top level unmodified."""

    kind = 'AutocorrError'

    def __init__(self, message: str, filename: Optional[str] = None,
                 line: Optional[int] = None, token: Optional[str] = None):
        self.message = message
        self.filename = filename
        self.line = line
        self.token = token
        super().__init__(self._format())

    @classmethod
    def at(cls, message: str, context: ParseContext, token: Optional[str] = None):
        """Build an error located at the current position of a parse context."""
        return cls(message, filename=context.filename, line=context.line, token=token)

    def _format(self) -> str:
        text = f'{self.kind}: {self.message}'
        if self.filename is not None:
            text += f'\n      in "{self.filename}"'
            if self.line is not None:
                text += f', near line {self.line}'
        if self.token is not None:
            text += f'\n      offending text: "{self.token}"'
        return text


class FormatError(AutocorrError):
    """Raised when a token where a number is expected cannot be parsed."""

    kind = FORMAT_ERROR


class DimensionMismatch(FormatError):
    """Raised when samples within one data set disagree on their dimension."""

    kind = DIMENSION_MISMATCH


class ConfigurationError(AutocorrError):
    """Raised when run options are invalid or cannot be combined."""

    kind = CONFIGURATION_ERROR


class AccumulatorStateError(RuntimeError):
    """Raised when the accumulator is used out of order (e.g. after finalize)."""
