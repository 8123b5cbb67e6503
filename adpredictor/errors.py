"""Exception types raised by the EP logistic regression package.

All of them subclass ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Model parameters are missing, unparsable or out of range."""


class ModelFormatError(ValueError):
    """A persisted model file contains a malformed line."""

    def __init__(self, path: str, line_no: int, reason: str) -> None:
        self.path = path
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"{path}:{line_no}: {reason}")


class DataFormatError(ValueError):
    """A training/prediction data file contains a malformed line."""

    def __init__(self, path: str, line_no: int, reason: str) -> None:
        self.path = path
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"{path}:{line_no}: {reason}")


class NumericalError(ValueError):
    """A Gaussian operation produced a degenerate (non-finite or
    non-positive variance) result."""
