"""Exception hierarchy for the statistical analysis core.

Every error subclasses :class:`ValueError` so callers that already guard
numerical input with ``except ValueError`` keep working.
"""

from __future__ import annotations


class StatisticsError(ValueError):
    """Base class for deterministic input errors raised by ``scoop``."""


class SingularMatrixError(StatisticsError):
    """Raised when a matrix has no inverse (zero pivot during elimination)."""


class DimensionMismatchError(StatisticsError):
    """Raised when vector or matrix sizes disagree or input is ragged."""


class InvalidDataError(StatisticsError):
    """Raised when a record field is missing, non-numeric, non-finite or out of domain."""


class InsufficientSampleError(StatisticsError):
    """Raised when there are fewer observations than a computation requires."""


class InvalidParameterError(StatisticsError):
    """Raised for bad options such as an unknown tail or confidence level."""
