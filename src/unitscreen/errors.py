"""Exceptions raised while screening units.

All of them subclass `ValueError`: they describe deterministic problems with
the input data or options, never transient failures.
"""
from typing import Optional


class ScreeningError(ValueError):
    """Base class. `array` names the recording array the problem belongs to."""

    def __init__(self, message: str, array: Optional[str] = None):
        self.array = array
        if array is not None:
            message = f"{array}: {message}"
        super().__init__(message)


class ConfigurationError(ScreeningError):
    """Bad options: percentile range, unknown array, bin size, trial selection."""


class DataShapeError(ScreeningError):
    """Spike matrices and unit guides are not aligned within or across trials."""


class EmptyInputError(ScreeningError):
    """No time bins left to compute a statistic from."""
