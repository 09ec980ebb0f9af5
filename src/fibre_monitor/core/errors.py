"""
Exception hierarchy for Fibre Monitor.

All errors are raised synchronously at the boundary of the operation that
detected them. Nothing in the core retries automatically.
"""

from typing import Optional, Tuple


class FibreMonitorError(Exception):
    """Base class for all Fibre Monitor errors."""


class InvalidConfigError(FibreMonitorError, ValueError):
    """Configuration or construction parameters are invalid."""


class GenerationError(FibreMonitorError):
    """
    One or more trace generation tasks failed.

    Raised once for the whole batch; no partially built trace set is kept.
    The first failure is chained as ``__cause__``.

    Attributes:
        failed_index: Row index of the first failing task (None if unknown)
        failure_count: Number of tasks that failed
    """

    def __init__(
        self,
        message: str,
        failed_index: Optional[int] = None,
        failure_count: int = 0,
    ):
        super().__init__(message)
        self.failed_index = failed_index
        self.failure_count = failure_count


class GenerationCancelledError(GenerationError):
    """Trace generation was cancelled before all tasks completed."""


class ShapeMismatchError(FibreMonitorError, ValueError):
    """
    Data does not have the shape required by the operation.

    Attributes:
        expected: Expected shape (rows, columns), if known
        actual: Actual shape, if known
    """

    def __init__(
        self,
        message: str,
        expected: Optional[Tuple[int, ...]] = None,
        actual: Optional[Tuple[int, ...]] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class EmptyInputError(FibreMonitorError, ValueError):
    """Aggregation requested over zero traces or zero-length traces."""


class GridIndexError(FibreMonitorError, IndexError):
    """Grid cell index outside the mapped columns/rows."""
