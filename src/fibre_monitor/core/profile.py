"""
Distance profile aggregation.

Reduces a trace set column-wise: the profile value at each fibre distance
is the sum of that column over every trace. This feeds the area chart
above the heat map.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Union

import numpy as np

from fibre_monitor.core.errors import EmptyInputError
from fibre_monitor.core.trace_set import TraceSet, as_trace_array


@dataclass(frozen=True)
class Profile:
    """
    Intensity sum per fibre distance.

    Attributes:
        xs: Distance of every column
        ys: Intensity sum of every column
    """
    xs: np.ndarray
    ys: np.ndarray

    def __len__(self) -> int:
        return len(self.xs)

    def __getitem__(self, index: int) -> tuple:
        return (float(self.xs[index]), float(self.ys[index]))

    def points(self) -> List[Dict[str, float]]:
        """Profile as ``[{"x": ..., "y": ...}, ...]`` for an area series."""
        return [{"x": float(x), "y": float(y)} for x, y in zip(self.xs, self.ys)]

    @property
    def peak(self) -> tuple:
        """(x, y) of the column with the largest intensity sum."""
        index = int(np.argmax(self.ys))
        return self[index]


def aggregate_profile(
    trace_set: Union[TraceSet, np.ndarray, Sequence[Sequence[float]]],
    distance_start: float,
    distance_step: float,
) -> Profile:
    """
    Sum every column of a trace set.

    Args:
        trace_set: Rectangular rows of samples
        distance_start: Distance of column 0
        distance_step: Distance between columns

    Returns:
        Profile with one point per column

    Raises:
        EmptyInputError: If there are no traces or the traces are empty
        ShapeMismatchError: If the rows have unequal lengths

    Example:
        >>> profile = aggregate_profile([[1, 2], [3, 4]], 0, 10)
        >>> profile.points()
        [{'x': 0.0, 'y': 4.0}, {'x': 10.0, 'y': 6.0}]
    """
    values = as_trace_array(trace_set)
    rows, columns = values.shape
    if rows == 0:
        raise EmptyInputError("Cannot aggregate a profile over zero traces")
    if columns == 0:
        raise EmptyInputError("Cannot aggregate a profile over zero-length traces")

    ys = values.sum(axis=0)
    xs = distance_start + np.arange(columns, dtype=np.float64) * distance_step
    xs.flags.writeable = False
    ys.flags.writeable = False
    return Profile(xs=xs, ys=ys)
