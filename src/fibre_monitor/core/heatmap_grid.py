"""
Heat map grid model.

Wraps a trace set with an affine coordinate mapping from integer cell
indices ``(col, row)`` to continuous axis coordinates:

    x = origin_x + col * step_x      (fibre distance)
    y = origin_y + row * step_y      (time)

The data order is an explicit enum. With ``DataOrder.ROWS`` the backing
values are ``rows`` sequences of ``columns`` samples (one trace per row);
with ``DataOrder.COLUMNS`` they are ``columns`` sequences of ``rows``
samples. The order is never inferred from the array shape: a square grid
is structurally valid both ways, so the declared order is always checked.

Cell values are exposed uninterpolated; interpolation is left to the
renderer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from fibre_monitor.core.config import MonitorConfig
from fibre_monitor.core.errors import GridIndexError, InvalidConfigError, ShapeMismatchError
from fibre_monitor.core.lut import LUT
from fibre_monitor.core.trace_set import TraceSet, as_trace_array

logger = logging.getLogger(__name__)


class DataOrder(Enum):
    """Orientation of the backing value array."""
    ROWS = "rows"        # values[row][col]
    COLUMNS = "columns"  # values[col][row]


@dataclass(frozen=True)
class GridCoordinateMapping:
    """
    Affine mapping between grid cells and axis coordinates.

    Attributes:
        columns: Cells along X (fibre distance)
        rows: Cells along Y (time)
        origin_x: X coordinate of column 0
        origin_y: Y coordinate of row 0
        step_x: X distance between columns
        step_y: Y distance between rows
        order: Orientation of the backing values
    """
    columns: int
    rows: int
    origin_x: float
    origin_y: float
    step_x: float
    step_y: float
    order: DataOrder = DataOrder.ROWS

    def __post_init__(self):
        if self.columns <= 0 or self.rows <= 0:
            raise InvalidConfigError(
                f"Grid must have positive size, got {self.columns} columns x {self.rows} rows"
            )
        if not (self.step_x > 0 and self.step_y > 0):
            raise InvalidConfigError(
                f"Grid steps must be positive, got step_x={self.step_x}, step_y={self.step_y}"
            )
        if not isinstance(self.order, DataOrder):
            raise InvalidConfigError(f"order must be a DataOrder, got {self.order!r}")

    @property
    def value_shape(self) -> Tuple[int, int]:
        """Shape the backing array must have for this order."""
        if self.order is DataOrder.ROWS:
            return (self.rows, self.columns)
        return (self.columns, self.rows)

    def check_index(self, col: int, row: int) -> None:
        """Raise GridIndexError unless ``(col, row)`` is inside the grid."""
        if not 0 <= col < self.columns:
            raise GridIndexError(f"Column {col} outside grid (0-{self.columns - 1})")
        if not 0 <= row < self.rows:
            raise GridIndexError(f"Row {row} outside grid (0-{self.rows - 1})")

    def coordinate_of(self, col: int, row: int) -> Tuple[float, float]:
        """Axis coordinate of cell ``(col, row)``."""
        self.check_index(col, row)
        return (self.origin_x + col * self.step_x, self.origin_y + row * self.step_y)

    def flat_index(self, col: int, row: int) -> int:
        """Index of cell ``(col, row)`` in the flattened backing buffer."""
        self.check_index(col, row)
        if self.order is DataOrder.ROWS:
            return row * self.columns + col
        return col * self.rows + row

    def cell_at(self, x: float, y: float) -> Tuple[int, int]:
        """
        Cell containing axis coordinate ``(x, y)``.

        Each cell spans ``[origin + i*step, origin + (i+1)*step)``.

        Raises:
            GridIndexError: If the coordinate is outside the grid
        """
        col = int(np.floor((x - self.origin_x) / self.step_x))
        row = int(np.floor((y - self.origin_y) / self.step_y))
        self.check_index(col, row)
        return (col, row)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max) covered by the grid cells."""
        return (
            self.origin_x,
            self.origin_x + self.columns * self.step_x,
            self.origin_y,
            self.origin_y + self.rows * self.step_y,
        )


class HeatmapGrid:
    """
    Trace set bound to a coordinate mapping.

    Example:
        >>> mapping = GridCoordinateMapping(columns=3, rows=2, origin_x=0,
        ...                                 origin_y=0, step_x=10, step_y=1000)
        >>> grid = HeatmapGrid([[1, 2, 3], [4, 5, 6]], mapping)
        >>> grid.intensity_at(2, 1)
        6.0
        >>> grid.coordinate_of(2, 1)
        (20, 1000)
    """

    def __init__(
        self,
        values: Union[TraceSet, np.ndarray, Sequence[Sequence[float]]],
        mapping: GridCoordinateMapping,
    ):
        self._mapping = mapping
        self._values = self._validated(values)

    @classmethod
    def from_config(
        cls,
        trace_set: Union[TraceSet, np.ndarray, Sequence[Sequence[float]]],
        config: MonitorConfig,
        order: DataOrder = DataOrder.ROWS,
        date_origin: Optional[float] = None,
    ) -> "HeatmapGrid":
        """
        Build a grid whose axes follow a configuration.

        Time coordinates are offset by ``date_origin`` (default: the
        configured start time) so the Y axis works with small numbers.

        Args:
            trace_set: Values laid out according to ``order``
            config: Axis configuration
            order: Orientation of ``trace_set``
            date_origin: Epoch ms subtracted from every time coordinate
        """
        if date_origin is None:
            date_origin = config.time_start

        mapping = GridCoordinateMapping(
            columns=config.optical_fibre_length_x,
            rows=config.time_steps_count,
            origin_x=config.distance_start,
            origin_y=config.time_start - date_origin,
            step_x=config.distance_step,
            step_y=config.time_step,
            order=order,
        )
        return cls(trace_set, mapping)

    def _validated(self, values) -> np.ndarray:
        array = as_trace_array(values)
        expected = self._mapping.value_shape
        if array.shape != expected:
            raise ShapeMismatchError(
                f"Values of shape {array.shape} do not match a "
                f"{self._mapping.columns}x{self._mapping.rows} grid in "
                f"'{self._mapping.order.value}' order (expected {expected})",
                expected=expected,
                actual=tuple(array.shape),
            )
        array = np.array(array, dtype=np.float64, copy=True)
        array.flags.writeable = False
        return array

    @property
    def mapping(self) -> GridCoordinateMapping:
        return self._mapping

    @property
    def columns(self) -> int:
        return self._mapping.columns

    @property
    def rows(self) -> int:
        return self._mapping.rows

    @property
    def values(self) -> np.ndarray:
        """Backing values in the declared order (read-only)."""
        return self._values

    def intensity_at(self, col: int, row: int) -> float:
        """Discrete, uninterpolated value of cell ``(col, row)``."""
        self._mapping.check_index(col, row)
        if self._mapping.order is DataOrder.ROWS:
            return float(self._values[row, col])
        return float(self._values[col, row])

    def coordinate_of(self, col: int, row: int) -> Tuple[float, float]:
        """Axis coordinate of cell ``(col, row)``."""
        return self._mapping.coordinate_of(col, row)

    def intensity_at_coordinate(self, x: float, y: float) -> float:
        """Value of the cell containing axis coordinate ``(x, y)``."""
        col, row = self._mapping.cell_at(x, y)
        return self.intensity_at(col, row)

    def as_row_major(self) -> np.ndarray:
        """Values as a (rows, columns) array regardless of the declared order."""
        if self._mapping.order is DataOrder.ROWS:
            return self._values
        return self._values.T

    def replace_values(self, new_values: Union[TraceSet, np.ndarray, Sequence[Sequence[float]]]) -> None:
        """
        Rebind new data to the existing mapping.

        Raises:
            ShapeMismatchError: If the shape disagrees with the mapping. The
                current values are left untouched.
        """
        self._values = self._validated(new_values)
        logger.debug(f"Heat map values replaced ({self.columns}x{self.rows})")

    def colorize(self, lut: LUT) -> np.ndarray:
        """Apply a LUT to every cell; returns uint8 (rows, columns, 4)."""
        return lut.colors_for(self.as_row_major())

    def to_payload(self) -> Dict[str, Any]:
        """Grid construction options for the rendering layer."""
        mapping = self._mapping
        return {
            "columns": mapping.columns,
            "rows": mapping.rows,
            "start": {"x": mapping.origin_x, "y": mapping.origin_y},
            "step": {"x": mapping.step_x, "y": mapping.step_y},
            "dataOrder": mapping.order.value,
            "values": self._values.tolist(),
        }

    def __repr__(self) -> str:
        return (
            f"HeatmapGrid(columns={self.columns}, rows={self.rows}, "
            f"order={self._mapping.order.value})"
        )
