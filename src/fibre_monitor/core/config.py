"""
Static run configuration for Fibre Monitor.

The configuration fixes the spatial (optical fibre distance) and temporal
axes for the whole run. Every derived length in the data model comes from
here: the number of samples per trace and the number of traces.

Keys may be given in snake_case or in the camelCase names used by the
dashboard front end (``opticalFibreDistanceStep``, ``timeStep``, ...).
"""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from fibre_monitor.core.errors import InvalidConfigError

logger = logging.getLogger(__name__)


# Relative tolerance for treating a span/step ratio as a whole number of
# steps, so exact multiples do not gain a sample from floating point noise.
_WHOLE_STEPS_REL_TOL = 1e-9


def _epoch_ms(value: datetime) -> float:
    """Convert an aware datetime to epoch milliseconds."""
    return value.timestamp() * 1000.0


def steps_between(start: float, end: float, step: float) -> int:
    """
    Number of samples of width ``step`` needed to cover ``[start, end)``.

    Example:
        >>> steps_between(0, 100, 10)
        10
        >>> steps_between(0, 105, 10)
        11
    """
    ratio = (end - start) / step
    nearest = round(ratio)
    if math.isclose(ratio, nearest, rel_tol=_WHOLE_STEPS_REL_TOL):
        count = int(nearest)
    else:
        count = int(math.ceil(ratio))
    return max(count, 1)


class MonitorConfig(BaseModel):
    """
    Distance and time axis configuration.

    Attributes:
        distance_step: Step between optical fibre measurements (metres)
        distance_start: Start of the optical fibre axis (metres)
        distance_end: End of the optical fibre axis (metres)
        time_step: Step between heat map rows (milliseconds)
        time_start: Start time (epoch milliseconds)
        time_end: End time (epoch milliseconds)

    Calculated Properties:
        optical_fibre_length_x: Samples per trace
        time_steps_count: Number of traces

    Example:
        >>> config = MonitorConfig(
        ...     distance_step=10, distance_start=0, distance_end=100,
        ...     time_step=1000, time_start=0, time_end=3000,
        ... )
        >>> config.optical_fibre_length_x, config.time_steps_count
        (10, 3)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    distance_step: float = Field(
        gt=0,
        validation_alias=AliasChoices("distance_step", "opticalFibreDistanceStep", "distanceStep"),
    )
    distance_start: float = Field(
        validation_alias=AliasChoices("distance_start", "opticalFibreDistanceStart", "distanceStart"),
    )
    distance_end: float = Field(
        validation_alias=AliasChoices("distance_end", "opticalFibreDistanceEnd", "distanceEnd"),
    )
    time_step: float = Field(
        gt=0,
        validation_alias=AliasChoices("time_step", "timeStep"),
    )
    time_start: float = Field(
        validation_alias=AliasChoices("time_start", "timeStart"),
    )
    time_end: float = Field(
        validation_alias=AliasChoices("time_end", "timeEnd"),
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid configuration: {e}") from e

    @model_validator(mode="after")
    def _check_ranges(self) -> "MonitorConfig":
        if not self.distance_end > self.distance_start:
            raise ValueError(
                f"distance_end ({self.distance_end}) must be greater than "
                f"distance_start ({self.distance_start})"
            )
        if not self.time_end > self.time_start:
            raise ValueError(
                f"time_end ({self.time_end}) must be greater than "
                f"time_start ({self.time_start})"
            )
        for axis, start, end, step in (
            ("distance", self.distance_start, self.distance_end, self.distance_step),
            ("time", self.time_start, self.time_end, self.time_step),
        ):
            if not math.isfinite((end - start) / step):
                raise ValueError(f"{axis} axis span is too large for step {step}")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitorConfig":
        """Build a config from a mapping, raising InvalidConfigError on bad input."""
        return cls(**data)

    @property
    def optical_fibre_length_x(self) -> int:
        """Number of samples in every trace."""
        return steps_between(self.distance_start, self.distance_end, self.distance_step)

    @property
    def time_steps_count(self) -> int:
        """Number of traces (heat map rows)."""
        return steps_between(self.time_start, self.time_end, self.time_step)

    def distance_axis(self) -> np.ndarray:
        """Distance coordinate of every trace column."""
        return self.distance_start + np.arange(self.optical_fibre_length_x) * self.distance_step

    def time_axis(self) -> np.ndarray:
        """Timestamp (epoch ms) of every trace row."""
        return self.time_start + np.arange(self.time_steps_count) * self.time_step


DEFAULT_CONFIG = MonitorConfig(
    distance_step=10,
    distance_start=0,
    distance_end=3200,
    time_step=1000,
    time_start=_epoch_ms(datetime(2021, 6, 17, 8, 54, 4, tzinfo=timezone.utc)),
    time_end=_epoch_ms(datetime(2021, 6, 17, 8, 54, 38, tzinfo=timezone.utc)),
)


def load_config(path: Union[str, Path]) -> MonitorConfig:
    """
    Load a configuration from a JSON file.

    Args:
        path: Path to a JSON object with the six axis parameters

    Returns:
        Validated MonitorConfig

    Raises:
        InvalidConfigError: If the file cannot be read, is not valid JSON,
            or fails validation
    """
    config_path = Path(path)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise InvalidConfigError(f"Cannot read config file {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Config file {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidConfigError(f"Config file {config_path} must contain a JSON object")

    config = MonitorConfig.from_dict(data)
    logger.info(f"Loaded configuration from {config_path}")
    return config
