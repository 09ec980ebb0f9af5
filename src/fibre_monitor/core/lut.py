"""
Intensity to colour lookup table.

A LUT is an ascending list of threshold steps. A value takes the colour of
the greatest step whose threshold is <= the value; values below the first
threshold take the first colour and values above the last take the last,
so every input has a colour.

With ``interpolate=False`` the result is hard banding: exactly the matched
step's colour. With ``interpolate=True`` the colour is blended linearly
towards the next step, clamped at both ends of the table.
"""

import bisect
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

import numpy as np

from fibre_monitor.core.errors import InvalidConfigError


@dataclass(frozen=True)
class RGBA:
    """8-bit RGBA colour."""
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        for name in ("r", "g", "b", "a"):
            channel = getattr(self, name)
            if not 0 <= channel <= 255:
                raise InvalidConfigError(f"Colour channel {name}={channel} outside 0-255")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    @classmethod
    def from_value(cls, value: Union["RGBA", Sequence[int], Dict[str, int]]) -> "RGBA":
        """Accept an RGBA, an (r, g, b[, a]) sequence or an {r, g, b[, a]} mapping."""
        if isinstance(value, RGBA):
            return value
        if isinstance(value, dict):
            return cls(value["r"], value["g"], value["b"], value.get("a", 255))
        return cls(*value)


@dataclass(frozen=True)
class ColorStep:
    """Colour used from ``threshold`` up to the next step's threshold."""
    threshold: float
    color: RGBA


class LUT:
    """
    Ordered threshold to colour table.

    Example:
        >>> lut = LUT([ColorStep(0, RGBA(0, 0, 0, 0)), ColorStep(200, RGBA(96, 146, 237))])
        >>> lut.color_for(150)
        RGBA(r=0, g=0, b=0, a=0)
        >>> lut.color_for(250)
        RGBA(r=96, g=146, b=237, a=255)
    """

    def __init__(self, steps: Iterable[ColorStep], interpolate: bool = False):
        steps = tuple(steps)
        if not steps:
            raise InvalidConfigError("LUT needs at least one colour step")

        thresholds = [float(step.threshold) for step in steps]
        if any(math.isnan(t) for t in thresholds):
            raise InvalidConfigError("LUT thresholds must not be NaN")
        for previous, current in zip(thresholds, thresholds[1:]):
            if current <= previous:
                raise InvalidConfigError(
                    f"LUT thresholds must be strictly ascending, got {previous} then {current}"
                )

        self._steps = steps
        self._thresholds = thresholds
        self._interpolate = bool(interpolate)
        self._table = np.array([step.color.as_tuple() for step in steps], dtype=np.float64)

    @property
    def steps(self) -> Tuple[ColorStep, ...]:
        return self._steps

    @property
    def interpolate(self) -> bool:
        return self._interpolate

    def color_for(self, value: float) -> RGBA:
        """Colour for a single intensity value."""
        if math.isnan(value):
            return self._steps[0].color

        index = bisect.bisect_right(self._thresholds, value) - 1
        if index < 0:
            return self._steps[0].color
        if not self._interpolate or index >= len(self._steps) - 1:
            return self._steps[index].color

        lower = self._steps[index]
        upper = self._steps[index + 1]
        fraction = (value - lower.threshold) / (upper.threshold - lower.threshold)
        return RGBA(*(
            int(round(c0 + (c1 - c0) * fraction))
            for c0, c1 in zip(lower.color.as_tuple(), upper.color.as_tuple())
        ))

    def colors_for(self, values: Union[np.ndarray, Sequence[float]]) -> np.ndarray:
        """
        Vectorized color_for().

        Args:
            values: Array of any shape

        Returns:
            uint8 array of shape ``values.shape + (4,)``
        """
        values = np.asarray(values, dtype=np.float64)
        thresholds = np.asarray(self._thresholds)
        last = len(thresholds) - 1

        nan_mask = np.isnan(values)
        index = np.searchsorted(thresholds, values, side='right') - 1
        index = np.where(nan_mask, 0, np.clip(index, 0, last))

        if not self._interpolate or last == 0:
            return self._table[index].astype(np.uint8)

        upper = np.minimum(index + 1, last)
        span = thresholds[upper] - thresholds[index]
        with np.errstate(divide='ignore', invalid='ignore'):
            fraction = np.where(upper > index, (values - thresholds[index]) / np.where(span == 0, 1, span), 0.0)
        fraction = np.clip(np.nan_to_num(fraction), 0.0, 1.0)[..., np.newaxis]

        lower_colors = self._table[index]
        upper_colors = self._table[upper]
        blended = np.rint(lower_colors + (upper_colors - lower_colors) * fraction)
        return blended.astype(np.uint8)

    def to_payload(self) -> Dict[str, Any]:
        """``{"interpolate": bool, "steps": [{"value", "color"}, ...]}`` for the renderer."""
        return {
            "interpolate": self._interpolate,
            "steps": [
                {"value": step.threshold, "color": step.color.as_tuple()}
                for step in self._steps
            ],
        }

    @classmethod
    def from_payload(cls, steps: List[Dict[str, Any]], interpolate: bool = False) -> "LUT":
        """Build from ``[{"value": float, "color": (r, g, b[, a])}, ...]``."""
        try:
            color_steps = [
                ColorStep(float(step["value"]), RGBA.from_value(step["color"]))
                for step in steps
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidConfigError(f"Malformed LUT step: {e}") from e
        return cls(color_steps, interpolate=interpolate)

    def __repr__(self) -> str:
        return f"LUT(steps={len(self._steps)}, interpolate={self._interpolate})"


# Intensity bands of the fibre monitoring dashboard
DEFAULT_INTENSITY_LUT = LUT(
    [
        ColorStep(0, RGBA(0, 0, 0, 0)),         # Transparent - background
        ColorStep(200, RGBA(96, 146, 237)),     # Cornflower blue
        ColorStep(300, RGBA(0, 0, 255)),        # Blue
        ColorStep(400, RGBA(255, 215, 0)),      # Gold
        ColorStep(500, RGBA(255, 164, 0)),      # Orange
        ColorStep(600, RGBA(255, 64, 0)),       # Red-orange
    ],
    interpolate=False,
)
