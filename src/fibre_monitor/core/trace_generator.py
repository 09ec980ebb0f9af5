"""
Synthetic trace generation.

A trace is one time slice of intensity readings along the whole fibre. The
synthetic traces are progressive random walks, so neighbouring samples are
correlated the way a real backscatter trace is, mapped through
``abs(v) * 100`` to give non-negative intensities.

Every call builds its own ``numpy.random.Generator``. Nothing is shared
between calls, which lets the trace set builder run them concurrently.
"""

import logging
from typing import Optional

import numpy as np

from fibre_monitor.core.errors import InvalidConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

INTENSITY_SCALE = 100.0  # Raw walk value -> intensity units
DEFAULT_STEP_SCALE = 1.0  # Width of the uniform step distribution


def _check_points(number_of_points: int) -> int:
    if isinstance(number_of_points, bool) or int(number_of_points) != number_of_points:
        raise InvalidConfigError(f"number_of_points must be an integer, got {number_of_points!r}")
    if number_of_points <= 0:
        raise InvalidConfigError(f"number_of_points must be > 0, got {number_of_points}")
    return int(number_of_points)


def generate_trace(
    number_of_points: int,
    rng: Optional[np.random.Generator] = None,
    step_scale: float = DEFAULT_STEP_SCALE,
) -> np.ndarray:
    """
    Generate one synthetic intensity trace.

    The raw walk starts at 0 and each step adds a uniform value in
    ``[-0.5, 0.5) * step_scale``.

    Args:
        number_of_points: Samples in the trace (> 0)
        rng: Optional generator; a fresh unseeded one is created if omitted
        step_scale: Width of the random walk step distribution

    Returns:
        Read-only float64 array of ``number_of_points`` non-negative samples

    Raises:
        InvalidConfigError: If number_of_points is not a positive integer

    Example:
        >>> trace = generate_trace(320)
        >>> trace.shape, bool((trace >= 0).all())
        ((320,), True)
    """
    count = _check_points(number_of_points)
    if rng is None:
        rng = np.random.default_rng()

    steps = (rng.random(count) - 0.5) * step_scale
    steps[0] = 0.0
    walk = np.cumsum(steps)

    trace = np.abs(walk * INTENSITY_SCALE)
    trace.flags.writeable = False
    return trace


class ProgressiveTraceGenerator:
    """
    Configurable progressive trace generator.

    Holds only immutable settings; each ``generate()`` call creates its own
    random generator, so a single instance can be shared across threads.

    Example:
        >>> gen = ProgressiveTraceGenerator().set_number_of_points(320)
        >>> trace = gen.generate()
    """

    def __init__(
        self,
        number_of_points: int = 1000,
        step_scale: float = DEFAULT_STEP_SCALE,
        seed: Optional[int] = None,
    ):
        self._number_of_points = _check_points(number_of_points)
        self._step_scale = step_scale
        self._seed = seed

    @property
    def number_of_points(self) -> int:
        return self._number_of_points

    def set_number_of_points(self, number_of_points: int) -> "ProgressiveTraceGenerator":
        """Return a copy generating ``number_of_points`` samples per trace."""
        return ProgressiveTraceGenerator(number_of_points, self._step_scale, self._seed)

    def generate(self, index: int = 0) -> np.ndarray:
        """
        Generate one trace.

        Args:
            index: Row index; combined with the seed (if any) so that seeded
                generators produce different but reproducible rows

        Returns:
            Read-only trace array
        """
        if self._seed is None:
            rng = np.random.default_rng()
        else:
            rng = np.random.default_rng([self._seed, index])
        return generate_trace(self._number_of_points, rng, self._step_scale)

    def __call__(self, number_of_points: int, index: int = 0) -> np.ndarray:
        return self.set_number_of_points(number_of_points).generate(index)
