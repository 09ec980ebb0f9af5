"""
Trace set construction.

Builds the 2-D trace set (rows = time steps, columns = fibre distance) by
fanning out one generation task per row to a thread pool and joining the
futures in submission order. The join is all-or-nothing: either every row
is produced and a read-only TraceSet is returned, or a single
GenerationError is raised and no partial data is kept.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterator, List, Optional, Sequence, Union

import numpy as np

from fibre_monitor.core.config import MonitorConfig
from fibre_monitor.core.errors import (
    GenerationCancelledError,
    GenerationError,
    InvalidConfigError,
    ShapeMismatchError,
)
from fibre_monitor.core.trace_generator import ProgressiveTraceGenerator
from fibre_monitor.utils.logging import log_operation, log_performance

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# How often the join wakes up to check the cancellation token
CANCEL_POLL_INTERVAL = 0.05  # seconds

# (number_of_points, row_index) -> trace
TraceGeneratorFn = Callable[[int, int], Sequence[float]]


# =============================================================================
# Trace Set
# =============================================================================

def as_trace_array(values: Union["TraceSet", np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    """
    Coerce rows of samples into a 2-D float64 array.

    Raises:
        ShapeMismatchError: If the rows have unequal lengths or the input is
            not two dimensional
    """
    if isinstance(values, TraceSet):
        return values.values

    if isinstance(values, np.ndarray):
        array = values.astype(np.float64, copy=False)
    else:
        rows = list(values)
        if not rows:
            return np.empty((0, 0), dtype=np.float64)
        lengths = {len(row) for row in rows}
        if len(lengths) > 1:
            raise ShapeMismatchError(
                f"Trace rows have unequal lengths: {sorted(lengths)}",
                expected=(len(rows), len(rows[0])),
            )
        array = np.asarray(rows, dtype=np.float64)

    if array.ndim != 2:
        raise ShapeMismatchError(
            f"Trace set must be 2-D (rows x columns), got {array.ndim}-D",
            actual=tuple(array.shape),
        )
    return array


class TraceSet:
    """
    Immutable ordered collection of equal-length traces.

    Row ``i`` is the trace for ``time_start + i * time_step``.

    Attributes:
        values: Read-only (rows, columns) float64 array
    """

    def __init__(self, values: Union[np.ndarray, Sequence[Sequence[float]]]):
        array = np.array(as_trace_array(values), dtype=np.float64, copy=True)
        array.flags.writeable = False
        self._values = array

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def rows(self) -> int:
        """Number of traces (time steps)."""
        return self._values.shape[0]

    @property
    def columns(self) -> int:
        """Samples per trace (distance steps)."""
        return self._values.shape[1]

    @property
    def shape(self) -> tuple:
        return self._values.shape

    def __len__(self) -> int:
        return self.rows

    def __getitem__(self, index):
        return self._values[index]

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._values)

    def to_list(self) -> List[List[float]]:
        """Plain nested lists, in row order."""
        return self._values.tolist()

    def __repr__(self) -> str:
        return f"TraceSet(rows={self.rows}, columns={self.columns})"


# =============================================================================
# Builder
# =============================================================================

class TraceSetBuilder:
    """
    Concurrent fan-out / ordered fan-in trace set builder.

    Each row is generated by an independent task that owns its output
    array until the task returns. Results are collected from the futures
    list in submission order, so row order is the invocation index and
    never completion order.

    Example:
        builder = TraceSetBuilder(max_workers=8)
        trace_set = builder.build(time_steps_count=34, number_of_points=320)

        # Cancel from another thread
        cancel = threading.Event()
        ...
        cancel.set()
    """

    def __init__(
        self,
        generator: Optional[TraceGeneratorFn] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize builder.

        Args:
            generator: Callable ``(number_of_points, index) -> trace``.
                Defaults to an unseeded ProgressiveTraceGenerator.
            max_workers: Thread pool size (None = executor default)
        """
        self._generator = generator if generator is not None else ProgressiveTraceGenerator()
        self._max_workers = max_workers

    def build(
        self,
        time_steps_count: int,
        number_of_points: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> TraceSet:
        """
        Generate ``time_steps_count`` traces concurrently.

        Args:
            time_steps_count: Number of rows (> 0)
            number_of_points: Samples per row (> 0)
            cancel_event: Optional token; once set, pending tasks are
                cancelled and GenerationCancelledError is raised

        Returns:
            TraceSet with rows in index order

        Raises:
            InvalidConfigError: If a count is not positive
            GenerationError: If any task fails (first failure chained)
            GenerationCancelledError: If cancel_event was set
            ShapeMismatchError: If a task returned a trace of the wrong length
        """
        if time_steps_count <= 0:
            raise InvalidConfigError(f"time_steps_count must be > 0, got {time_steps_count}")
        if number_of_points <= 0:
            raise InvalidConfigError(f"number_of_points must be > 0, got {number_of_points}")

        log_operation(
            "build_trace_set",
            f"{time_steps_count} traces x {number_of_points} points",
            logging.DEBUG,
        )
        start_time = time.perf_counter()

        executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="TraceGenerator",
        )
        try:
            futures = [
                executor.submit(self._generate_row, index, number_of_points, cancel_event)
                for index in range(time_steps_count)
            ]
            rows = self._join(futures, cancel_event)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        values = np.empty((time_steps_count, number_of_points), dtype=np.float64)
        for index, row in enumerate(rows):
            trace = np.asarray(row, dtype=np.float64)
            if trace.shape != (number_of_points,):
                raise ShapeMismatchError(
                    f"Trace {index} has shape {trace.shape}, expected ({number_of_points},)",
                    expected=(number_of_points,),
                    actual=tuple(trace.shape),
                )
            values[index] = trace

        trace_set = TraceSet(values)
        log_performance(
            "build_trace_set",
            time.perf_counter() - start_time,
            rows=trace_set.rows,
            columns=trace_set.columns,
        )
        return trace_set

    def _generate_row(
        self,
        index: int,
        number_of_points: int,
        cancel_event: Optional[threading.Event],
    ) -> Sequence[float]:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelledError(f"Trace {index} cancelled before start", failed_index=index)
        return self._generator(number_of_points, index)

    def _join(
        self,
        futures: List[Future],
        cancel_event: Optional[threading.Event],
    ) -> List[Sequence[float]]:
        """Wait for every future; collect results in submission order."""
        pending = set(futures)
        while pending:
            if cancel_event is not None and cancel_event.is_set():
                break
            done, pending = wait(pending, timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_EXCEPTION)
            if any(not f.cancelled() and f.exception() is not None for f in done):
                break

        if cancel_event is not None and cancel_event.is_set():
            for future in futures:
                future.cancel()
            logger.info("Trace generation cancelled")
            raise GenerationCancelledError(
                "Trace generation cancelled",
                failure_count=sum(1 for f in futures if not f.done() or f.cancelled()),
            )

        failures = [
            (index, future.exception())
            for index, future in enumerate(futures)
            if future.done() and not future.cancelled() and future.exception() is not None
        ]
        if failures:
            for future in futures:
                future.cancel()
            failed_index, cause = failures[0]
            logger.error(f"Trace generation failed at row {failed_index}: {cause}")
            raise GenerationError(
                f"Trace generation failed ({len(failures)} of {len(futures)} tasks): {cause}",
                failed_index=failed_index,
                failure_count=len(failures),
            ) from cause

        return [future.result() for future in futures]


def build_trace_set(
    time_steps_count: int,
    number_of_points: int,
    *,
    generator: Optional[TraceGeneratorFn] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> TraceSet:
    """Convenience wrapper around TraceSetBuilder.build()."""
    builder = TraceSetBuilder(generator=generator, max_workers=max_workers)
    return builder.build(time_steps_count, number_of_points, cancel_event=cancel_event)


def build_from_config(
    config: MonitorConfig,
    *,
    generator: Optional[TraceGeneratorFn] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> TraceSet:
    """Build the trace set for a configuration's time and distance axes."""
    return build_trace_set(
        config.time_steps_count,
        config.optical_fibre_length_x,
        generator=generator,
        max_workers=max_workers,
        cancel_event=cancel_event,
    )
