"""
Unit tests for the concurrent trace set builder.

Tests ordered fan-in, all-or-nothing failure, cancellation and shape
checks using stub generators.
"""

import threading
import time

import numpy as np
import pytest

from fibre_monitor.core import (
    GenerationCancelledError,
    GenerationError,
    InvalidConfigError,
    ShapeMismatchError,
    TraceSet,
    TraceSetBuilder,
    build_from_config,
    build_trace_set,
)
from tests.fixtures import (
    BlockingGenerator,
    ConstantGenerator,
    FailingGenerator,
    ReverseDelayGenerator,
    WrongLengthGenerator,
)


class TestBuildShape:
    """Test trace set dimensions."""

    def test_rows_and_columns(self):
        """Test the trace set has time_steps_count rows of number_of_points."""
        trace_set = build_trace_set(7, 25)

        assert len(trace_set) == 7
        assert trace_set.shape == (7, 25)
        assert all(len(row) == 25 for row in trace_set)

    def test_all_samples_non_negative(self):
        """Test the default generator's absolute-value postcondition."""
        trace_set = build_trace_set(10, 100)
        assert (trace_set.values >= 0).all()

    def test_from_config(self, small_config):
        """Test building from a configuration gives a 3 x 10 set."""
        trace_set = build_from_config(small_config)
        assert trace_set.shape == (3, 10)

    def test_trace_set_is_read_only(self):
        """Test the built values cannot be modified."""
        trace_set = build_trace_set(2, 3, generator=ConstantGenerator())
        with pytest.raises(ValueError):
            trace_set.values[0, 0] = 99.0

    @pytest.mark.parametrize("rows,points", [(0, 10), (10, 0), (-1, 5)])
    def test_invalid_counts(self, rows, points):
        """Test non-positive counts are rejected."""
        with pytest.raises(InvalidConfigError):
            build_trace_set(rows, points)


class TestOrdering:
    """Test that row order is submission order."""

    def test_rows_in_index_order(self):
        """Test row i comes from invocation i."""
        trace_set = build_trace_set(5, 4, generator=ConstantGenerator(10.0))
        assert [row[0] for row in trace_set] == [10.0, 11.0, 12.0, 13.0, 14.0]

    def test_order_preserved_under_reverse_completion(self):
        """Test out-of-order completion does not reorder rows."""
        generator = ReverseDelayGenerator(rows=6, delay=0.02)
        trace_set = build_trace_set(6, 3, generator=generator, max_workers=6)

        assert generator.completion_order != sorted(generator.completion_order)
        assert [row[0] for row in trace_set] == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]


class TestFailure:
    """Test aggregate failure handling."""

    def test_single_failure_raises_generation_error(self):
        """Test one failing task fails the whole build."""
        with pytest.raises(GenerationError) as exc_info:
            build_trace_set(8, 5, generator=FailingGenerator({3}))

        error = exc_info.value
        assert error.failed_index == 3
        assert error.failure_count >= 1
        assert isinstance(error.__cause__, RuntimeError)

    def test_multiple_failures_single_error(self):
        """Test many failing tasks still surface as one error."""
        with pytest.raises(GenerationError) as exc_info:
            build_trace_set(6, 5, generator=FailingGenerator({0, 1, 2, 3, 4, 5}), max_workers=1)
        assert exc_info.value.failed_index == 0

    def test_failure_is_not_cancellation(self):
        """Test ordinary failures are not reported as cancellations."""
        with pytest.raises(GenerationError) as exc_info:
            build_trace_set(3, 5, generator=FailingGenerator({1}))
        assert not isinstance(exc_info.value, GenerationCancelledError)

    def test_wrong_length_row(self):
        """Test a row of the wrong length raises ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError) as exc_info:
            build_trace_set(4, 10, generator=WrongLengthGenerator(bad_row=2))
        assert exc_info.value.actual == (11,)


class TestCancellation:
    """Test the cancellation token."""

    def test_cancel_before_start(self):
        """Test a pre-set token cancels the build."""
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(GenerationCancelledError):
            build_trace_set(5, 5, cancel_event=cancel)

    def test_cancel_during_generation(self):
        """Test setting the token while tasks are blocked."""
        generator = BlockingGenerator()
        cancel = threading.Event()

        def cancel_soon():
            generator.started.wait(5.0)
            cancel.set()
            time.sleep(0.1)
            generator.release.set()

        canceller = threading.Thread(target=cancel_soon)
        canceller.start()
        try:
            with pytest.raises(GenerationCancelledError):
                build_trace_set(20, 5, generator=generator, max_workers=2, cancel_event=cancel)
        finally:
            generator.release.set()
            canceller.join()


class TestTraceSet:
    """Test the TraceSet container."""

    def test_from_rows(self):
        """Test construction from nested lists."""
        trace_set = TraceSet([[1, 2, 3], [4, 5, 6]])
        assert trace_set.rows == 2
        assert trace_set.columns == 3
        assert trace_set.to_list() == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]

    def test_ragged_rows_rejected(self):
        """Test unequal row lengths raise ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError):
            TraceSet([[1, 2, 3], [4, 5]])

    def test_one_dimensional_rejected(self):
        """Test a flat array is not a trace set."""
        with pytest.raises(ShapeMismatchError):
            TraceSet(np.arange(5.0))

    def test_copy_on_construction(self):
        """Test later changes to the source array do not leak in."""
        source = np.ones((2, 2))
        trace_set = TraceSet(source)
        source[0, 0] = 5.0
        assert trace_set[0][0] == 1.0

    def test_builder_reusable(self):
        """Test one builder can build several trace sets."""
        builder = TraceSetBuilder(generator=ConstantGenerator(), max_workers=2)
        assert builder.build(2, 3).shape == (2, 3)
        assert builder.build(4, 1).shape == (4, 1)
