"""
Test fixtures for Fibre Monitor.

Provides stub trace generators and data builders for testing without
random data.
"""

from tests.fixtures.stub_generators import (
    ConstantGenerator,
    ReverseDelayGenerator,
    FailingGenerator,
    WrongLengthGenerator,
    BlockingGenerator,
    make_trace_rows,
)
from tests.fixtures.qt_helpers import process_events_until

__all__ = [
    "ConstantGenerator",
    "ReverseDelayGenerator",
    "FailingGenerator",
    "WrongLengthGenerator",
    "BlockingGenerator",
    "make_trace_rows",
    "process_events_until",
]
