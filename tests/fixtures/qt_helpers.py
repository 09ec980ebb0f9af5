"""
Event loop helpers for tests that cross Qt thread boundaries.
"""

import time


def process_events_until(app, predicate, timeout: float = 5.0) -> bool:
    """
    Pump the Qt event queue until ``predicate()`` is true or time runs out.

    Returns:
        The final value of ``predicate()``
    """
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    app.processEvents()
    return predicate()
