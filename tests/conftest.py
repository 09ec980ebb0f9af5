"""
Shared pytest fixtures for Fibre Monitor.
"""

import pytest

from fibre_monitor.core import MonitorConfig


@pytest.fixture
def small_config():
    """10 distance samples x 3 time steps."""
    return MonitorConfig(
        distance_step=10,
        distance_start=0,
        distance_end=100,
        time_step=1000,
        time_start=0,
        time_end=3000,
    )


@pytest.fixture(scope="session")
def qapp():
    """Core application so queued signals from worker threads are delivered."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app
