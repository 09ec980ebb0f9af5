"""
GUI data models for Fibre Monitor.

This module provides the dashboard data model and the axis interval
synchronization used by the stacked charts.
"""

from fibre_monitor.gui.models.axis_sync import (
    AxisInterval,
    AxisSyncController,
    SyncState,
)

from fibre_monitor.gui.models.dashboard_model import (
    DashboardDataModel,
)

__all__ = [
    'AxisInterval',
    'AxisSyncController',
    'SyncState',
    'DashboardDataModel',
]
