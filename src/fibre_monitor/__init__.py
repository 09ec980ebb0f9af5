"""
Fibre Monitor - distributed optical fibre sensing data model.

Generates synthetic intensity traces along an optical fibre, derives the
distance profile and the heat map grid, colours intensities through a
lookup table and keeps the axes of the stacked dashboard views in sync.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from fibre_monitor.core import (
    MonitorConfig,
    DEFAULT_CONFIG,
    load_config,
    TraceSet,
    build_trace_set,
    aggregate_profile,
    Profile,
    DataOrder,
    GridCoordinateMapping,
    HeatmapGrid,
    LUT,
    ColorStep,
    RGBA,
    DEFAULT_INTENSITY_LUT,
    DashboardData,
    prepare_dashboard_data,
)

__all__ = [
    "__version__",

    # Configuration
    "MonitorConfig",
    "DEFAULT_CONFIG",
    "load_config",

    # Data model
    "TraceSet",
    "build_trace_set",
    "aggregate_profile",
    "Profile",
    "DataOrder",
    "GridCoordinateMapping",
    "HeatmapGrid",

    # Colour lookup
    "LUT",
    "ColorStep",
    "RGBA",
    "DEFAULT_INTENSITY_LUT",

    # Pipeline
    "DashboardData",
    "prepare_dashboard_data",
]
