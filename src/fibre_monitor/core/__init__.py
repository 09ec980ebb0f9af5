"""
Core data model for Fibre Monitor.

This module provides configuration, synthetic trace generation, the trace
set builder, profile aggregation, the heat map grid model and the
intensity colour lookup table.
"""

from fibre_monitor.core.errors import (
    FibreMonitorError,
    InvalidConfigError,
    GenerationError,
    GenerationCancelledError,
    ShapeMismatchError,
    EmptyInputError,
    GridIndexError,
)

from fibre_monitor.core.config import (
    MonitorConfig,
    DEFAULT_CONFIG,
    load_config,
    steps_between,
)

from fibre_monitor.core.trace_generator import (
    ProgressiveTraceGenerator,
    generate_trace,
    INTENSITY_SCALE,
)

from fibre_monitor.core.trace_set import (
    TraceSet,
    TraceSetBuilder,
    build_trace_set,
    build_from_config,
)

from fibre_monitor.core.profile import (
    Profile,
    aggregate_profile,
)

from fibre_monitor.core.lut import (
    RGBA,
    ColorStep,
    LUT,
    DEFAULT_INTENSITY_LUT,
)

from fibre_monitor.core.heatmap_grid import (
    DataOrder,
    GridCoordinateMapping,
    HeatmapGrid,
)

from fibre_monitor.core.pipeline import (
    DashboardData,
    prepare_dashboard_data,
)

__all__ = [
    # Errors
    "FibreMonitorError",
    "InvalidConfigError",
    "GenerationError",
    "GenerationCancelledError",
    "ShapeMismatchError",
    "EmptyInputError",
    "GridIndexError",

    # Configuration
    "MonitorConfig",
    "DEFAULT_CONFIG",
    "load_config",
    "steps_between",

    # Generation
    "ProgressiveTraceGenerator",
    "generate_trace",
    "INTENSITY_SCALE",
    "TraceSet",
    "TraceSetBuilder",
    "build_trace_set",
    "build_from_config",

    # Derived views
    "Profile",
    "aggregate_profile",
    "DataOrder",
    "GridCoordinateMapping",
    "HeatmapGrid",

    # Colour lookup
    "RGBA",
    "ColorStep",
    "LUT",
    "DEFAULT_INTENSITY_LUT",

    # Pipeline
    "DashboardData",
    "prepare_dashboard_data",
]
