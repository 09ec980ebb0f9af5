"""
End-to-end data preparation for the fibre monitoring dashboard.

Generates the trace set for a configuration, then derives the distance
profile and the heat map grid from it. The result carries everything the
rendering layer needs: area series points, grid options and LUT steps.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fibre_monitor.core.config import MonitorConfig
from fibre_monitor.core.heatmap_grid import DataOrder, HeatmapGrid
from fibre_monitor.core.lut import DEFAULT_INTENSITY_LUT, LUT
from fibre_monitor.core.profile import Profile, aggregate_profile
from fibre_monitor.core.trace_set import TraceGeneratorFn, TraceSet, build_from_config
from fibre_monitor.utils.logging import log_performance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardData:
    """
    Derived data for both dashboard views.

    Attributes:
        config: Configuration the data was generated for
        trace_set: Generated traces (rows = time)
        profile: Intensity sum per distance
        heatmap: Trace set bound to the distance/time mapping
        lut: Colour table for the heat map
    """
    config: MonitorConfig
    trace_set: TraceSet
    profile: Profile
    heatmap: HeatmapGrid
    lut: LUT

    def profile_points(self) -> List[Dict[str, float]]:
        return self.profile.points()

    def heatmap_payload(self) -> Dict[str, Any]:
        return self.heatmap.to_payload()

    def lut_payload(self) -> Dict[str, Any]:
        return self.lut.to_payload()


def prepare_dashboard_data(
    config: MonitorConfig,
    *,
    lut: LUT = DEFAULT_INTENSITY_LUT,
    generator: Optional[TraceGeneratorFn] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> DashboardData:
    """
    Generate traces and derive the profile and heat map.

    Raises:
        GenerationError: If trace generation fails or is cancelled
        ShapeMismatchError: If a generator returns traces of the wrong length
    """
    start_time = time.perf_counter()

    trace_set = build_from_config(
        config,
        generator=generator,
        max_workers=max_workers,
        cancel_event=cancel_event,
    )
    profile = aggregate_profile(trace_set, config.distance_start, config.distance_step)
    heatmap = HeatmapGrid.from_config(trace_set, config, order=DataOrder.ROWS)

    log_performance(
        "prepare_dashboard_data",
        time.perf_counter() - start_time,
        traces=trace_set.rows,
        samples=trace_set.columns,
    )
    return DashboardData(
        config=config,
        trace_set=trace_set,
        profile=profile,
        heatmap=heatmap,
        lut=lut,
    )
