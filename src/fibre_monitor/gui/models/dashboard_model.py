"""
Dashboard data model for the fibre monitoring views.

Owns the generated data, the shared distance axis group and the background
generation thread. Views connect to its signals and never touch the
generation machinery directly.
"""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from fibre_monitor.core.config import DEFAULT_CONFIG, MonitorConfig
from fibre_monitor.core.lut import DEFAULT_INTENSITY_LUT, LUT
from fibre_monitor.core.pipeline import DashboardData, prepare_dashboard_data
from fibre_monitor.core.trace_set import TraceGeneratorFn
from fibre_monitor.gui.models.axis_sync import AxisInterval, AxisSyncController
from fibre_monitor.gui.workers.generation_worker import GenerationWorker

logger = logging.getLogger(__name__)


# Time to wait for the generation thread during shutdown
WORKER_SHUTDOWN_TIMEOUT_MS = 5000


class DashboardDataModel(QObject):
    """
    Model behind the profile chart and the heat map.

    The two distance axes (profile X and heat map X) are linked in one
    AxisSyncController. The time axis and the intensity-sum axis are
    independent.

    Signals:
        generation_started(): Background generation began
        data_ready(object): DashboardData available
        error_occurred(str): Generation failed or was cancelled
    """

    generation_started = pyqtSignal()
    data_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        config: MonitorConfig = DEFAULT_CONFIG,
        lut: LUT = DEFAULT_INTENSITY_LUT,
        generator: Optional[TraceGeneratorFn] = None,
        max_workers: Optional[int] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._config = config
        self._lut = lut
        self._generator = generator
        self._max_workers = max_workers
        self._data: Optional[DashboardData] = None

        self._worker: Optional[GenerationWorker] = None
        self._thread: Optional[QThread] = None

        # Distance axes of both charts share one interval
        self.profile_axis_x = AxisInterval("profile_distance", config.distance_start, config.distance_end)
        self.heatmap_axis_x = AxisInterval("heatmap_distance", config.distance_start, config.distance_end)
        self.heatmap_axis_y = AxisInterval("heatmap_time", 0.0, config.time_end - config.time_start)
        self.profile_axis_y = AxisInterval("profile_intensity_sum", 0.0, 1.0)

        self.distance_sync = AxisSyncController(self)
        self.distance_sync.link(self.profile_axis_x, self.heatmap_axis_x)

    # =========================================================================
    # Public API - Data Access
    # =========================================================================

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def lut(self) -> LUT:
        return self._lut

    @property
    def data(self) -> Optional[DashboardData]:
        """Last generated data, None until generation completes."""
        return self._data

    def is_loading(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    # =========================================================================
    # Public API - Generation
    # =========================================================================

    def load_sync(self) -> DashboardData:
        """
        Generate data on the calling thread.

        Raises:
            GenerationError: If generation fails
        """
        data = prepare_dashboard_data(
            self._config,
            lut=self._lut,
            generator=self._generator,
            max_workers=self._max_workers,
        )
        self._on_generation_complete(data)
        return data

    def load_async(self) -> None:
        """
        Generate data on a background QThread.

        Emits data_ready or error_occurred when done. Ignored if a
        generation is already running.
        """
        if self.is_loading():
            logger.debug("Generation already running")
            return

        self._thread = QThread()
        self._worker = GenerationWorker(
            self._config,
            lut=self._lut,
            generator=self._generator,
            max_workers=self._max_workers,
        )
        self._worker.moveToThread(self._thread)

        self._thread.started.connect(self._worker.run)
        self._worker.operation_completed.connect(self._on_generation_complete)
        self._worker.operation_failed.connect(self._on_generation_failed)
        self._worker.finished.connect(self._on_worker_finished)

        self.generation_started.emit()
        self._thread.start()

    def cancel(self) -> None:
        """Cancel a running background generation."""
        if self._worker is not None:
            self._worker.cancel()

    def shutdown(self) -> None:
        """Cancel any pending generation and wait for the thread to exit."""
        self.cancel()
        self._cleanup_worker()

    # =========================================================================
    # Internal
    # =========================================================================

    def _on_generation_complete(self, data: DashboardData) -> None:
        self._data = data
        self._fit_axes(data)
        self.data_ready.emit(data)

    def _on_generation_failed(self, error: str) -> None:
        logger.error(f"Dashboard data generation failed: {error}")
        self.error_occurred.emit(error)

    def _on_worker_finished(self) -> None:
        self._cleanup_worker()

    def _cleanup_worker(self) -> None:
        """Stop the generation thread and drop the worker references."""
        if self._thread is not None and self._thread.isRunning():
            self._thread.quit()
            if not self._thread.wait(WORKER_SHUTDOWN_TIMEOUT_MS):
                logger.warning("Generation thread did not stop within timeout")
        self._thread = None
        self._worker = None

    def _fit_axes(self, data: DashboardData) -> None:
        """Fit every axis to the new data; the distance fit propagates."""
        x_min, x_max, y_min, y_max = data.heatmap.mapping.extent
        self.heatmap_axis_x.fit(x_min, x_max)
        self.heatmap_axis_y.fit(y_min, y_max)
        self.profile_axis_y.fit(0.0, float(data.profile.ys.max()))
