"""
Background trace generation worker.

Runs the dashboard data pipeline off the GUI thread and reports the
resulting DashboardData through operation_completed.
"""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from fibre_monitor.core.config import MonitorConfig
from fibre_monitor.core.errors import FibreMonitorError, GenerationCancelledError
from fibre_monitor.core.lut import DEFAULT_INTENSITY_LUT, LUT
from fibre_monitor.core.pipeline import prepare_dashboard_data
from fibre_monitor.core.trace_set import TraceGeneratorFn
from fibre_monitor.gui.workers.base_worker import BaseWorker

logger = logging.getLogger(__name__)


class GenerationWorker(BaseWorker):
    """
    Worker that generates and derives all dashboard data.

    Signals:
        generation_started(int, int): Rows and columns about to be generated
        operation_completed(object): DashboardData
        operation_failed(str): Error message (including cancellation)
    """

    generation_started = pyqtSignal(int, int)

    def __init__(
        self,
        config: MonitorConfig,
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

    def run(self) -> None:
        """Generate the data; always ends with finished."""
        self._running = True
        self.generation_started.emit(
            self._config.time_steps_count,
            self._config.optical_fibre_length_x,
        )

        try:
            data = prepare_dashboard_data(
                self._config,
                lut=self._lut,
                generator=self._generator,
                max_workers=self._max_workers,
                cancel_event=self._cancel_event,
            )
        except GenerationCancelledError:
            logger.info("Generation cancelled")
            self._emit_failed("Operation cancelled by user")
            return
        except FibreMonitorError as e:
            logger.error(f"Generation failed: {e}")
            self._emit_failed(str(e))
            return

        self._emit_completed(data)
