"""
Base worker class for background data generation.

Workers are QObjects moved to a QThread; they report back through signals
so that results arrive on the thread that owns the receiving model.
"""

import logging
import threading
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


class BaseWorker(QObject):
    """
    Base class for all background workers.

    This class provides:
    - Operation completion/failure notification
    - Cancellation through a shared threading.Event token
    - A finished signal for thread cleanup

    Example:
        thread = QThread()
        worker = GenerationWorker(config)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.operation_completed.connect(handle_result)
        worker.operation_failed.connect(handle_error)
        thread.start()
    """

    # Carries the result object (type varies by worker)
    operation_completed = pyqtSignal(object)

    # Carries error message string
    operation_failed = pyqtSignal(str)

    # Emitted after completion or failure; used to trigger thread cleanup
    finished = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None):
        """
        Initialize base worker.

        Args:
            parent: Optional parent QObject
        """
        super().__init__(parent)
        self._cancel_event = threading.Event()
        self._running = False

    @property
    def cancel_event(self) -> threading.Event:
        """Token checked by the operation; set by cancel()."""
        return self._cancel_event

    def cancel(self) -> None:
        """
        Request cancellation of the operation.

        The running operation notices the token at its next check and
        stops; the failure is reported through operation_failed.
        """
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def is_running(self) -> bool:
        return self._running

    def run(self) -> None:
        """
        Execute the worker's operation.

        Subclasses must override this method. The implementation should
        emit operation_completed on success or operation_failed on error
        (the _emit_* helpers also emit finished).
        """
        raise NotImplementedError("Subclasses must implement run()")

    def _emit_completed(self, result: object) -> None:
        self._running = False
        self.operation_completed.emit(result)
        self.finished.emit()

    def _emit_failed(self, error_message: str) -> None:
        self._running = False
        self.operation_failed.emit(error_message)
        self.finished.emit()
