"""
Background workers for Fibre Monitor.

Provides QObject workers that run data generation on a QThread.
"""

from fibre_monitor.gui.workers.base_worker import BaseWorker
from fibre_monitor.gui.workers.generation_worker import GenerationWorker

__all__ = [
    "BaseWorker",
    "GenerationWorker",
]
