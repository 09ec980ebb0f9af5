"""
Logging configuration for Fibre Monitor.

File logging for the full run history, a console handler for progress, and
helpers that give generation and derivation steps a uniform log format.
"""

import logging
import sys
import platform
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Console handler installed by setup_logging; replaced rather than
# duplicated on repeated calls
_console_handler: Optional[logging.Handler] = None


def setup_logging(log_file: str = "fibre_monitor.log", level: int = logging.DEBUG) -> None:
    """
    Configure logging for a Fibre Monitor run.

    Trace generation, profile and heat map derivation are logged to
    ``log_file`` at ``level``; INFO and above is echoed to stdout. Calling
    this again (e.g. once per CLI invocation in one process) swaps the
    console handler instead of stacking a second one.

    Args:
        log_file: Path to log file; missing parent directories are created
        level: Root logging level (default: logging.DEBUG)

    Example:
        >>> setup_logging("logs/run.log")
        >>> logging.getLogger("fibre_monitor").info("Run started")
    """
    global _console_handler

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        filename=log_file,
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )

    root = logging.getLogger()
    if _console_handler is not None:
        root.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler(sys.stdout)
    _console_handler.setLevel(logging.INFO)
    _console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
    root.addHandler(_console_handler)

    log_system_info()


def log_system_info() -> None:
    """
    Log the platform and the numeric and Qt library versions.

    Generation results depend on numpy's random generator, so its version
    is part of every run log.
    """
    try:
        import numpy
        from PyQt6.QtCore import QT_VERSION_STR, PYQT_VERSION_STR

        logging.info("=" * 60)
        logging.info("Fibre Monitor - System Information")
        logging.info("=" * 60)
        logging.info(f"Platform: {platform.system()} {platform.release()} ({platform.machine()})")
        logging.info(f"Python version: {sys.version.split()[0]}")
        logging.info(f"numpy version: {numpy.__version__}")
        logging.info(f"Qt version: {QT_VERSION_STR} (PyQt {PYQT_VERSION_STR})")
        logging.info("=" * 60)

    except Exception as e:
        logging.error(f"Failed to log system info: {e}")


def log_operation(operation: str, details: str, level: int = logging.INFO) -> None:
    """
    Log one pipeline step as ``"<operation>: <details>"``.

    Example:
        >>> log_operation("build_trace_set", "34 traces x 320 points", logging.DEBUG)
    """
    logging.log(level, f"{operation}: {details}")


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log the duration of a pipeline step with its sizes.

    When ``rows`` and ``columns`` (or ``traces`` and ``samples``) are given,
    the sample throughput is appended.

    Args:
        operation: Pipeline step name
        duration: Wall time in seconds
        **metrics: Sizes of the produced data

    Example:
        >>> log_performance("build_trace_set", 0.12, rows=34, columns=320)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    rows = metrics.get("rows", metrics.get("traces"))
    columns = metrics.get("columns", metrics.get("samples"))
    if rows is not None and columns is not None and duration > 0:
        metrics_str += f", samples_per_second={rows * columns / duration:.0f}"
    logging.info(f"Performance - {operation}: {duration:.2f}s, {metrics_str}")


def log_config(config) -> None:
    """
    Log the axis configuration and derived sizes.

    Args:
        config: MonitorConfig object
    """
    logging.info(
        f"Distance axis: {config.distance_start} - {config.distance_end} m "
        f"(step {config.distance_step} m, {config.optical_fibre_length_x} samples)"
    )
    logging.info(
        f"Time axis: {config.time_start:.0f} - {config.time_end:.0f} ms "
        f"(step {config.time_step} ms, {config.time_steps_count} traces)"
    )
