"""
Main entry point for Fibre Monitor.

Runs the data pipeline headless for a configuration and prints a summary
of the generated dashboard data.
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np
from rich.console import Console
from rich.table import Table

from fibre_monitor.core.config import DEFAULT_CONFIG, load_config
from fibre_monitor.core.errors import FibreMonitorError
from fibre_monitor.core.pipeline import DashboardData, prepare_dashboard_data
from fibre_monitor.utils.logging import log_config, setup_logging


def build_summary(data: DashboardData) -> Table:
    """Summary table: sizes, profile peak and cells per LUT band."""
    table = Table(title="Fibre Monitor - Generated Data")
    table.add_column("Quantity")
    table.add_column("Value", justify="right")

    peak_x, peak_y = data.profile.peak
    table.add_row("Traces (time steps)", str(data.trace_set.rows))
    table.add_row("Samples per trace", str(data.trace_set.columns))
    table.add_row("Max intensity", f"{float(data.trace_set.values.max()):.1f}")
    table.add_row("Profile peak", f"{peak_y:.1f} @ {peak_x:.0f} m")

    thresholds = np.array([step.threshold for step in data.lut.steps])
    band_index = np.clip(
        np.searchsorted(thresholds, data.trace_set.values, side='right') - 1,
        0, len(thresholds) - 1,
    )
    counts = np.bincount(band_index.ravel(), minlength=len(thresholds))
    for step, count in zip(data.lut.steps, counts):
        table.add_row(f"Cells >= {step.threshold:g}", str(int(count)))
    return table


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for Fibre Monitor.

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(
        prog="fibre-monitor",
        description="Generate synthetic fibre monitoring data and summarize it",
    )
    parser.add_argument("--config", help="JSON file with distance/time axis parameters")
    parser.add_argument("--log-file", default="fibre_monitor.log", help="Log file path")
    parser.add_argument("--workers", type=int, default=None, help="Generation thread count")
    args = parser.parse_args(argv)

    setup_logging(args.log_file)
    console = Console()

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
        log_config(config)
        data = prepare_dashboard_data(config, max_workers=args.workers)
    except FibreMonitorError as e:
        logging.error(f"Fibre Monitor failed: {e}")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    console.print(build_summary(data))
    return 0


if __name__ == "__main__":
    sys.exit(main())
