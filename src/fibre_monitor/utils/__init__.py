"""
Utility functions for Fibre Monitor.

This module provides logging setup and helpers, and context managers
with guaranteed cleanup.
"""

from fibre_monitor.utils.logging import (
    setup_logging,
    log_system_info,
    log_operation,
    log_performance,
    log_config,
)

from fibre_monitor.utils.context_managers import (
    SafeOperationContext,
)

__all__ = [
    # Logging
    "setup_logging",
    "log_system_info",
    "log_operation",
    "log_performance",
    "log_config",

    # Context managers
    "SafeOperationContext",
]
