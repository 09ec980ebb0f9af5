"""
Context managers for Fibre Monitor.

Provides scoped setup/teardown with guaranteed cleanup.
"""

import logging


class SafeOperationContext:
    """
    Generic context manager for operations that need cleanup.

    The cleanup function runs on every exit path, including exceptions.
    Exceptions raised inside the block are never suppressed.

    Attributes:
        setup_func: Function to call on entry
        cleanup_func: Function to call on exit
        name: Operation name for logging

    Example:
        >>> with SafeOperationContext(controller.begin, controller.end, "axis sync"):
        ...     propagate()
    """

    def __init__(self, setup_func, cleanup_func, name: str = "operation"):
        """
        Initialize safe operation context.

        Args:
            setup_func: Function to call on entry (its result is returned by __enter__)
            cleanup_func: Function to call on exit
            name: Operation name for logging
        """
        self.setup_func = setup_func
        self.cleanup_func = cleanup_func
        self.name = name
        self.context_data = None

    def __enter__(self):
        try:
            logging.debug(f"Starting {self.name}")
            self.context_data = self.setup_func()
            return self.context_data
        except Exception as e:
            logging.error(f"Failed to start {self.name}: {e}")
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            logging.debug(f"Cleaning up {self.name}")
            self.cleanup_func()
        except Exception as e:
            logging.error(f"Cleanup failed for {self.name}: {e}")

        # Don't suppress exceptions
        return False
