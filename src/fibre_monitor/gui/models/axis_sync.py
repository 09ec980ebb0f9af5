"""
Axis interval synchronization for stacked dashboard views.

Each view owns an AxisInterval. An AxisSyncController links several of
them so that they always show the same interval: whenever one changes,
every other linked axis is set to exactly the same bounds.

Setting the linked axes makes them emit interval_changed too, which would
feed straight back into the controller. The controller therefore has two
states per group, IDLE and PROPAGATING, and ignores every change that
arrives while it is propagating. The state always returns to IDLE, even
when setting one of the axes raises.
"""

import logging
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from fibre_monitor.core.errors import InvalidConfigError
from fibre_monitor.utils.context_managers import SafeOperationContext

logger = logging.getLogger(__name__)


# =============================================================================
# Axis Interval
# =============================================================================

class AxisInterval(QObject):
    """
    Visible interval of one view axis.

    Signals:
        interval_changed(float, float): Emitted on every actual change
        rescaled(float, float): Emitted on non-silent changes only; views
            use it to refit dependent ranges

    Example:
        axis = AxisInterval("distance", 0, 3200)
        axis.interval_changed.connect(on_change)
        axis.set_interval(100, 500)
    """

    interval_changed = pyqtSignal(float, float)
    rescaled = pyqtSignal(float, float)

    def __init__(
        self,
        name: str = "",
        minimum: float = 0.0,
        maximum: float = 1.0,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        if minimum > maximum:
            raise InvalidConfigError(f"Axis '{name}': minimum {minimum} > maximum {maximum}")
        self._name = name
        self._minimum = float(minimum)
        self._maximum = float(maximum)
        self._sync_controller: Optional["AxisSyncController"] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def minimum(self) -> float:
        return self._minimum

    @property
    def maximum(self) -> float:
        return self._maximum

    @property
    def interval(self) -> Tuple[float, float]:
        return (self._minimum, self._maximum)

    def set_interval(self, minimum: float, maximum: float, silent: bool = False) -> bool:
        """
        Set the visible interval.

        Args:
            minimum: New lower bound
            maximum: New upper bound
            silent: Skip the rescaled side effect (interval_changed is
                still emitted)

        Returns:
            True if the interval changed

        Raises:
            InvalidConfigError: If minimum > maximum
        """
        minimum = float(minimum)
        maximum = float(maximum)
        if minimum > maximum:
            raise InvalidConfigError(f"Axis '{self._name}': minimum {minimum} > maximum {maximum}")

        if (minimum, maximum) == (self._minimum, self._maximum):
            return False

        self._minimum = minimum
        self._maximum = maximum
        self.interval_changed.emit(minimum, maximum)
        if not silent:
            self.rescaled.emit(minimum, maximum)
        return True

    def fit(self, data_minimum: float, data_maximum: float) -> bool:
        """Fit the interval to a data extent."""
        return self.set_interval(data_minimum, data_maximum)

    def __repr__(self) -> str:
        return f"AxisInterval({self._name!r}, {self._minimum}, {self._maximum})"


# =============================================================================
# Sync Controller
# =============================================================================

class SyncState(Enum):
    """Propagation state of a synchronization group."""
    IDLE = auto()
    PROPAGATING = auto()


class AxisSyncController(QObject):
    """
    Keeps a group of axes on identical intervals.

    Single-writer broadcast: the axis that changed is the source and every
    other linked axis is forced to its exact bounds.

    Signals:
        synchronized(float, float): Emitted after a change was propagated
        sync_failed(str): Emitted when propagating a change made through an
            axis signal fails; the error is logged and not re-raised

    Example:
        controller = AxisSyncController()
        controller.link(profile_x, heatmap_x)
        heatmap_x.set_interval(100, 500)   # profile_x follows
    """

    synchronized = pyqtSignal(float, float)
    sync_failed = pyqtSignal(str)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._links: List[Tuple[AxisInterval, Callable[[float, float], None]]] = []
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def axes(self) -> List[AxisInterval]:
        return [axis for axis, _ in self._links]

    def is_linked(self, axis: AxisInterval) -> bool:
        return any(linked is axis for linked, _ in self._links)

    def link(self, *axes: AxisInterval) -> None:
        """
        Add axes to the group.

        Raises:
            InvalidConfigError: If an axis already belongs to another group
        """
        for axis in axes:
            if self.is_linked(axis):
                continue
            owner = getattr(axis, "_sync_controller", None)
            if owner is not None and owner is not self:
                raise InvalidConfigError(f"{axis!r} is already linked to another group")

            def handler(minimum: float, maximum: float, source: AxisInterval = axis) -> None:
                self._on_axis_signal(source, minimum, maximum)

            axis.interval_changed.connect(handler)
            axis._sync_controller = self
            self._links.append((axis, handler))
            logger.debug(f"Linked {axis!r} ({len(self._links)} axes in group)")

    def unlink(self, axis: AxisInterval) -> None:
        """Remove an axis from the group; unknown axes are ignored."""
        for index, (linked, handler) in enumerate(self._links):
            if linked is axis:
                linked.interval_changed.disconnect(handler)
                linked._sync_controller = None
                del self._links[index]
                logger.debug(f"Unlinked {axis!r}")
                return

    def on_interval_change(self, source: AxisInterval, new_min: float, new_max: float) -> None:
        """
        Propagate a change of ``source`` to every other linked axis.

        Ignored while a propagation is in progress. Errors from setting an
        axis propagate to the caller after the state returns to IDLE.

        Raises:
            InvalidConfigError: If ``source`` is not linked to this group
        """
        if self._state is SyncState.PROPAGATING:
            return
        if not self.is_linked(source):
            raise InvalidConfigError(f"{source!r} is not linked to this group")

        with SafeOperationContext(self._begin_propagation, self._end_propagation, "axis sync"):
            for axis, _ in self._links:
                if axis is not source:
                    axis.set_interval(new_min, new_max, silent=True)

        self.synchronized.emit(float(new_min), float(new_max))

    def _on_axis_signal(self, source: AxisInterval, new_min: float, new_max: float) -> None:
        """
        Slot for linked axis signals.

        Exceptions must not escape a Qt slot, so failures are logged and
        reported through sync_failed. Direct on_interval_change calls still
        raise to their caller.
        """
        try:
            self.on_interval_change(source, new_min, new_max)
        except Exception as e:
            logger.exception(f"Failed to synchronize {source!r} to ({new_min}, {new_max})")
            self.sync_failed.emit(f"{source.name}: {e}")

    def _begin_propagation(self) -> None:
        self._state = SyncState.PROPAGATING

    def _end_propagation(self) -> None:
        self._state = SyncState.IDLE
