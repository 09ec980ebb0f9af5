"""
Unit tests for axis interval synchronization.

Qt signals are delivered with direct connections on the calling thread,
so no QApplication or event loop is needed.
"""

import pytest

from fibre_monitor.core import InvalidConfigError
from fibre_monitor.gui.models import AxisInterval, AxisSyncController, SyncState


class Recorder:
    """Collects (min, max) pairs emitted by a signal."""

    def __init__(self):
        self.calls = []

    def __call__(self, minimum, maximum):
        self.calls.append((minimum, maximum))


@pytest.fixture
def axes():
    return (
        AxisInterval("a", 0, 100),
        AxisInterval("b", 0, 100),
        AxisInterval("c", 0, 100),
    )


@pytest.fixture
def controller(axes):
    controller = AxisSyncController()
    controller.link(*axes)
    return controller


class TestAxisInterval:
    """Test a single axis."""

    def test_set_interval_emits(self):
        """Test interval_changed and rescaled on a normal set."""
        axis = AxisInterval("x", 0, 10)
        changed, rescaled = Recorder(), Recorder()
        axis.interval_changed.connect(changed)
        axis.rescaled.connect(rescaled)

        assert axis.set_interval(2, 8) is True
        assert axis.interval == (2.0, 8.0)
        assert changed.calls == [(2.0, 8.0)]
        assert rescaled.calls == [(2.0, 8.0)]

    def test_silent_set_skips_rescale(self):
        """Test a silent set changes the interval without rescaling."""
        axis = AxisInterval("x", 0, 10)
        changed, rescaled = Recorder(), Recorder()
        axis.interval_changed.connect(changed)
        axis.rescaled.connect(rescaled)

        axis.set_interval(3, 4, silent=True)
        assert changed.calls == [(3.0, 4.0)]
        assert rescaled.calls == []

    def test_unchanged_interval_is_noop(self):
        """Test identical bounds emit nothing."""
        axis = AxisInterval("x", 0, 10)
        changed = Recorder()
        axis.interval_changed.connect(changed)

        assert axis.set_interval(0, 10) is False
        assert changed.calls == []

    def test_inverted_interval_rejected(self):
        """Test minimum > maximum is rejected."""
        axis = AxisInterval("x", 0, 10)
        with pytest.raises(InvalidConfigError):
            axis.set_interval(5, 1)
        assert axis.interval == (0.0, 10.0)

    def test_fit(self):
        """Test fit sets the interval to the data extent."""
        axis = AxisInterval("x", 0, 1)
        axis.fit(-5, 320)
        assert axis.interval == (-5.0, 320.0)


class TestSynchronization:
    """Test propagation across a group."""

    def test_initial_state_idle(self, controller):
        """Test the group starts idle."""
        assert controller.state is SyncState.IDLE

    def test_broadcast_to_other_axes(self, axes, controller):
        """Test B and C follow A exactly."""
        a, b, c = axes
        controller.on_interval_change(a, 10, 20)

        assert b.interval == (10.0, 20.0)
        assert c.interval == (10.0, 20.0)
        assert controller.state is SyncState.IDLE

    def test_source_not_reinvoked(self, axes, controller):
        """Test propagation does not feed back into the source axis."""
        a, b, c = axes
        a_changes = Recorder()
        a.interval_changed.connect(a_changes)

        controller.on_interval_change(a, 10, 20)

        assert a_changes.calls == []
        assert a.interval == (0.0, 100.0)

    def test_user_change_drives_sync(self, axes, controller):
        """Test a change made on an axis propagates through its signal."""
        a, b, c = axes
        b.set_interval(40, 60)

        assert a.interval == (40.0, 60.0)
        assert c.interval == (40.0, 60.0)

    def test_linked_axes_set_silently(self, axes, controller):
        """Test followers do not run their rescale side effect."""
        a, b, c = axes
        b_rescaled = Recorder()
        b.rescaled.connect(b_rescaled)

        a.set_interval(1, 2)
        assert b_rescaled.calls == []

    def test_each_follower_changes_once(self, axes, controller):
        """Test no re-entrant loop: each follower changes exactly once."""
        a, b, c = axes
        b_changes, c_changes = Recorder(), Recorder()
        b.interval_changed.connect(b_changes)
        c.interval_changed.connect(c_changes)

        a.set_interval(10, 20)

        assert b_changes.calls == [(10.0, 20.0)]
        assert c_changes.calls == [(10.0, 20.0)]

    def test_repeat_with_same_values_is_noop(self, axes, controller):
        """Test a second change with identical bounds changes nothing."""
        a, b, c = axes
        controller.on_interval_change(a, 10, 20)

        changes = Recorder()
        for axis in axes:
            axis.interval_changed.connect(changes)
        b.set_interval(10, 20)
        controller.on_interval_change(b, 10, 20)

        assert changes.calls == []
        assert [axis.interval for axis in (b, c)] == [(10.0, 20.0)] * 2

    def test_event_ignored_while_propagating(self, axes, controller):
        """Test changes arriving mid-propagation are dropped."""
        a, b, c = axes
        seen_states = []

        def on_b_changed(minimum, maximum):
            seen_states.append(controller.state)
            controller.on_interval_change(b, 999, 1000)

        b.interval_changed.connect(on_b_changed)
        controller.on_interval_change(a, 10, 20)

        assert seen_states == [SyncState.PROPAGATING]
        assert c.interval == (10.0, 20.0)

    def test_synchronized_signal(self, axes, controller):
        """Test the synchronized signal after propagation."""
        done = Recorder()
        controller.synchronized.connect(done)
        controller.on_interval_change(axes[0], 5, 6)
        assert done.calls == [(5.0, 6.0)]


class TestGuardRelease:
    """Test the guard is released on error paths."""

    def test_guard_reset_after_failing_set(self, axes, controller):
        """Test a failing silent set propagates and leaves the group idle."""
        a, b, c = axes

        with pytest.raises(InvalidConfigError):
            controller.on_interval_change(a, 20, 10)

        assert controller.state is SyncState.IDLE

        controller.on_interval_change(a, 1, 2)
        assert b.interval == (1.0, 2.0)

    def test_guard_reset_after_follower_error(self, axes, controller, monkeypatch):
        """Test an arbitrary follower exception resets the guard."""
        a, b, c = axes

        def explode(minimum, maximum, silent=False):
            raise RuntimeError("view detached")

        monkeypatch.setattr(b, "set_interval", explode)
        with pytest.raises(RuntimeError, match="view detached"):
            controller.on_interval_change(a, 1, 2)
        assert controller.state is SyncState.IDLE


    def test_signal_driven_failure_reported(self, axes, controller, monkeypatch):
        """Test a failure during signal-driven sync is reported, not raised."""
        a, b, c = axes
        failures = []
        controller.sync_failed.connect(failures.append)

        def explode(minimum, maximum, silent=False):
            raise RuntimeError("view detached")

        monkeypatch.setattr(b, "set_interval", explode)
        assert a.set_interval(1, 2) is True

        assert a.interval == (1.0, 2.0)
        assert failures == ["a: view detached"]
        assert controller.state is SyncState.IDLE

        monkeypatch.undo()
        a.set_interval(3, 4)
        assert b.interval == (3.0, 4.0)
        assert c.interval == (3.0, 4.0)


class TestLinking:
    """Test group membership."""

    def test_axes_listed(self, axes, controller):
        """Test linked axes are reported in order."""
        assert controller.axes == list(axes)

    def test_link_twice_is_idempotent(self, axes, controller):
        """Test re-linking an axis does not duplicate it."""
        controller.link(axes[0])
        assert len(controller.axes) == 3

    def test_axis_in_one_group_only(self, axes, controller):
        """Test an axis cannot join a second group."""
        other = AxisSyncController()
        with pytest.raises(InvalidConfigError):
            other.link(axes[0])

    def test_unlink(self, axes, controller):
        """Test an unlinked axis neither drives nor follows."""
        a, b, c = axes
        controller.unlink(c)

        a.set_interval(10, 20)
        assert b.interval == (10.0, 20.0)
        assert c.interval == (0.0, 100.0)

        c.set_interval(50, 60)
        assert a.interval == (10.0, 20.0)

    def test_unlinked_source_rejected(self, controller):
        """Test events from foreign axes are rejected."""
        with pytest.raises(InvalidConfigError):
            controller.on_interval_change(AxisInterval("z"), 0, 1)
