"""Tests for the inactivity monitor and its scheduler."""
import asyncio
from unittest.mock import MagicMock

from namsan_portal.client import (ActivityEventBus, ActivitySignal,
                                  InactivityMonitor, LoopScheduler,
                                  MonitorState)

HOUR = 60 * 60


def make_monitor(scheduler, timeout=HOUR):
    on_expire = MagicMock()
    return InactivityMonitor(on_expire, timeout_seconds=timeout, scheduler=scheduler), on_expire


class TestExpiry:
    def test_expires_once_after_an_hour_without_activity(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)
        monitor.start()

        scheduler.advance(HOUR - 1)
        on_expire.assert_not_called()

        scheduler.advance(1)
        on_expire.assert_called_once_with()
        assert monitor.state is MonitorState.SIGNED_OUT
        assert not monitor.armed

        scheduler.advance(10 * HOUR)
        on_expire.assert_called_once_with()

    def test_activity_restarts_the_countdown(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)
        monitor.start()

        scheduler.advance(HOUR - 60)
        monitor.record_activity(ActivitySignal.KEY_DOWN)
        scheduler.advance(HOUR - 60)
        on_expire.assert_not_called()

        scheduler.advance(60)
        on_expire.assert_called_once_with()

    def test_each_activity_leaves_a_single_pending_timer(self, scheduler):
        monitor, _ = make_monitor(scheduler)
        monitor.start()
        for signal in ActivitySignal:
            monitor.record_activity(signal)

        assert len(scheduler.pending()) == 1

    def test_activity_while_signed_out_is_ignored(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)

        monitor.record_activity(ActivitySignal.CLICK)

        assert not monitor.armed
        assert scheduler.pending() == []
        on_expire.assert_not_called()


class TestStop:
    def test_manual_sign_out_cancels_the_timer(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)
        monitor.start()
        scheduler.advance(100)

        monitor.stop()
        scheduler.advance(2 * HOUR)

        on_expire.assert_not_called()
        assert monitor.state is MonitorState.SIGNED_OUT
        assert scheduler.pending() == []

    def test_late_timer_from_an_earlier_session_does_nothing(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)
        monitor.start()
        stale = scheduler.timers[-1]
        monitor.stop()
        monitor.start()

        # Simulate a timer that fired even though it had been canceled.
        stale.callback()

        on_expire.assert_not_called()
        assert monitor.state is MonitorState.ACTIVE

    def test_restart_after_expiry_arms_again(self, scheduler):
        monitor, on_expire = make_monitor(scheduler)
        monitor.start()
        scheduler.advance(HOUR)
        monitor.start()
        scheduler.advance(HOUR)

        assert on_expire.call_count == 2


class TestActivityBus:
    def test_attach_and_close(self, scheduler):
        bus = ActivityEventBus()
        monitor, on_expire = make_monitor(scheduler)
        monitor.attach(bus)
        monitor.start()
        assert len(bus) == 1

        scheduler.advance(HOUR - 1)
        bus.emit(ActivitySignal.SCROLL)
        scheduler.advance(HOUR - 1)
        on_expire.assert_not_called()

        monitor.close()
        assert len(bus) == 0
        assert scheduler.pending() == []

    def test_attach_twice_keeps_one_subscription(self, scheduler):
        bus = ActivityEventBus()
        monitor, _ = make_monitor(scheduler)
        monitor.attach(bus)
        monitor.attach(bus)
        assert len(bus) == 1


def test_loop_scheduler_fires_on_the_running_loop():
    on_expire = MagicMock()

    async def scenario():
        monitor = InactivityMonitor(on_expire, timeout_seconds=0.01, scheduler=LoopScheduler())
        monitor.start()
        await asyncio.sleep(0.1)
        return monitor.state

    assert asyncio.run(scenario()) is MonitorState.SIGNED_OUT
    on_expire.assert_called_once_with()
