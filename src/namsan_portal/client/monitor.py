"""Inactivity timeout for a signed-in session.

The countdown measures time since the last observed activity: every activity
signal cancels the pending timer and arms a new one. When a timer fires with
no activity in between, `on_expire` runs once and the monitor is signed out
until the next `start()`.

Each arming gets a new epoch. A timer that fires after being superseded
(canceled too late, or left over from an earlier session) sees a stale epoch
and does nothing, so it can never sign out a user who signed in later.
"""
import logging
from collections.abc import Callable
from enum import Enum

from namsan_portal.client.scheduler import LoopScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60 * 60


class ActivitySignal(str, Enum):
    POINTER_DOWN = "mousedown"
    POINTER_MOVE = "mousemove"
    KEY_DOWN = "keydown"
    SCROLL = "scroll"
    TOUCH_START = "touchstart"
    CLICK = "click"


ACTIVITY_SIGNALS = frozenset(ActivitySignal)

ActivityListener = Callable[[ActivitySignal], None]


class ActivityEventBus:
    """Fan-out of user interaction signals to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[ActivityListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ActivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, signal: ActivitySignal) -> None:
        for listener in list(self._listeners):
            listener(signal)


class MonitorState(str, Enum):
    ACTIVE = "active"
    SIGNED_OUT = "signed_out"


class InactivityMonitor:
    """Fires `on_expire` after `timeout_seconds` without activity."""

    def __init__(
        self,
        on_expire: Callable[[], None],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._on_expire = on_expire
        self._timeout = timeout_seconds
        self._scheduler = scheduler or LoopScheduler()
        self._state = MonitorState.SIGNED_OUT
        self._handle: TimerHandle | None = None
        self._epoch = 0
        self._detach: Callable[[], None] | None = None

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Session established: become active and (re)start the countdown."""
        self._state = MonitorState.ACTIVE
        self._arm()

    def record_activity(self, signal: ActivitySignal) -> None:
        """Restart the countdown; ignored while signed out or for unknown signals."""
        if self._state is not MonitorState.ACTIVE or signal not in ACTIVITY_SIGNALS:
            return
        self._arm()

    def stop(self) -> None:
        """Session ended (manually or forced): cancel the countdown."""
        self._cancel()
        self._epoch += 1
        self._state = MonitorState.SIGNED_OUT

    def attach(self, bus: ActivityEventBus) -> None:
        """Listen to `bus` for activity until close()."""
        if self._detach is not None:
            self._detach()
        self._detach = bus.subscribe(self.record_activity)

    def close(self) -> None:
        """Release the activity subscription and any pending timer."""
        self.stop()
        if self._detach is not None:
            self._detach()
            self._detach = None

    def _arm(self) -> None:
        self._cancel()
        self._epoch += 1
        epoch = self._epoch
        self._handle = self._scheduler.call_later(self._timeout, lambda: self._fire(epoch))

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, epoch: int) -> None:
        if epoch != self._epoch or self._state is not MonitorState.ACTIVE:
            return
        self._handle = None
        self._epoch += 1
        self._state = MonitorState.SIGNED_OUT
        logger.info("Session timeout due to inactivity")
        self._on_expire()
