"""Scheduler: call refresh every interval on a daemon thread.

Changing the interval stops the running timer thread and starts a new one,
so two timers never run at once.

The daemon does not detect sleep and wake itself. on_wake() is the hook a
host integration calls after the system resumes.
"""

import logging
import threading
from collections.abc import Callable

from prmonitor.config import validate_poll_interval

LOG = logging.getLogger("prmonitor.scheduler")


def run_scheduler_loop(
    refresh: Callable[[], None],
    stop: threading.Event,
    interval_seconds: int,
) -> None:
    """Loop: wait interval_seconds, refresh, repeat until stop is set."""
    while not stop.wait(interval_seconds):
        try:
            refresh()
        except Exception as e:
            LOG.exception("Scheduler tick error: %s", e)


class PollScheduler:
    """Repeating refresh timer with reschedule, wake and manual triggers."""

    def __init__(self, refresh: Callable[[], None], interval_seconds: int) -> None:
        self._refresh = refresh
        self._interval = validate_poll_interval(interval_seconds)
        self._lock = threading.Lock()
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> int:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> threading.Thread:
        """Start the timer thread (stopping a running one first)."""
        with self._lock:
            self._stop_locked()
            stop = threading.Event()
            thread = threading.Thread(
                target=run_scheduler_loop,
                args=(self._refresh, stop, self._interval),
                name="prmonitor-poll",
                daemon=True,
            )
            thread.start()
            self._stop, self._thread = stop, thread
        LOG.info("Polling every %s seconds", self._interval)
        return thread

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def reschedule(self, interval_seconds: int) -> None:
        """Switch to a new interval; the next tick is a full interval away."""
        self._interval = validate_poll_interval(interval_seconds)
        self.start()

    def trigger(self) -> None:
        """Refresh now, in the caller's thread (manual refresh)."""
        self._refresh()

    def on_wake(self) -> None:
        """The system resumed from sleep; PRs may be stale, refresh now."""
        LOG.info("System woke up, refreshing")
        self.trigger()

    def _stop_locked(self) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            # A refresh in progress finishes first; the loop exits on its next wait
            self._thread.join()
        self._stop, self._thread = None, None
