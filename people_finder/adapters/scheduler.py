"""
Scheduler adapters.

Implementations of SchedulerPort for the debounce timer and the fake server.

Key behaviors:
- ManualScheduler: virtual clock, callbacks run only when time is advanced
- ThreadingScheduler: real time, callbacks run on daemon timer threads
- Neither runs a callback from inside call_later
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(order=True)
class _ScheduledCall:
    due_ms: int
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by explicit time advancement.

    Calls due at the same time run in the order they were scheduled.
    Callbacks may schedule further calls; those run in the same advance
    if they fall due within it.
    """

    def __init__(self) -> None:
        """Initialize scheduler at time zero."""
        self._now_ms = 0
        self._calls: list[_ScheduledCall] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending_count(self) -> int:
        return sum(1 for call in self._calls if not call.cancelled)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ScheduledCall:
        """Schedule callback delay_ms after the current virtual time."""
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        call = _ScheduledCall(self._now_ms + delay_ms, next(self._seq), callback)
        heapq.heappush(self._calls, call)
        return call

    def advance(self, ms: int) -> int:
        """
        Move the clock forward, running every call that falls due.

        Returns:
            Number of callbacks run
        """
        if ms < 0:
            raise ValueError("Cannot advance time backwards")
        target = self._now_ms + ms
        ran = 0
        while self._calls and self._calls[0].due_ms <= target:
            call = heapq.heappop(self._calls)
            if call.cancelled:
                continue
            self._now_ms = call.due_ms
            call.callback()
            ran += 1
        self._now_ms = target
        return ran

    def run_all(self) -> int:
        """Run every pending call, advancing the clock as needed."""
        ran = 0
        while self._calls:
            call = heapq.heappop(self._calls)
            if call.cancelled:
                continue
            self._now_ms = max(self._now_ms, call.due_ms)
            call.callback()
            ran += 1
        return ran


class _ThreadTimerHandle:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Real-time scheduler backed by threading.Timer."""

    def __init__(self) -> None:
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ThreadTimerHandle:
        """Run callback on a timer thread after delay_ms."""
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")

        def fire() -> None:
            with self._lock:
                self._timers.discard(timer)
            try:
                callback()
            except Exception:
                logger.exception("Scheduled callback failed")

        timer = threading.Timer(delay_ms / 1000.0, fire)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()
        return _ThreadTimerHandle(timer)

    def shutdown(self) -> None:
        """Cancel every pending timer."""
        with self._lock:
            for timer in self._timers:
                timer.cancel()
            self._timers.clear()
