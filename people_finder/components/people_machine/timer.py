"""
Debounce timer for the people machine.

Single-shot and restartable. Every restart invalidates the previous start, so
only the most recent start can fire, and it fires at most once.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .ports import SchedulerPort, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500


class DebounceTimer:
    """
    Trailing debounce timer over an injectable scheduler.

    Usage:
        timer = DebounceTimer(scheduler, delay_ms=500)
        timer.restart(on_elapsed)  # restarts the countdown from zero
        on_elapsed(generation) is called once, for the latest start only
    """

    def __init__(self, scheduler: SchedulerPort, delay_ms: int = DEFAULT_DEBOUNCE_MS) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._handle: TimerHandle | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def is_current(self, generation: int) -> bool:
        """Check that no restart or cancel happened since that start."""
        with self._lock:
            return generation == self._generation

    def restart(self, on_elapsed: Callable[[int], None]) -> int:
        """
        Cancel any pending countdown and start a new one.

        on_elapsed receives the generation of the start that fired. It runs
        outside the timer lock, so a restart can land between the check here
        and the callback; receivers must recheck with is_current().

        Returns:
            Generation of this start
        """
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation

            def fire() -> None:
                with self._lock:
                    if generation != self._generation or self._handle is None:
                        logger.debug("Dropping stale debounce timer #%d", generation)
                        return
                    self._handle = None
                on_elapsed(generation)

            self._handle = self._scheduler.call_later(self._delay_ms, fire)
            logger.debug("Debounce timer #%d started (%d ms)", generation, self._delay_ms)
            return generation

    def cancel(self) -> None:
        """Cancel the pending countdown, if any."""
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        # Invalidate callbacks a scheduler may already be running
        self._generation += 1
