"""
People machine component - Port interfaces.

The machine depends on two side-effecting capabilities only: starting a
cancellable people fetch and scheduling a delayed callback.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from people_finder.domain.entities import FetchError, PeopleFilter, Person


class FetchHandle(Protocol):
    """Handle of a started fetch."""

    def cancel(self) -> None:
        """
        Suppress delivery of the outcome.

        No callback may fire after cancel returns. Calling cancel after the
        outcome was delivered is a no-op.
        """
        ...


class FetchPeoplePort(Protocol):
    """Remote people service."""

    def start(
        self,
        people_filter: PeopleFilter,
        on_success: Callable[[Sequence[Person]], None],
        on_failure: Callable[[FetchError], None],
    ) -> FetchHandle:
        """
        Start fetching the people matching the filter.

        Exactly one of on_success / on_failure is called eventually, unless
        the returned handle is cancelled first. Failures must be normalized
        to a FetchError before reaching on_failure.
        """
        ...


class TimerHandle(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""
        ...


class SchedulerPort(Protocol):
    """Scheduler port - enables deterministic testing of delays."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Run callback once after delay_ms milliseconds.

        The callback never runs inside call_later itself, even for a zero delay.
        """
        ...
