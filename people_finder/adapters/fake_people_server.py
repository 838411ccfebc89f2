"""
Fake People Server Adapter.

In-memory people service for development and demos.
Implements FetchPeoplePort with simulated latency and failures.

Production would call a real HTTP service; this provides equivalent
behavior without a network.

Key behaviors:
- Filters by case-insensitive name substring and employment membership
- Delivers after a configurable latency through a SchedulerPort
- Cancelled fetches never deliver
- Failures injected via failure_rate (seeded RNG) or fail_next()
"""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable, Iterable, Sequence

from people_finder.components.people_machine.ports import SchedulerPort, TimerHandle
from people_finder.domain.entities import FetchError, PeopleFilter, Person
from people_finder.rules.models import FakeServerRules

from .seed_people import SEED_PEOPLE

logger = logging.getLogger(__name__)


def filter_people(people: Iterable[Person], people_filter: PeopleFilter) -> list[Person]:
    """Return the people matching the filter, in database order."""
    return [p for p in people if people_filter.matches(p)]


class FakeFetchHandle:
    """Cancellable handle of a fake fetch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._settled = False
        self._cancelled = False
        self._timer: TimerHandle | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        with self._lock:
            if self._settled:
                return
            self._settled = True
            self._cancelled = True
            timer = self._timer
        if timer is not None:
            timer.cancel()

    def _claim_delivery(self) -> bool:
        """Mark the fetch settled. False if it was cancelled first."""
        with self._lock:
            if self._settled:
                return False
            self._settled = True
            return True


class FakePeopleServer:
    """
    In-memory people service (FetchPeoplePort).

    Callbacks are invoked outside of any lock held by the handle, so the
    caller may cancel or start fetches from within them.
    """

    def __init__(
        self,
        scheduler: SchedulerPort,
        people: Sequence[Person] = SEED_PEOPLE,
        latency_ms: int = 500,
        failure_rate: float = 0.0,
        failure_message: str = "People service unavailable",
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize server.

        Args:
            scheduler: Scheduler simulating network latency
            people: Database of people
            latency_ms: Delay before each outcome
            failure_rate: Probability in [0, 1] that a fetch fails
            failure_message: Message of injected failures
            rng: Random source for failure injection
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self._scheduler = scheduler
        self._people = tuple(people)
        self._latency_ms = latency_ms
        self._failure_rate = failure_rate
        self._failure_message = failure_message
        self._rng = rng or random.Random()
        self._forced_failures = 0
        self.request_count = 0

    @classmethod
    def from_rules(cls, scheduler: SchedulerPort, rules: FakeServerRules) -> FakePeopleServer:
        return cls(
            scheduler,
            latency_ms=rules.latency_ms,
            failure_rate=rules.failure_rate,
            failure_message=rules.failure_message,
            rng=random.Random(rules.seed),
        )

    def fail_next(self, count: int = 1) -> None:
        """Force the next count fetches to fail."""
        self._forced_failures += count

    def start(
        self,
        people_filter: PeopleFilter,
        on_success: Callable[[Sequence[Person]], None],
        on_failure: Callable[[FetchError], None],
    ) -> FakeFetchHandle:
        """Start a fetch resolved after the configured latency."""
        self.request_count += 1
        should_fail = self._should_fail()
        handle = FakeFetchHandle()

        def deliver() -> None:
            if not handle._claim_delivery():
                return
            if should_fail:
                logger.info("Fake server: failing fetch for %r", people_filter.query)
                on_failure(FetchError(message=self._failure_message))
                return
            people = filter_people(self._people, people_filter)
            logger.info(
                "Fake server: %d people for query %r", len(people), people_filter.query
            )
            on_success(people)

        handle._timer = self._scheduler.call_later(self._latency_ms, deliver)
        return handle

    def _should_fail(self) -> bool:
        if self._forced_failures > 0:
            self._forced_failures -= 1
            return True
        return self._failure_rate > 0 and self._rng.random() < self._failure_rate
