"""
Stub people fetcher (test double).

Implementation of FetchPeoplePort whose fetches only settle when told to.
Every call is recorded for test assertions.

Key behaviors:
- resolve() / reject() settle the latest call (or a given one)
- Cancelled or already settled calls never deliver
- raise_on_start simulates an adapter failing synchronously
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from people_finder.domain.entities import FetchError, PeopleFilter, Person

logger = logging.getLogger(__name__)


@dataclass
class StubFetchCall:
    """Record of a started fetch."""

    people_filter: PeopleFilter
    on_success: Callable[[Sequence[Person]], None] = field(repr=False)
    on_failure: Callable[[FetchError], None] = field(repr=False)
    cancelled: bool = False
    settled: bool = False

    @property
    def is_open(self) -> bool:
        return not (self.cancelled or self.settled)

    def cancel(self) -> None:
        if self.settled:
            return
        self.cancelled = True


@dataclass
class StubPeopleFetcher:
    """Controllable FetchPeoplePort for deterministic tests."""

    calls: list[StubFetchCall] = field(default_factory=list)
    raise_on_start: Exception | None = None

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_call(self) -> StubFetchCall:
        if not self.calls:
            raise LookupError("No fetch has been started")
        return self.calls[-1]

    @property
    def last_filter(self) -> PeopleFilter:
        return self.last_call.people_filter

    @property
    def cancelled_count(self) -> int:
        return sum(1 for call in self.calls if call.cancelled)

    def start(
        self,
        people_filter: PeopleFilter,
        on_success: Callable[[Sequence[Person]], None],
        on_failure: Callable[[FetchError], None],
    ) -> StubFetchCall:
        if self.raise_on_start is not None:
            raise self.raise_on_start
        call = StubFetchCall(people_filter, on_success, on_failure)
        self.calls.append(call)
        return call

    def resolve(self, people: Sequence[Person], call: StubFetchCall | None = None) -> bool:
        """
        Resolve a fetch with people.

        Returns:
            True if the outcome was delivered, False if the call was not open
        """
        target = call or self.last_call
        if not target.is_open:
            logger.debug("Stub fetcher: suppressed resolve of closed call")
            return False
        target.settled = True
        target.on_success(list(people))
        return True

    def reject(self, error: FetchError, call: StubFetchCall | None = None) -> bool:
        """Reject a fetch with an error. Same return convention as resolve()."""
        target = call or self.last_call
        if not target.is_open:
            logger.debug("Stub fetcher: suppressed reject of closed call")
            return False
        target.settled = True
        target.on_failure(error)
        return True
