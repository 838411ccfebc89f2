"""
People machine component - Entry points.

Governs fetching the filterable people list: debounced filter edits,
cancellation of superseded fetches and accumulation of consecutive errors.

Invariants:
- fetching is True exactly while in the fetch state
- pending_filter is set exactly while in the debounceFetch state
- records and errors are never both non-empty
- a superseded fetch is cancelled before the next one starts
- events a state does not handle are ignored
"""

from __future__ import annotations

from collections.abc import Iterable

from people_finder.domain.entities import Employment
from people_finder.rules.models import Rules

from ._impl import PeopleMachine
from .models import (
    MachineEvent,
    MachineSnapshot,
    Retry,
    SetEmployment,
    SetQuery,
    Start,
)
from .ports import FetchPeoplePort, SchedulerPort
from .timer import DEFAULT_DEBOUNCE_MS


def create_people_machine(
    fetcher: FetchPeoplePort,
    scheduler: SchedulerPort,
    rules: Rules | None = None,
    debounce_ms: int | None = None,
) -> PeopleMachine:
    """
    Create a people machine from ports.

    An explicit debounce_ms wins over the rules, which win over the default.
    """
    if debounce_ms is None:
        debounce_ms = rules.machine.debounce_ms if rules else DEFAULT_DEBOUNCE_MS
    return PeopleMachine(fetcher=fetcher, scheduler=scheduler, debounce_ms=debounce_ms)


def run(event: MachineEvent, *, machine: PeopleMachine) -> MachineSnapshot:
    """Send an event and return the resulting snapshot."""
    machine.send(event)
    return machine.snapshot()


def run_start(machine: PeopleMachine) -> MachineSnapshot:
    return run(Start(), machine=machine)


def run_set_query(machine: PeopleMachine, query: str) -> MachineSnapshot:
    return run(SetQuery(query=query), machine=machine)


def run_set_employment(
    machine: PeopleMachine, employment: Iterable[Employment]
) -> MachineSnapshot:
    return run(SetEmployment(employment=frozenset(employment)), machine=machine)


def run_retry(machine: PeopleMachine) -> MachineSnapshot:
    return run(Retry(), machine=machine)
