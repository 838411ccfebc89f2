"""
People machine component - States, events and context.

Events are frozen dataclasses, one class per event kind. The context is an
immutable snapshot; the machine replaces it wholesale on every transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from people_finder.domain.entities import (
    DEFAULT_FILTER,
    Employment,
    FetchError,
    PeopleFilter,
    Person,
)

# --- States ---


class MachineState(str, Enum):
    """People machine states. None are terminal."""

    IDLE = "idle"
    FETCH = "fetch"
    DEBOUNCE_FETCH = "debounceFetch"
    SUCCESS = "success"
    FAILURE = "failure"


INITIAL_STATE = MachineState.IDLE


# --- Events ---


@dataclass(frozen=True)
class Start:
    """Kick off the first fetch."""


@dataclass(frozen=True)
class SetQuery:
    """Edit the name query of the next fetch."""

    query: str


@dataclass(frozen=True)
class SetEmployment:
    """Edit the employment set of the next fetch."""

    employment: frozenset[Employment]


@dataclass(frozen=True)
class Retry:
    """Fetch again with the last committed filter."""


@dataclass(frozen=True)
class FetchSucceeded:
    """
    Internal: the current fetch resolved.

    invocation is set by the machine's own fetch callbacks; outcomes of a
    superseded invocation are discarded before reaching the transition table.
    """

    records: tuple[Person, ...]
    invocation: int | None = None


@dataclass(frozen=True)
class FetchFailed:
    """Internal: the current fetch rejected."""

    error: FetchError
    invocation: int | None = None


@dataclass(frozen=True)
class DebounceElapsed:
    """
    Internal: the debounce window closed without further edits.

    generation is the debounce timer start that fired; an elapse of a start
    that has since been restarted or cancelled is discarded.
    """

    generation: int | None = None


MachineEvent = (
    Start | SetQuery | SetEmployment | Retry | FetchSucceeded | FetchFailed | DebounceElapsed
)


# --- Context ---


@dataclass(frozen=True)
class PeopleContext:
    """
    Full controller state.

    Invariants:
    - fetching is True exactly while in the fetch state
    - pending_filter is set exactly while in the debounceFetch state
    - records and errors are never both non-empty
    """

    # Filter of the most recently dispatched or in-flight fetch
    active_filter: PeopleFilter = DEFAULT_FILTER
    # Uncommitted edits, only while debouncing
    pending_filter: PeopleFilter | None = None
    fetching: bool = False
    # Data of the last successful fetch
    records: tuple[Person, ...] = ()
    # One entry per consecutive failure, emptied on success
    errors: tuple[FetchError, ...] = ()


INITIAL_CONTEXT = PeopleContext()


# --- Snapshot ---


@dataclass(frozen=True)
class MachineSnapshot:
    """Read-only view of the machine for observers."""

    state: MachineState
    context: PeopleContext


# --- Errors ---


class MachineInvariantError(AssertionError):
    """Raised when the machine reaches a state its transition table rules out."""
