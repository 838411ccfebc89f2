"""
People machine component - Fetch lifecycle of the filterable people list.

States: idle, fetch, debounceFetch, success, failure.
"""

from ._impl import PeopleMachine
from .component import (
    create_people_machine,
    run,
    run_retry,
    run_set_employment,
    run_set_query,
    run_start,
)
from .models import (
    INITIAL_CONTEXT,
    INITIAL_STATE,
    DebounceElapsed,
    FetchFailed,
    FetchSucceeded,
    MachineEvent,
    MachineInvariantError,
    MachineSnapshot,
    MachineState,
    PeopleContext,
    Retry,
    SetEmployment,
    SetQuery,
    Start,
)
from .ports import FetchHandle, FetchPeoplePort, SchedulerPort, TimerHandle
from .timer import DEFAULT_DEBOUNCE_MS, DebounceTimer
from .transitions import Transition, handles, transition

__all__ = [
    # Entry points
    "create_people_machine",
    "run",
    "run_retry",
    "run_set_employment",
    "run_set_query",
    "run_start",
    # Engine
    "PeopleMachine",
    "DebounceTimer",
    "DEFAULT_DEBOUNCE_MS",
    "Transition",
    "handles",
    "transition",
    # Events
    "DebounceElapsed",
    "FetchFailed",
    "FetchSucceeded",
    "MachineEvent",
    "Retry",
    "SetEmployment",
    "SetQuery",
    "Start",
    # State models
    "INITIAL_CONTEXT",
    "INITIAL_STATE",
    "MachineInvariantError",
    "MachineSnapshot",
    "MachineState",
    "PeopleContext",
    # Ports
    "FetchHandle",
    "FetchPeoplePort",
    "SchedulerPort",
    "TimerHandle",
]
