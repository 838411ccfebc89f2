"""
People machine - Transition table.

Functional Core - pure state/context computation, no side effects.

Key behaviors:
- Each (state, event kind) pair maps to exactly one handler
- Pairs missing from the table are no-ops (transition returns None)
- Filter edits accumulate into pending_filter, seeded from active_filter
- Failures pile up in errors until the next success
- Exit and entry assignments keep the fetching flag tied to the fetch state

Side effects (fetch invocation, cancellation, debounce timer) belong to the
machine's entry/exit hooks, not to this module.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from .models import (
    DebounceElapsed,
    FetchFailed,
    FetchSucceeded,
    MachineEvent,
    MachineInvariantError,
    MachineState,
    PeopleContext,
    Retry,
    SetEmployment,
    SetQuery,
    Start,
)

IDLE = MachineState.IDLE
FETCH = MachineState.FETCH
DEBOUNCE_FETCH = MachineState.DEBOUNCE_FETCH
SUCCESS = MachineState.SUCCESS
FAILURE = MachineState.FAILURE


@dataclass(frozen=True)
class Transition:
    """Result of applying one event."""

    source: MachineState
    target: MachineState
    context: PeopleContext


# Each handler takes the event class it is keyed by in TRANSITIONS
Handler = Callable[[PeopleContext, Any], tuple[MachineState, PeopleContext]]


# --- Actions ---


def _start(ctx: PeopleContext, event: Start) -> tuple[MachineState, PeopleContext]:
    return FETCH, ctx


def _set_query(ctx: PeopleContext, event: SetQuery) -> tuple[MachineState, PeopleContext]:
    base = ctx.pending_filter or ctx.active_filter
    return DEBOUNCE_FETCH, replace(ctx, pending_filter=base.with_query(event.query))


def _set_employment(
    ctx: PeopleContext, event: SetEmployment
) -> tuple[MachineState, PeopleContext]:
    base = ctx.pending_filter or ctx.active_filter
    return DEBOUNCE_FETCH, replace(ctx, pending_filter=base.with_employment(event.employment))


def _swap_next_filter(
    ctx: PeopleContext, event: DebounceElapsed
) -> tuple[MachineState, PeopleContext]:
    if ctx.pending_filter is None:
        raise MachineInvariantError("Debounce elapsed without a pending filter")
    return FETCH, replace(ctx, active_filter=ctx.pending_filter, pending_filter=None)


def _store_records(
    ctx: PeopleContext, event: FetchSucceeded
) -> tuple[MachineState, PeopleContext]:
    return SUCCESS, replace(ctx, records=tuple(event.records), errors=(), fetching=False)


def _store_error(ctx: PeopleContext, event: FetchFailed) -> tuple[MachineState, PeopleContext]:
    return FAILURE, replace(ctx, records=(), errors=(*ctx.errors, event.error), fetching=False)


def _retry(ctx: PeopleContext, event: Retry) -> tuple[MachineState, PeopleContext]:
    return FETCH, ctx


# --- Table ---


TRANSITIONS: dict[tuple[MachineState, type], Handler] = {
    # The machine starts still, the first fetch is triggered externally
    (IDLE, Start): _start,
    # Editing filters mid-fetch cancels the fetch on exit
    (FETCH, SetQuery): _set_query,
    (FETCH, SetEmployment): _set_employment,
    (FETCH, FetchSucceeded): _store_records,
    (FETCH, FetchFailed): _store_error,
    # Self-transitions restart the debounce timer
    (DEBOUNCE_FETCH, SetQuery): _set_query,
    (DEBOUNCE_FETCH, SetEmployment): _set_employment,
    (DEBOUNCE_FETCH, DebounceElapsed): _swap_next_filter,
    (SUCCESS, SetQuery): _set_query,
    (SUCCESS, SetEmployment): _set_employment,
    # Retrying keeps the active filter and the accumulated errors
    (FAILURE, Retry): _retry,
    (FAILURE, SetQuery): _set_query,
    (FAILURE, SetEmployment): _set_employment,
}


# --- Entry / exit assignments ---


def _mark_fetching(ctx: PeopleContext) -> PeopleContext:
    return replace(ctx, fetching=True)


def _clear_fetching(ctx: PeopleContext) -> PeopleContext:
    return replace(ctx, fetching=False)


EXIT_ASSIGNMENTS: dict[MachineState, Callable[[PeopleContext], PeopleContext]] = {
    FETCH: _clear_fetching,
}

ENTRY_ASSIGNMENTS: dict[MachineState, Callable[[PeopleContext], PeopleContext]] = {
    FETCH: _mark_fetching,
}


def handles(state: MachineState, event: MachineEvent) -> bool:
    """Check whether the event is meaningful in the given state."""
    return (state, type(event)) in TRANSITIONS


def transition(
    state: MachineState,
    ctx: PeopleContext,
    event: MachineEvent,
) -> Transition | None:
    """
    Compute the next state and context for an event.

    Args:
        state: Current state
        ctx: Current context
        event: Event to apply

    Returns:
        Transition, or None when the event is ignored in this state

    Raises:
        MachineInvariantError: debounce elapsed without a pending filter
    """
    handler = TRANSITIONS.get((state, type(event)))
    if handler is None:
        return None

    exit_assign = EXIT_ASSIGNMENTS.get(state)
    if exit_assign is not None:
        ctx = exit_assign(ctx)

    target, next_ctx = handler(ctx, event)

    assign = ENTRY_ASSIGNMENTS.get(target)
    if assign is not None:
        next_ctx = assign(next_ctx)

    return Transition(source=state, target=target, context=next_ctx)
