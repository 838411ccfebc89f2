"""
People session routes.

One people machine per session. Every mutating route sends a single event
and answers with the snapshot observed right after it.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from people_finder.api.deps import SessionRegistry, get_machine, get_registry, get_rules
from people_finder.components.people_machine import (
    MachineSnapshot,
    PeopleMachine,
    run_retry,
    run_set_employment,
    run_set_query,
    run_start,
)
from people_finder.domain.entities import Employment, PeopleFilter, employment_from_flags
from people_finder.domain.status import ServiceStatus, get_service_status
from people_finder.rules.models import Rules

router = APIRouter()


# --- Request/Response Models ---


class QueryRequest(BaseModel):
    query: str


class EmploymentRequest(BaseModel):
    employees: bool = True
    contractors: bool = True


class FilterResponse(BaseModel):
    query: str
    employment: list[Employment]


class PersonResponse(BaseModel):
    id: int
    name: str
    salary: int
    country: str
    job_title: str
    currency: str
    employment: Employment


class SessionResponse(BaseModel):
    session_id: str
    state: Literal["idle", "fetch", "debounceFetch", "success", "failure"]
    fetching: bool
    filter: FilterResponse
    pending_filter: FilterResponse | None
    people: list[PersonResponse]
    errors: list[str]
    service_status: ServiceStatus


# --- Helpers ---


def _filter_response(people_filter: PeopleFilter) -> FilterResponse:
    return FilterResponse(
        query=people_filter.query,
        employment=sorted(people_filter.employment),
    )


def _session_response(session_id: str, snapshot: MachineSnapshot, rules: Rules) -> SessionResponse:
    ctx = snapshot.context
    thresholds = rules.service_status
    return SessionResponse(
        session_id=session_id,
        state=snapshot.state.value,
        fetching=ctx.fetching,
        filter=_filter_response(ctx.active_filter),
        pending_filter=_filter_response(ctx.pending_filter) if ctx.pending_filter else None,
        people=[PersonResponse(**person.model_dump()) for person in ctx.records],
        errors=[error.message for error in ctx.errors],
        service_status=get_service_status(
            ctx.errors,
            degraded_after=thresholds.degraded_after_errors,
            unavailable_after=thresholds.unavailable_after_errors,
        ),
    )


# --- Routes ---


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(
    registry: SessionRegistry = Depends(get_registry),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Create a session with an idle people machine."""
    session_id, machine = registry.create()
    return _session_response(session_id, machine.snapshot(), rules)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    machine: PeopleMachine = Depends(get_machine),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Get the current snapshot of a session."""
    return _session_response(session_id, machine.snapshot(), rules)


@router.post("/sessions/{session_id}/start", response_model=SessionResponse)
def start(
    session_id: str,
    machine: PeopleMachine = Depends(get_machine),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Trigger the first fetch."""
    return _session_response(session_id, run_start(machine), rules)


@router.put("/sessions/{session_id}/query", response_model=SessionResponse)
def set_query(
    session_id: str,
    data: QueryRequest,
    machine: PeopleMachine = Depends(get_machine),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Edit the name query; the fetch is debounced."""
    return _session_response(session_id, run_set_query(machine, data.query), rules)


@router.put("/sessions/{session_id}/employment", response_model=SessionResponse)
def set_employment(
    session_id: str,
    data: EmploymentRequest,
    machine: PeopleMachine = Depends(get_machine),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Edit the employment filter; the fetch is debounced."""
    employment = employment_from_flags(data.employees, data.contractors)
    return _session_response(session_id, run_set_employment(machine, employment), rules)


@router.post("/sessions/{session_id}/retry", response_model=SessionResponse)
def retry(
    session_id: str,
    machine: PeopleMachine = Depends(get_machine),
    rules: Rules = Depends(get_rules),
) -> SessionResponse:
    """Retry the last fetch with the same filter."""
    return _session_response(session_id, run_retry(machine), rules)


@router.delete("/sessions/{session_id}", status_code=204)
def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Stop the session's machine and forget it."""
    if not registry.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
