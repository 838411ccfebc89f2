"""
People machine component unit tests.

Tests for the fetch lifecycle: start, success, failure accumulation,
debounced filter edits, retries and cancellation of superseded fetches.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

import pytest

from people_finder.adapters.scheduler import ManualScheduler
from people_finder.adapters.stub_fetcher import StubPeopleFetcher
from people_finder.components.people_machine import (
    INITIAL_CONTEXT,
    DebounceElapsed,
    FetchFailed,
    FetchSucceeded,
    MachineInvariantError,
    MachineSnapshot,
    MachineState,
    PeopleContext,
    PeopleMachine,
    Retry,
    SetEmployment,
    SetQuery,
    Start,
    create_people_machine,
    handles,
    run_retry,
    run_set_employment,
    run_set_query,
    run_start,
    transition,
)
from people_finder.domain.entities import DEFAULT_FILTER, FetchError, PeopleFilter, Person

DEBOUNCE_MS = 500

# --- Mock Data ---

ANN_HENRY = Person(
    id=1,
    name="Ann Henry",
    job_title="Product manager",
    country="Germany",
    salary=120000,
    currency="EUR",
    employment="employee",
)
VITTORIA_JANSON = Person(
    id=2,
    name="Vittoria Janson",
    job_title="Pianist",
    country="Italy",
    salary=70000,
    currency="EUR",
    employment="contractor",
)

ERROR = FetchError(message="Failure")

DEFAULT_PEOPLE = [ANN_HENRY, VITTORIA_JANSON]


# --- Mock Scheduler ---


class _IgnoredCancel:
    def cancel(self) -> None:
        pass


class CapturingScheduler:
    """Keeps every scheduled callback for the test to fire, on any thread."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], None]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _IgnoredCancel:
        self.callbacks.append(callback)
        return _IgnoredCancel()


# --- Fixtures ---


@pytest.fixture
def fetcher() -> StubPeopleFetcher:
    return StubPeopleFetcher()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def machine(fetcher: StubPeopleFetcher, scheduler: ManualScheduler) -> PeopleMachine:
    return create_people_machine(fetcher, scheduler, debounce_ms=DEBOUNCE_MS)


def assert_invariants(snapshot: MachineSnapshot) -> None:
    ctx = snapshot.context
    assert ctx.fetching == (snapshot.state == MachineState.FETCH)
    assert (ctx.pending_filter is not None) == (snapshot.state == MachineState.DEBOUNCE_FETCH)
    assert not (ctx.records and ctx.errors)


# --- Initial State ---


class TestInitialState:
    """Freshly created machine."""

    def test_created_machine_is_idle(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Does nothing until started."""
        snapshot = machine.snapshot()

        assert snapshot.state == MachineState.IDLE
        assert snapshot.context == INITIAL_CONTEXT
        assert snapshot.context.fetching is False
        assert snapshot.context.records == ()
        assert snapshot.context.errors == ()
        assert snapshot.context.pending_filter is None
        assert fetcher.call_count == 0

    def test_default_filter(self, machine: PeopleMachine) -> None:
        """Starts with an empty query and both employments."""
        assert machine.context.active_filter.query == ""
        assert machine.context.active_filter.employment == frozenset({"employee", "contractor"})

    def test_start_fetches_once_with_default_filter(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Start moves to fetch and invokes the service exactly once."""
        snapshot = run_start(machine)

        assert snapshot.state == MachineState.FETCH
        assert snapshot.context.fetching is True
        assert fetcher.call_count == 1
        assert fetcher.last_filter == DEFAULT_FILTER

    def test_instances_are_independent(
        self, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Two machines never share state."""
        first = create_people_machine(fetcher, scheduler)
        second = create_people_machine(fetcher, scheduler)

        run_start(first)

        assert first.state == MachineState.FETCH
        assert second.state == MachineState.IDLE


# --- First Fetch ---


class TestFirstFetch:
    """Outcome of the first fetch."""

    def test_success_stores_people(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Resolved fetch stores the data and clears fetching."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        snapshot = machine.snapshot()
        assert snapshot.state == MachineState.SUCCESS
        assert snapshot.context.records == (ANN_HENRY, VITTORIA_JANSON)
        assert snapshot.context.errors == ()
        assert snapshot.context.fetching is False
        assert_invariants(snapshot)

    def test_failure_stores_error(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Rejected fetch stores the error."""
        run_start(machine)
        fetcher.reject(ERROR)

        snapshot = machine.snapshot()
        assert snapshot.state == MachineState.FAILURE
        assert snapshot.context.errors == (ERROR,)
        assert snapshot.context.records == ()
        assert snapshot.context.fetching is False
        assert_invariants(snapshot)

    def test_consecutive_failures_accumulate(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Retry does not clear errors; two failures give two errors."""
        run_start(machine)
        fetcher.reject(ERROR)
        run_retry(machine)
        fetcher.reject(ERROR)

        snapshot = machine.snapshot()
        assert snapshot.state == MachineState.FAILURE
        assert snapshot.context.errors == (ERROR, ERROR)
        assert fetcher.call_count == 2

    def test_errors_kept_in_arrival_order(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Errors are appended, never deduplicated or reordered."""
        first = FetchError(message="timeout")
        second = FetchError(message="connection reset")

        run_start(machine)
        fetcher.reject(first)
        run_retry(machine)
        fetcher.reject(second)

        assert machine.context.errors == (first, second)

    def test_retry_keeps_errors_while_fetching(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Errors stay visible during the retry fetch."""
        run_start(machine)
        fetcher.reject(ERROR)

        snapshot = run_retry(machine)

        assert snapshot.state == MachineState.FETCH
        assert snapshot.context.errors == (ERROR,)
        assert snapshot.context.fetching is True

    def test_success_after_failures_clears_errors(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Errors are cleared by the next success."""
        run_start(machine)
        fetcher.reject(ERROR)
        run_retry(machine)
        fetcher.reject(ERROR)
        run_retry(machine)
        fetcher.resolve([ANN_HENRY])

        snapshot = machine.snapshot()
        assert snapshot.state == MachineState.SUCCESS
        assert snapshot.context.errors == ()
        assert snapshot.context.records == (ANN_HENRY,)

    def test_failure_clears_previous_people(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """A failure after a success empties the records."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "Ann")
        scheduler.advance(DEBOUNCE_MS)
        fetcher.reject(ERROR)

        assert machine.context.records == ()
        assert machine.context.errors == (ERROR,)


# --- Querying ---


class TestQuerying:
    """Debounced filter edits."""

    def test_set_query_debounces_next_fetch(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """No fetch until the debounce delay elapses, then exactly one."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        snapshot = run_set_query(machine, "Ann Henry")
        assert snapshot.state == MachineState.DEBOUNCE_FETCH
        assert fetcher.call_count == 1

        scheduler.advance(DEBOUNCE_MS - 1)
        assert fetcher.call_count == 1

        scheduler.advance(1)
        assert fetcher.call_count == 2
        assert fetcher.last_filter.query == "Ann Henry"
        assert machine.state == MachineState.FETCH

    def test_query_reaches_next_fetch(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """The committed filter is the active filter after the debounce."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "Ann Henry")
        scheduler.advance(DEBOUNCE_MS)
        fetcher.resolve([ANN_HENRY])

        snapshot = machine.snapshot()
        assert snapshot.state == MachineState.SUCCESS
        assert snapshot.context.records == (ANN_HENRY,)
        assert snapshot.context.active_filter.query == "Ann Henry"
        assert snapshot.context.pending_filter is None

    def test_pending_filter_seeded_from_active_filter(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Only the edited field changes in the pending filter."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        snapshot = run_set_query(machine, "Ann")

        assert snapshot.context.pending_filter == PeopleFilter(
            query="Ann", employment=frozenset({"employee", "contractor"})
        )
        assert snapshot.context.active_filter == DEFAULT_FILTER

    def test_edits_accumulate_in_pending_filter(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Query and employment edits merge instead of overwriting each other."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        run_set_query(machine, "Ann")
        run_set_employment(machine, ["employee"])
        scheduler.advance(DEBOUNCE_MS)

        assert fetcher.last_filter == PeopleFilter(query="Ann", employment=frozenset({"employee"}))

    def test_two_edits_collapse_into_one_fetch(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Each edit restarts the timer; only the last one is fetched."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        run_set_query(machine, "Ann")
        scheduler.advance(DEBOUNCE_MS - 100)
        run_set_query(machine, "Ann Henry")
        scheduler.advance(DEBOUNCE_MS - 100)
        assert fetcher.call_count == 1

        scheduler.advance(100)
        assert fetcher.call_count == 2
        assert fetcher.last_filter.query == "Ann Henry"

        scheduler.advance(DEBOUNCE_MS * 4)
        assert fetcher.call_count == 2
        assert scheduler.pending_count == 0

    def test_retry_uses_last_committed_query(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Retry re-fetches with the filter of the failed fetch."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "Ann Henry")
        scheduler.advance(DEBOUNCE_MS)
        fetcher.reject(ERROR)

        snapshot = run_retry(machine)

        assert snapshot.state == MachineState.FETCH
        assert fetcher.call_count == 3
        assert fetcher.last_filter.query == "Ann Henry"

    def test_edit_after_failure_debounces(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """From failure, a filter edit goes through the debounce too."""
        run_start(machine)
        fetcher.reject(ERROR)

        snapshot = run_set_employment(machine, ["contractor"])
        assert snapshot.state == MachineState.DEBOUNCE_FETCH
        assert snapshot.context.errors == (ERROR,)

        scheduler.advance(DEBOUNCE_MS)
        assert fetcher.call_count == 2
        assert fetcher.last_filter.employment == frozenset({"contractor"})

    def test_empty_employment_is_a_valid_filter(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Unchecking both employments still fetches."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_employment(machine, [])
        scheduler.advance(DEBOUNCE_MS)

        assert fetcher.last_filter.employment == frozenset()


# --- Cancellation ---


class TestCancellation:
    """Superseded fetches never reach the context."""

    def test_edit_during_fetch_cancels_it(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Leaving fetch for debounceFetch cancels the request immediately."""
        run_start(machine)
        first_call = fetcher.last_call

        snapshot = run_set_query(machine, "Ann")

        assert snapshot.state == MachineState.DEBOUNCE_FETCH
        assert snapshot.context.fetching is False
        assert first_call.cancelled is True
        assert fetcher.call_count == 1

    def test_stale_outcome_has_no_effect(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """A cancelled fetch resolving later changes nothing."""
        run_start(machine)
        first_call = fetcher.last_call
        run_set_query(machine, "Ann")
        scheduler.advance(DEBOUNCE_MS)
        second_call = fetcher.last_call

        delivered = fetcher.resolve(DEFAULT_PEOPLE, call=first_call)
        assert delivered is False
        assert machine.state == MachineState.FETCH
        assert machine.context.records == ()

        fetcher.resolve([ANN_HENRY], call=second_call)
        assert machine.context.records == (ANN_HENRY,)

    def test_stale_tagged_outcome_is_dropped(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Outcomes of an old invocation are dropped even if the adapter leaks them."""
        run_start(machine)
        leaked = fetcher.last_call
        run_set_query(machine, "Ann")
        scheduler.advance(DEBOUNCE_MS)

        # Adapter ignoring cancel: deliver straight through the callback
        leaked.on_failure(ERROR)

        assert machine.state == MachineState.FETCH
        assert machine.context.errors == ()

    def test_success_does_not_cancel_settled_fetch(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Exiting fetch after delivery leaves the call settled, not cancelled."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)

        assert fetcher.last_call.settled is True
        assert fetcher.last_call.cancelled is False

    def test_stop_cancels_everything(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """Stopped machine ignores events and leaves no pending work."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "Ann")

        machine.stop()
        scheduler.run_all()
        machine.send(Retry())

        assert machine.is_stopped is True
        assert machine.state == MachineState.DEBOUNCE_FETCH
        assert fetcher.call_count == 1

    def test_elapse_of_restarted_debounce_is_dropped(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """An elapse tagged with a superseded timer start never commits the filter."""
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "A")
        superseded = machine._timer.restart(machine._on_debounce_elapsed)
        run_set_query(machine, "Ann")

        machine.send(DebounceElapsed(generation=superseded))

        assert machine.state == MachineState.DEBOUNCE_FETCH
        assert machine.context.pending_filter == PeopleFilter(query="Ann")
        assert fetcher.call_count == 1

        scheduler.advance(DEBOUNCE_MS)
        assert fetcher.call_count == 2
        assert fetcher.last_filter.query == "Ann"

    def test_edit_racing_a_firing_timer_wins(self, fetcher: StubPeopleFetcher) -> None:
        """A timer that already fired but has not reached the machine yet is stale."""
        scheduler = CapturingScheduler()
        machine = create_people_machine(fetcher, scheduler, debounce_ms=DEBOUNCE_MS)
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "A")
        first_fire = scheduler.callbacks[-1]

        with machine._lock:
            worker = threading.Thread(target=first_fire)
            worker.start()
            # The timer clears its handle once the elapse is handed to the machine
            deadline = time.monotonic() + 2.0
            while machine._timer.is_pending and time.monotonic() < deadline:
                time.sleep(0.001)
            assert not machine._timer.is_pending

            run_set_query(machine, "Ann")
        worker.join(2.0)

        assert not worker.is_alive()
        assert machine.state == MachineState.DEBOUNCE_FETCH
        assert machine.context.pending_filter == PeopleFilter(query="Ann")
        assert fetcher.call_count == 1

        scheduler.callbacks[-1]()
        assert machine.state == MachineState.FETCH
        assert fetcher.last_filter.query == "Ann"

    def test_stop_during_fetch_cancels_request(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        run_start(machine)
        machine.stop()

        assert fetcher.last_call.cancelled is True


# --- Ignored Events ---


class TestIgnoredEvents:
    """Events a state does not handle are no-ops."""

    def test_retry_while_fetching_is_ignored(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        run_start(machine)
        before = machine.snapshot()

        machine.send(Retry())

        assert machine.snapshot() == before
        assert fetcher.call_count == 1

    def test_stray_success_in_idle_is_ignored(self, machine: PeopleMachine) -> None:
        machine.send(FetchSucceeded(records=(ANN_HENRY,)))

        assert machine.state == MachineState.IDLE
        assert machine.context == INITIAL_CONTEXT

    def test_second_start_is_ignored(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        machine.send(Start())

        assert machine.state == MachineState.SUCCESS
        assert fetcher.call_count == 1

    def test_retry_after_success_is_ignored(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        machine.send(Retry())

        assert machine.state == MachineState.SUCCESS
        assert fetcher.call_count == 1

    def test_filter_edit_in_idle_is_ignored(
        self, machine: PeopleMachine, scheduler: ManualScheduler
    ) -> None:
        machine.send(SetQuery(query="Ann"))

        assert machine.state == MachineState.IDLE
        assert scheduler.pending_count == 0


# --- Adapter Failures ---


class TestAdapterFailures:
    """Failures raised by the fetch adapter itself."""

    def test_start_raising_becomes_fetch_error(
        self, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        """A synchronous adapter exception is normalized into a failure."""
        fetcher.raise_on_start = ConnectionError("connection refused")
        machine = create_people_machine(fetcher, scheduler)

        snapshot = run_start(machine)

        assert snapshot.state == MachineState.FAILURE
        assert snapshot.context.errors == (FetchError(message="connection refused"),)

    def test_synchronous_adapter_outcome_is_queued(self, scheduler: ManualScheduler) -> None:
        """An adapter answering inside start is applied after the entry hook."""

        class InstantFetcher:
            def start(self, people_filter, on_success, on_failure):  # type: ignore[no-untyped-def]
                on_success([ANN_HENRY])
                return _Handle()

        class _Handle:
            def cancel(self) -> None:
                pass

        machine = PeopleMachine(InstantFetcher(), scheduler)
        snapshot = run_start(machine)

        assert snapshot.state == MachineState.SUCCESS
        assert snapshot.context.records == (ANN_HENRY,)


# --- Observation ---


class TestSubscribe:
    """Snapshot listeners."""

    def test_listener_sees_every_transition(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher, scheduler: ManualScheduler
    ) -> None:
        seen: list[MachineState] = []
        machine.subscribe(lambda snapshot: seen.append(snapshot.state))

        run_start(machine)
        fetcher.resolve(DEFAULT_PEOPLE)
        run_set_query(machine, "A")
        run_set_query(machine, "An")
        scheduler.advance(DEBOUNCE_MS)

        assert seen == [
            MachineState.FETCH,
            MachineState.SUCCESS,
            MachineState.DEBOUNCE_FETCH,
            MachineState.DEBOUNCE_FETCH,
            MachineState.FETCH,
        ]

    def test_unsubscribe(self, machine: PeopleMachine) -> None:
        seen: list[MachineSnapshot] = []
        unsubscribe = machine.subscribe(seen.append)
        unsubscribe()

        run_start(machine)

        assert seen == []

    def test_listener_events_run_after_current_transition(
        self, machine: PeopleMachine, fetcher: StubPeopleFetcher
    ) -> None:
        """Events sent from a listener are queued, not dispatched re-entrantly."""

        def retry_on_failure(snapshot: MachineSnapshot) -> None:
            if snapshot.state == MachineState.FAILURE and len(snapshot.context.errors) == 1:
                machine.send(Retry())

        machine.subscribe(retry_on_failure)
        run_start(machine)
        fetcher.reject(ERROR)

        assert machine.state == MachineState.FETCH
        assert fetcher.call_count == 2
        assert machine.context.errors == (ERROR,)


# --- Pure Transitions ---


class TestTransitionTable:
    """Single transitions from arbitrary states."""

    def test_start_from_idle(self) -> None:
        result = transition(MachineState.IDLE, INITIAL_CONTEXT, Start())

        assert result is not None
        assert result.target == MachineState.FETCH
        assert result.context.fetching is True

    def test_success_from_fetch(self) -> None:
        ctx = PeopleContext(fetching=True, errors=(ERROR,))
        result = transition(MachineState.FETCH, ctx, FetchSucceeded(records=(ANN_HENRY,)))

        assert result is not None
        assert result.target == MachineState.SUCCESS
        assert result.context == PeopleContext(records=(ANN_HENRY,))

    def test_set_query_from_success(self) -> None:
        ctx = PeopleContext(records=(ANN_HENRY,))
        result = transition(MachineState.SUCCESS, ctx, SetQuery(query="Ann Henry"))

        assert result is not None
        assert result.target == MachineState.DEBOUNCE_FETCH
        assert result.context.pending_filter is not None
        assert result.context.pending_filter.query == "Ann Henry"

    def test_set_employment_keeps_pending_query(self) -> None:
        ctx = PeopleContext(pending_filter=PeopleFilter(query="Ann"))
        result = transition(
            MachineState.DEBOUNCE_FETCH,
            ctx,
            SetEmployment(employment=frozenset({"contractor"})),
        )

        assert result is not None
        assert result.context.pending_filter == PeopleFilter(
            query="Ann", employment=frozenset({"contractor"})
        )

    def test_debounce_elapsed_commits_pending_filter(self) -> None:
        pending = PeopleFilter(query="Ann")
        ctx = PeopleContext(pending_filter=pending)
        result = transition(MachineState.DEBOUNCE_FETCH, ctx, DebounceElapsed())

        assert result is not None
        assert result.target == MachineState.FETCH
        assert result.context.active_filter == pending
        assert result.context.pending_filter is None
        assert result.context.fetching is True

    def test_debounce_elapsed_without_pending_filter_is_fatal(self) -> None:
        with pytest.raises(MachineInvariantError, match="pending filter"):
            transition(MachineState.DEBOUNCE_FETCH, PeopleContext(), DebounceElapsed())

    def test_unlisted_pairs_are_ignored(self) -> None:
        assert transition(MachineState.FETCH, INITIAL_CONTEXT, Retry()) is None
        assert transition(MachineState.IDLE, INITIAL_CONTEXT, DebounceElapsed()) is None
        assert transition(MachineState.SUCCESS, INITIAL_CONTEXT, FetchFailed(error=ERROR)) is None
        assert not handles(MachineState.FAILURE, Start())

    def test_engine_raises_on_invariant_violation(self, machine: PeopleMachine) -> None:
        """The dispatcher surfaces the invariant violation to the caller."""
        machine._state = MachineState.DEBOUNCE_FETCH  # corrupted on purpose

        with pytest.raises(MachineInvariantError):
            machine.send(DebounceElapsed())

        assert machine.state == MachineState.DEBOUNCE_FETCH
