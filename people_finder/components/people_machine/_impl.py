"""
PeopleMachine - Serial event dispatcher for the people list lifecycle.

Imperative Shell around the transition table: owns the context, runs the
entry/exit hooks and talks to the fetch and scheduler ports.

Key behaviors:
- Events are applied one at a time, in arrival order, each to completion
- Events sent while dispatching are queued, never dispatched re-entrantly
- Every matched transition runs exit hooks, then the action, then entry hooks
- Leaving fetch always cancels the in-flight request
- Entering debounceFetch always restarts the debounce timer
- Outcomes of a superseded fetch invocation are dropped
- Elapses of a restarted or cancelled debounce start are dropped

Threading:
- A re-entrant lock funnels events coming from scheduler threads through
  the same queue, so the context has a single writer.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Sequence

from people_finder.domain.entities import FetchError, Person

from .models import (
    INITIAL_CONTEXT,
    INITIAL_STATE,
    DebounceElapsed,
    FetchFailed,
    FetchSucceeded,
    MachineEvent,
    MachineSnapshot,
    MachineState,
    PeopleContext,
)
from .ports import FetchHandle, FetchPeoplePort, SchedulerPort
from .timer import DEFAULT_DEBOUNCE_MS, DebounceTimer
from .transitions import transition

logger = logging.getLogger(__name__)

Listener = Callable[[MachineSnapshot], None]


class PeopleMachine:
    """
    People machine.

    Independently instantiable; holds no global state.
    """

    def __init__(
        self,
        fetcher: FetchPeoplePort,
        scheduler: SchedulerPort,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        context: PeopleContext | None = None,
    ) -> None:
        """
        Initialize machine in the idle state.

        Args:
            fetcher: People service used on every fetch entry
            scheduler: Scheduler backing the debounce timer
            debounce_ms: Quiet period after the last filter edit
            context: Initial context (defaults to the empty context)
        """
        self._fetcher = fetcher
        self._timer = DebounceTimer(scheduler, debounce_ms)
        self._state = INITIAL_STATE
        self._context = context or INITIAL_CONTEXT
        self._queue: deque[MachineEvent] = deque()
        self._dispatching = False
        self._lock = threading.RLock()
        self._stopped = False
        self._listeners: list[Listener] = []

        # Current fetch invocation
        self._invocation = 0
        self._fetch_handle: FetchHandle | None = None

    # --- Observation ---

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def context(self) -> PeopleContext:
        return self._context

    @property
    def debounce_ms(self) -> int:
        return self._timer.delay_ms

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def snapshot(self) -> MachineSnapshot:
        """Get current state and context."""
        with self._lock:
            return MachineSnapshot(state=self._state, context=self._context)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every transition.

        Returns:
            Function removing the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- Dispatch ---

    def send(self, event: MachineEvent) -> None:
        """
        Submit an event.

        The resulting state is observable as soon as send returns, unless the
        call happens while another event is being dispatched, in which case
        the event runs right after it.
        """
        with self._lock:
            if self._stopped:
                logger.debug("Machine stopped, ignoring %s", type(event).__name__)
                return

            self._queue.append(event)
            if self._dispatching:
                return

            self._dispatching = True
            try:
                while self._queue and not self._stopped:
                    self._process(self._queue.popleft())
            finally:
                self._dispatching = False
                self._queue.clear()

    def stop(self) -> None:
        """Cancel in-flight work and ignore all further events."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._queue.clear()
            self._cancel_fetch()
            self._timer.cancel()
            self._listeners.clear()
            logger.debug("Machine stopped in state %s", self._state.value)

    def _process(self, event: MachineEvent) -> None:
        if self._is_stale(event):
            logger.debug("Dropping stale %s", type(event).__name__)
            return

        result = transition(self._state, self._context, event)
        if result is None:
            logger.debug("Ignoring %s in state %s", type(event).__name__, self._state.value)
            return

        self._on_exit(result.source)
        self._state = result.target
        self._context = result.context
        logger.debug(
            "Transition %s -> %s on %s",
            result.source.value,
            result.target.value,
            type(event).__name__,
        )
        self._on_entry(result.target)
        self._notify()

    def _is_stale(self, event: MachineEvent) -> bool:
        if isinstance(event, DebounceElapsed):
            if event.generation is None:
                return False
            return not self._timer.is_current(event.generation)
        if not isinstance(event, (FetchSucceeded, FetchFailed)):
            return False
        if event.invocation is None:
            return False
        return event.invocation != self._invocation or self._fetch_handle is None

    # --- Entry / exit hooks ---

    def _on_entry(self, state: MachineState) -> None:
        if state == MachineState.FETCH:
            self._invoke_fetch()
        elif state == MachineState.DEBOUNCE_FETCH:
            self._timer.restart(self._on_debounce_elapsed)

    def _on_exit(self, state: MachineState) -> None:
        if state == MachineState.FETCH:
            self._cancel_fetch()
        elif state == MachineState.DEBOUNCE_FETCH:
            self._timer.cancel()

    def _on_debounce_elapsed(self, generation: int) -> None:
        self.send(DebounceElapsed(generation=generation))

    def _invoke_fetch(self) -> None:
        self._invocation += 1
        invocation = self._invocation
        people_filter = self._context.active_filter

        def on_success(records: Sequence[Person]) -> None:
            self.send(FetchSucceeded(records=tuple(records), invocation=invocation))

        def on_failure(error: FetchError) -> None:
            self.send(FetchFailed(error=error, invocation=invocation))

        logger.debug("Fetch #%d started with %r", invocation, people_filter)
        try:
            self._fetch_handle = self._fetcher.start(people_filter, on_success, on_failure)
        except Exception as e:
            logger.exception("Fetch #%d could not be started", invocation)
            self._fetch_handle = _NoopHandle()
            self._queue.append(
                FetchFailed(error=FetchError.from_exception(e), invocation=invocation)
            )

    def _cancel_fetch(self) -> None:
        handle = self._fetch_handle
        if handle is None:
            return
        self._fetch_handle = None
        logger.debug("Fetch #%d cancelled", self._invocation)
        handle.cancel()

    def _notify(self) -> None:
        snapshot = MachineSnapshot(state=self._state, context=self._context)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Machine listener failed")


class _NoopHandle:
    """Handle for a fetch that never started."""

    def cancel(self) -> None:
        pass
