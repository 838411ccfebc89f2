import logging
import os
import threading
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from uuid import uuid4

from fastapi import Depends, HTTPException, status

from people_finder.adapters.fake_people_server import FakePeopleServer
from people_finder.adapters.scheduler import ThreadingScheduler
from people_finder.components.people_machine import PeopleMachine, create_people_machine
from people_finder.rules.loader import load_rules
from people_finder.rules.models import Rules

logger = logging.getLogger(__name__)

MachineFactory = Callable[[], PeopleMachine]


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("PEOPLE_FINDER_RULES", str(self.base_dir / "rules.yaml"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Sessions ---
class SessionRegistry:
    """
    In-process registry of people machines, one per session.

    Machines are session-scoped and never persisted.
    """

    def __init__(self, factory: MachineFactory) -> None:
        self._factory = factory
        self._machines: dict[str, PeopleMachine] = {}
        self._lock = threading.Lock()

    def create(self) -> tuple[str, PeopleMachine]:
        session_id = uuid4().hex
        machine = self._factory()
        with self._lock:
            self._machines[session_id] = machine
        logger.info("Session %s created", session_id)
        return session_id, machine

    def get(self, session_id: str) -> PeopleMachine | None:
        with self._lock:
            return self._machines.get(session_id)

    def close(self, session_id: str) -> bool:
        with self._lock:
            machine = self._machines.pop(session_id, None)
        if machine is None:
            return False
        machine.stop()
        logger.info("Session %s closed", session_id)
        return True

    def close_all(self) -> None:
        with self._lock:
            machines = list(self._machines.values())
            self._machines.clear()
        for machine in machines:
            machine.stop()

    def __len__(self) -> int:
        with self._lock:
            return len(self._machines)


def build_machine_factory(rules: Rules) -> MachineFactory:
    """Machines backed by the fake people server in real time."""
    scheduler = ThreadingScheduler()
    server = FakePeopleServer.from_rules(scheduler, rules.fake_server)

    def factory() -> PeopleMachine:
        return create_people_machine(server, scheduler, rules=rules)

    return factory


@lru_cache
def get_registry() -> SessionRegistry:
    return SessionRegistry(build_machine_factory(get_rules()))


def get_machine(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> PeopleMachine:
    machine = registry.get(session_id)
    if machine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return machine
