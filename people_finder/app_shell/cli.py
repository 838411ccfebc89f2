import argparse
import logging
import sys
import threading
from pathlib import Path

from people_finder.adapters.fake_people_server import FakePeopleServer
from people_finder.adapters.scheduler import ThreadingScheduler
from people_finder.components.people_machine import (
    MachineSnapshot,
    MachineState,
    PeopleMachine,
    create_people_machine,
    run_set_employment,
    run_set_query,
    run_start,
)
from people_finder.domain.entities import DEFAULT_FILTER, employment_from_flags
from people_finder.domain.status import get_service_status
from people_finder.rules.loader import load_rules
from people_finder.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"

SETTLED_STATES = (MachineState.SUCCESS, MachineState.FAILURE)


def get_rules(path: str) -> Rules:
    if not Path(path).exists():
        logger.error(f"Rules file {path} not found.")
        sys.exit(1)

    try:
        return load_rules(Path(path))
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)


def wait_until_settled(machine: PeopleMachine, timeout: float) -> MachineSnapshot | None:
    """Block until the machine reaches success or failure."""
    settled = threading.Event()

    def on_change(snapshot: MachineSnapshot) -> None:
        if snapshot.state in SETTLED_STATES:
            settled.set()

    unsubscribe = machine.subscribe(on_change)
    try:
        if machine.state in SETTLED_STATES:
            return machine.snapshot()
        if not settled.wait(timeout):
            return None
        return machine.snapshot()
    finally:
        unsubscribe()


def print_snapshot(snapshot: MachineSnapshot, rules: Rules) -> None:
    ctx = snapshot.context
    thresholds = rules.service_status
    status = get_service_status(
        ctx.errors,
        degraded_after=thresholds.degraded_after_errors,
        unavailable_after=thresholds.unavailable_after_errors,
    )

    print(f"Query: {ctx.active_filter.query!r}")
    print(f"Employment: {', '.join(sorted(ctx.active_filter.employment)) or '-'}")
    print(f"Service status: {status.value}")

    if snapshot.state == MachineState.FAILURE:
        for error in ctx.errors:
            print(f" ! {error.message}")
        return

    print(f"Found {len(ctx.records)} people:")
    for person in ctx.records:
        print(
            f" - {person.name} ({person.job_title}, {person.country}) "
            f"{person.salary} {person.currency} [{person.employment}]"
        )


def handle_search(rules: Rules, args: argparse.Namespace) -> None:
    scheduler = ThreadingScheduler()
    server = FakePeopleServer.from_rules(scheduler, rules.fake_server)
    machine = create_people_machine(server, scheduler, rules=rules)

    try:
        run_start(machine)

        # Edits while the first fetch is in flight cancel it and debounce a new one
        if args.query != DEFAULT_FILTER.query:
            run_set_query(machine, args.query)
        employment = employment_from_flags(not args.no_employees, not args.no_contractors)
        if employment != DEFAULT_FILTER.employment:
            run_set_employment(machine, employment)

        snapshot = wait_until_settled(machine, args.timeout)
        if snapshot is None:
            logger.error(f"No answer from the people service within {args.timeout}s.")
            sys.exit(1)

        print_snapshot(snapshot, rules)
        if snapshot.state == MachineState.FAILURE:
            sys.exit(2)
    finally:
        machine.stop()
        scheduler.shutdown()


def handle_check_rules(rules: Rules, rules_path: str) -> None:
    print(f"Rules {rules.project.slug} v{rules.project.rules_version} loaded from {rules_path}")
    print(f"Debounce: {rules.machine.debounce_ms} ms")
    print("Configuration Validated.")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="People Finder CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # search
    search_parser = subparsers.add_parser("search", help="Search people on the fake server")
    search_parser.add_argument("--query", default="", help="Case-insensitive name filter")
    search_parser.add_argument(
        "--no-employees", action="store_true", help="Exclude employees"
    )
    search_parser.add_argument(
        "--no-contractors", action="store_true", help="Exclude contractors"
    )
    search_parser.add_argument(
        "--timeout", type=float, default=10.0, help="Seconds to wait for results"
    )

    # check-rules
    subparsers.add_parser("check-rules", help="Validate the rules file")

    args = parser.parse_args(argv)

    rules = get_rules(args.rules)

    if args.command == "search":
        handle_search(rules, args)
    elif args.command == "check-rules":
        handle_check_rules(rules, args.rules)


if __name__ == "__main__":
    main()
