from pathlib import Path

import pytest

from people_finder.adapters.scheduler import ManualScheduler
from people_finder.adapters.stub_fetcher import StubPeopleFetcher
from people_finder.rules.loader import load_rules
from people_finder.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def rules() -> Rules:
    """Load the REAL rules from the project root."""
    rules_path = PROJECT_ROOT / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def fetcher() -> StubPeopleFetcher:
    return StubPeopleFetcher()
