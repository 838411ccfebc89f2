from people_finder.adapters.fake_people_server import (
    FakeFetchHandle,
    FakePeopleServer,
    filter_people,
)
from people_finder.adapters.scheduler import ManualScheduler, ThreadingScheduler
from people_finder.adapters.seed_people import SEED_PEOPLE
from people_finder.adapters.stub_fetcher import StubFetchCall, StubPeopleFetcher

__all__ = [
    "FakeFetchHandle",
    "FakePeopleServer",
    "ManualScheduler",
    "SEED_PEOPLE",
    "StubFetchCall",
    "StubPeopleFetcher",
    "ThreadingScheduler",
    "filter_people",
]
