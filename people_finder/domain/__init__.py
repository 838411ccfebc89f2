from people_finder.domain.entities import (
    ALL_EMPLOYMENTS,
    DEFAULT_FILTER,
    Employment,
    FetchError,
    PeopleFilter,
    Person,
    employment_from_flags,
)
from people_finder.domain.status import ServiceStatus, get_service_status

__all__ = [
    "ALL_EMPLOYMENTS",
    "DEFAULT_FILTER",
    "Employment",
    "FetchError",
    "PeopleFilter",
    "Person",
    "ServiceStatus",
    "employment_from_flags",
    "get_service_status",
]
