from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
Employment = Literal["employee", "contractor"]

ALL_EMPLOYMENTS: frozenset[Employment] = frozenset({"employee", "contractor"})

# --- People ---


class Person(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    salary: int
    country: str
    job_title: str
    currency: str
    employment: Employment


# --- Filter ---


class PeopleFilter(BaseModel):
    """Filter sent to the people service. Replaced wholesale on every edit."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    employment: frozenset[Employment] = Field(default_factory=lambda: ALL_EMPLOYMENTS)

    def with_query(self, query: str) -> PeopleFilter:
        return self.model_copy(update={"query": query})

    def with_employment(self, employment: frozenset[Employment]) -> PeopleFilter:
        return self.model_copy(update={"employment": frozenset(employment)})

    def matches(self, person: Person) -> bool:
        """Case-insensitive name match restricted to the selected employments."""
        return (
            person.employment in self.employment
            and self.query.lower() in person.name.lower()
        )


DEFAULT_FILTER = PeopleFilter()


def employment_from_flags(employees: bool, contractors: bool) -> frozenset[Employment]:
    """Map the two employment checkboxes to an employment set."""
    selected: set[Employment] = set()
    if employees:
        selected.add("employee")
    if contractors:
        selected.add("contractor")
    return frozenset(selected)


# --- Errors ---


class FetchError(BaseModel):
    """One failed fetch attempt, normalized to a message."""

    model_config = ConfigDict(frozen=True)

    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> FetchError:
        message = str(exc) or type(exc).__name__
        return cls(message=message)
