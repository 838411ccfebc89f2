"""Seed data for the in-memory people server."""

from __future__ import annotations

from people_finder.domain.entities import Person

SEED_PEOPLE: tuple[Person, ...] = (
    Person(
        id=1,
        name="Ann Henry",
        job_title="Product manager",
        country="Germany",
        salary=120000,
        currency="EUR",
        employment="employee",
    ),
    Person(
        id=2,
        name="Vittoria Janson",
        job_title="Pianist",
        country="Italy",
        salary=70000,
        currency="EUR",
        employment="contractor",
    ),
    Person(
        id=3,
        name="Samuel Okafor",
        job_title="Backend engineer",
        country="Nigeria",
        salary=95000,
        currency="USD",
        employment="employee",
    ),
    Person(
        id=4,
        name="Mei Tanaka",
        job_title="Data analyst",
        country="Japan",
        salary=8500000,
        currency="JPY",
        employment="contractor",
    ),
    Person(
        id=5,
        name="Lucas Moreau",
        job_title="Designer",
        country="France",
        salary=62000,
        currency="EUR",
        employment="employee",
    ),
    Person(
        id=6,
        name="Priya Raman",
        job_title="Engineering manager",
        country="India",
        salary=4200000,
        currency="INR",
        employment="employee",
    ),
    Person(
        id=7,
        name="Henrik Lund",
        job_title="DevOps consultant",
        country="Sweden",
        salary=780000,
        currency="SEK",
        employment="contractor",
    ),
    Person(
        id=8,
        name="Annabel Price",
        job_title="Recruiter",
        country="United Kingdom",
        salary=48000,
        currency="GBP",
        employment="employee",
    ),
)
