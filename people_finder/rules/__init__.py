from people_finder.rules.loader import load_rules, parse_rules
from people_finder.rules.models import (
    FakeServerRules,
    MachineRules,
    ProjectRules,
    Rules,
    ServiceStatusRules,
)

__all__ = [
    "FakeServerRules",
    "MachineRules",
    "ProjectRules",
    "Rules",
    "ServiceStatusRules",
    "load_rules",
    "parse_rules",
]
