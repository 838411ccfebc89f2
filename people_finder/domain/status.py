"""
Service status projection.

Derives a coarse health label for the people service from the errors
accumulated by the people machine. Pure function of the error count.

Key behaviors:
- No errors: working
- Below the unavailable threshold: degraded
- At or above the unavailable threshold: unavailable
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from people_finder.domain.entities import FetchError


class ServiceStatus(str, Enum):
    """Service status values."""

    WORKING = "working"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"


DEFAULT_DEGRADED_AFTER = 1
DEFAULT_UNAVAILABLE_AFTER = 3


def get_service_status(
    errors: Sequence[FetchError],
    degraded_after: int = DEFAULT_DEGRADED_AFTER,
    unavailable_after: int = DEFAULT_UNAVAILABLE_AFTER,
) -> ServiceStatus:
    """
    Compute the service status from consecutive fetch errors.

    Args:
        errors: Errors accumulated since the last successful fetch
        degraded_after: Error count from which the service is degraded
        unavailable_after: Error count from which the service is unavailable

    Returns:
        ServiceStatus for the given error count
    """
    count = len(errors)
    if count >= unavailable_after:
        return ServiceStatus.UNAVAILABLE
    if count >= degraded_after:
        return ServiceStatus.DEGRADED
    return ServiceStatus.WORKING
