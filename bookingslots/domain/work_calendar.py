"""
Work calendar resolution: a provider's weekday hours projected onto a date.
"""

from __future__ import annotations

import logging
from datetime import date

from .models import LocalInterval, WorkingHours, absolute
from .zones import DstPolicy, project

logger = logging.getLogger(__name__)


def resolve_working_window(
    working_hours: WorkingHours | None,
    day: date,
    zone: str,
    policy: DstPolicy = DstPolicy.COMPATIBLE,
) -> LocalInterval | None:
    """
    Get the working window for a specific date in ``zone``.

    Returns None if the provider does not work that day, including the
    case of malformed hours (missing boundary or end not after start).
    """
    if working_hours is None:
        return None

    hours = working_hours.for_date(day)
    if hours is None or not hours.is_working_day:
        return None
    if hours.start is None or hours.end is None:
        return None

    start = project(day, hours.start, zone, policy)
    end = project(day, hours.end, zone, policy)

    if absolute(start) >= absolute(end):
        logger.warning(
            "Ignoring working hours %s-%s on %s: end is not after start",
            hours.start, hours.end, day.isoformat(),
        )
        return None

    return LocalInterval(start=start, end=end)
