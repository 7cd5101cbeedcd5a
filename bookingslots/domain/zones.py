"""
Conversion between absolute instants and shop-local wall-clock time.

Instants are stored in UTC. Wall clocks are interpreted in an IANA zone
with full DST rules, so the same ``09:00`` maps to different UTC offsets
in winter and summer. Wall clocks that fall into a DST gap (spring
forward) or fold (fall back) are resolved through a ``DstPolicy``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from enum import Enum

import pendulum
from pendulum import DateTime
from pendulum.tz.exceptions import AmbiguousTime, InvalidTimezone, NonExistingTime

from .exceptions import (
    AmbiguousOrNonexistentLocalTimeError,
    InvalidInputError,
    InvalidZoneError,
)
from .models import LocalInterval

logger = logging.getLogger(__name__)


class DstPolicy(str, Enum):
    """
    How to resolve a wall clock inside a DST gap or fold.

    RAISE       raise AmbiguousOrNonexistentLocalTimeError
    EARLIER     fold: first occurrence, gap: shift back by the gap length
    LATER       fold: second occurrence, gap: shift forward by the gap length
    COMPATIBLE  fold: first occurrence, gap: shift forward by the gap length
    """
    RAISE = "raise"
    EARLIER = "earlier"
    LATER = "later"
    COMPATIBLE = "compatible"


def get_zone(zone: str):
    """Return the pendulum timezone for ``zone`` or raise InvalidZoneError."""
    if not isinstance(zone, str) or not zone.strip():
        raise InvalidZoneError(zone)
    try:
        return pendulum.timezone(zone)
    except (InvalidTimezone, ValueError, KeyError) as exc:
        raise InvalidZoneError(zone) from exc


def to_local(instant: datetime, zone: str) -> DateTime:
    """
    Express an absolute instant as wall-clock time in ``zone``.

    Naive values are taken to be UTC, the storage convention.
    """
    tz = get_zone(zone)
    return pendulum.instance(instant, tz="UTC").in_timezone(tz)


def to_instant(
    wall_clock: datetime,
    zone: str,
    policy: DstPolicy = DstPolicy.RAISE,
) -> DateTime:
    """
    Resolve a wall-clock value in ``zone`` to an absolute UTC instant.

    An aware value already pins its offset and converts directly, which
    makes ``to_instant(to_local(i, z), z) == i`` hold for every instant.

    Raises:
        InvalidZoneError: If the zone is unknown
        AmbiguousOrNonexistentLocalTimeError: If the wall clock is in a
            gap or fold and ``policy`` is ``DstPolicy.RAISE``
    """
    tz = get_zone(zone)

    if wall_clock.tzinfo is not None:
        return pendulum.instance(wall_clock).in_timezone("UTC")

    naive = wall_clock.replace(fold=0)

    try:
        local = tz.convert(naive, raise_on_unknown_times=True)
    except NonExistingTime as exc:
        if policy is DstPolicy.RAISE:
            raise AmbiguousOrNonexistentLocalTimeError(wall_clock, zone, "nonexistent") from exc
        fold = 0 if policy is DstPolicy.EARLIER else 1
        local = tz.convert(naive.replace(fold=fold))
        logger.debug("Resolved nonexistent %s in %s to %s (%s)", naive, zone, local, policy.value)
    except AmbiguousTime as exc:
        if policy is DstPolicy.RAISE:
            raise AmbiguousOrNonexistentLocalTimeError(wall_clock, zone, "ambiguous") from exc
        fold = 1 if policy is DstPolicy.LATER else 0
        local = tz.convert(naive.replace(fold=fold))
        logger.debug("Resolved ambiguous %s in %s to %s (%s)", naive, zone, local, policy.value)

    return pendulum.instance(local.astimezone(pendulum.UTC))


def project(
    day: date,
    wall_time: time,
    zone: str,
    policy: DstPolicy = DstPolicy.RAISE,
) -> DateTime:
    """Anchor a bare wall-clock time onto ``day`` and return it zone-local."""
    naive = datetime.combine(day, wall_time.replace(tzinfo=None))
    return to_local(to_instant(naive, zone, policy), zone)


def day_bounds(day: date, zone: str) -> LocalInterval:
    """
    The whole calendar date in ``zone`` as ``[midnight, next midnight)``.

    Zones that skip midnight on transition days start at the first valid
    instant after it.
    """
    start = project(day, time(0, 0), zone, DstPolicy.COMPATIBLE)
    end = project(day + timedelta(days=1), time(0, 0), zone, DstPolicy.COMPATIBLE)
    return LocalInterval(start=start, end=end)


def parse_day(value: date | str) -> date:
    """
    Parse a calendar date given as ``YYYY-MM-DD``.

    Raises:
        InvalidInputError: If the value is not a valid date
    """
    if isinstance(value, datetime):
        raise InvalidInputError(f"Expected a calendar date without time, got {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidInputError(f"Expected a date string, got {value!r}")

    try:
        return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def parse_wall_time(value: str) -> time:
    """Parse an ``HH:MM`` wall-clock string."""
    hours, _, minutes = value.strip().partition(":")
    if not hours.isdigit() or not minutes.isdigit():
        raise ValueError(f"Invalid wall-clock time {value!r}, expected HH:MM")
    return time(hour=int(hours), minute=int(minutes))
