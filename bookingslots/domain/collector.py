"""
Collection of blocking intervals for one provider on one date.

Bookings and the three kinds of time off are read from immutable
snapshots and normalised to zone-local intervals. Nothing is merged or
deduplicated here; that is up to the consumers.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from .models import (
    BlockingInterval,
    BlockKind,
    Booking,
    FullDayTimeOff,
    LocalInterval,
    RangedTimeOff,
    RecurringTimeOff,
    TimeOff,
    absolute,
)
from .zones import DstPolicy, day_bounds, project, to_local

logger = logging.getLogger(__name__)


def collect_booking_intervals(
    bookings: Iterable[Booking],
    day: date,
    zone: str,
    provider_id: Optional[str] = None,
    blocking_only: bool = True,
) -> List[BlockingInterval]:
    """
    Convert bookings overlapping the day into zone-local intervals.

    With ``blocking_only`` only scheduled bookings are kept; otherwise
    every non-cancelled booking is kept (the agenda shows completed and
    no-show bookings too).
    """
    day_range = day_bounds(day, zone)
    intervals: List[BlockingInterval] = []

    for booking in bookings:
        if provider_id is not None and booking.provider_id != provider_id:
            continue
        if not booking.visible or (blocking_only and not booking.blocks):
            continue
        if booking.start >= booking.end:
            logger.warning("Skipping booking %s with empty interval", booking.id)
            continue

        interval = LocalInterval(start=to_local(booking.start, zone), end=to_local(booking.end, zone))
        if not interval.overlaps(day_range):
            continue

        intervals.append(
            BlockingInterval(
                kind=BlockKind.BOOKING,
                interval=interval,
                source_id=booking.id,
                declared_minutes=booking.duration_minutes,
                metadata={**booking.metadata, "booking_id": booking.id, "status": booking.status.value},
            )
        )

    return intervals


def collect_time_off_intervals(
    time_offs: Iterable[TimeOff],
    day: date,
    zone: str,
    provider_id: Optional[str] = None,
    policy: DstPolicy = DstPolicy.COMPATIBLE,
) -> List[BlockingInterval]:
    """
    Resolve active time off onto ``day``.

    Full-day entries span the whole date, ranged entries are clamped to
    the date, recurring entries are projected only when the weekday
    matches.
    """
    day_range = day_bounds(day, zone)
    intervals: List[BlockingInterval] = []

    for time_off in time_offs:
        if provider_id is not None and time_off.provider_id != provider_id:
            continue
        if not time_off.active:
            continue

        resolved = _resolve_time_off(time_off, day, zone, day_range, policy)
        if resolved is not None:
            intervals.append(resolved)

    return intervals


def collect_blocking_intervals(
    day: date,
    zone: str,
    bookings: Iterable[Booking],
    time_offs: Iterable[TimeOff],
    provider_id: Optional[str] = None,
    policy: DstPolicy = DstPolicy.COMPATIBLE,
) -> List[BlockingInterval]:
    """Every interval that blocks new bookings on ``day``."""
    intervals = collect_booking_intervals(bookings, day, zone, provider_id=provider_id)
    intervals.extend(
        collect_time_off_intervals(time_offs, day, zone, provider_id=provider_id, policy=policy)
    )

    logger.debug("Collected %d blocking intervals for %s in %s", len(intervals), day, zone)
    return intervals


def _resolve_time_off(
    time_off: TimeOff,
    day: date,
    zone: str,
    day_range: LocalInterval,
    policy: DstPolicy,
) -> BlockingInterval | None:
    metadata = {"time_off_id": time_off.id, "reason": time_off.reason, "provider_id": time_off.provider_id}

    match time_off:
        case FullDayTimeOff(day=off_day):
            if off_day != day:
                return None
            return BlockingInterval(
                kind=BlockKind.FULL_DAY,
                interval=day_range,
                source_id=time_off.id,
                metadata=metadata,
            )

        case RangedTimeOff(start=start, end=end):
            if start >= end:
                logger.warning("Skipping time off %s with empty range", time_off.id)
                return None
            interval = LocalInterval(start=to_local(start, zone), end=to_local(end, zone))
            clamped = interval.intersect(day_range)
            if clamped is None:
                return None
            return BlockingInterval(
                kind=BlockKind.RANGED,
                interval=clamped,
                source_id=time_off.id,
                metadata=metadata,
            )

        case RecurringTimeOff(start_time=start_time, end_time=end_time):
            if not time_off.matches(day):
                return None
            start = project(day, start_time, zone, policy)
            end = project(day, end_time, zone, policy)
            if absolute(start) >= absolute(end):
                logger.warning("Skipping recurring time off %s: end is not after start", time_off.id)
                return None
            return BlockingInterval(
                kind=BlockKind.RECURRING,
                interval=LocalInterval(start=start, end=end),
                source_id=time_off.id,
                metadata=metadata,
            )

        case _:
            raise TypeError(f"Unsupported time off record: {time_off!r}")
