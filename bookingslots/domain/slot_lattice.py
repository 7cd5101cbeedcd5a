"""
Core business logic for deriving bookable slots from a working window.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Protocol, Sequence

from pendulum import DateTime

from .exceptions import InvalidInputError
from .models import BlockingInterval, Granularity, LocalInterval, SlotCandidate, absolute

logger = logging.getLogger(__name__)


class SlotStrategy(Protocol):
    """Anything that turns a working window and blocking set into slots."""

    def generate(
        self,
        window: LocalInterval | None,
        blocks: Sequence[BlockingInterval],
    ) -> List[SlotCandidate]:
        """Return offerable slots in presentation order."""


class CoarseVerdict(str, Enum):
    FREE = "free"
    FULLY_OCCUPIED = "fully-occupied"
    SUBRANGES_OCCUPIED = "subranges-occupied"
    PARTIALLY_OCCUPIED = "partially-occupied"


@dataclass(frozen=True)
class DualGranularity:
    """
    Offers coarse slots where time is completely free and falls back to
    fine slots around partial bookings.

    Algorithm:
    1. Floor the window start to a fine mark and walk fine steps; keep a
       fine slot if no blocking interval overlaps it
    2. Walk coarse marks; a coarse slot survives only when nothing
       overlaps it at all
    3. Drop fine slots that sit inside a coarse slot fully held by one
       long booking or time off
    4. Return coarse slots, then fine slots, each chronological
    """
    fine_minutes: int = 15
    coarse_minutes: int = 30

    def __post_init__(self):
        if self.fine_minutes <= 0 or self.coarse_minutes <= 0:
            raise InvalidInputError(
                f"Granularities must be positive, got fine={self.fine_minutes} "
                f"coarse={self.coarse_minutes}"
            )
        if self.coarse_minutes % self.fine_minutes != 0:
            raise InvalidInputError(
                f"coarse_minutes ({self.coarse_minutes}) must be a multiple of "
                f"fine_minutes ({self.fine_minutes})"
            )

    def generate(
        self,
        window: LocalInterval | None,
        blocks: Sequence[BlockingInterval],
    ) -> List[SlotCandidate]:
        return generate_slot_lattice(window, blocks, self)


def generate_slot_lattice(
    window: LocalInterval | None,
    blocks: Sequence[BlockingInterval],
    scheme: DualGranularity | None = None,
) -> List[SlotCandidate]:
    """
    Derive coarse and fine slots for one working window.

    Args:
        window: The working window for the date, None when not working
        blocks: Blocking intervals resolved onto the same date and zone
        scheme: Granularities to use, 30/15 minutes by default

    Returns:
        Coarse slots in chronological order followed by fine slots in
        chronological order
    """
    scheme = scheme or DualGranularity()

    if window is None or window.duration_minutes() < scheme.fine_minutes:
        return []

    fine_slots = [
        interval for interval in _walk(window, scheme.fine_minutes)
        if not _overlaps_any(interval, blocks)
    ]

    coarse_slots: List[LocalInterval] = []
    fully_occupied: List[LocalInterval] = []

    for interval in _walk(window, scheme.coarse_minutes):
        verdict = _judge_coarse(interval, blocks, scheme)
        if verdict is CoarseVerdict.FREE:
            coarse_slots.append(interval)
            continue
        if verdict is CoarseVerdict.FULLY_OCCUPIED:
            fully_occupied.append(interval)
        logger.debug("Coarse slot %s rejected: %s", interval, verdict.value)

    fine_slots = [
        interval for interval in fine_slots
        if not any(held.contains(interval) for held in fully_occupied)
    ]

    logger.debug(
        "Lattice for %s: %d coarse, %d fine slots from %d blocking intervals",
        window, len(coarse_slots), len(fine_slots), len(blocks),
    )

    return [
        SlotCandidate(interval=interval, granularity=Granularity.COARSE, minutes=scheme.coarse_minutes)
        for interval in coarse_slots
    ] + [
        SlotCandidate(interval=interval, granularity=Granularity.FINE, minutes=scheme.fine_minutes)
        for interval in fine_slots
    ]


def fits_service(
    slot: SlotCandidate,
    service_minutes: int,
    window: LocalInterval,
    blocks: Sequence[BlockingInterval],
) -> bool:
    """Check that a service of ``service_minutes`` starting at the slot is free."""
    end = slot.start.add(minutes=service_minutes)
    if absolute(end) > absolute(window.end):
        return False
    return not _overlaps_any(LocalInterval(start=slot.start, end=end), blocks)


def floor_to_mark(moment: DateTime, minutes: int) -> DateTime:
    """
    Floor a wall-clock time to the previous multiple of ``minutes``
    counted from local midnight.

    Example (15): 09:07 -> 09:00, 09:16 -> 09:15
    """
    minute_of_day = moment.hour * 60 + moment.minute
    floored = minute_of_day - minute_of_day % minutes
    return moment.set(hour=floored // 60, minute=floored % 60, second=0, microsecond=0)


def _walk(window: LocalInterval, step_minutes: int) -> Iterator[LocalInterval]:
    """
    Yield ``step_minutes`` intervals on canonical marks that lie inside
    the window. Marks before the window start are skipped.
    """
    cursor = floor_to_mark(window.start, step_minutes)

    while True:
        slot_end = cursor.add(minutes=step_minutes)
        if absolute(slot_end) > absolute(window.end):
            return
        if absolute(cursor) >= absolute(window.start):
            yield LocalInterval(start=cursor, end=slot_end)
        cursor = slot_end


def _overlaps_any(interval: LocalInterval, blocks: Sequence[BlockingInterval]) -> bool:
    return any(block.interval.overlaps(interval) for block in blocks)


def _judge_coarse(
    candidate: LocalInterval,
    blocks: Sequence[BlockingInterval],
    scheme: DualGranularity,
) -> CoarseVerdict:
    overlapping = [block for block in blocks if block.interval.overlaps(candidate)]

    if any(
        block.effective_minutes >= scheme.coarse_minutes and block.interval.contains(candidate)
        for block in overlapping
    ):
        return CoarseVerdict.FULLY_OCCUPIED

    sub_ranges = candidate.split(scheme.fine_minutes)
    if all(_overlaps_any(sub_range, overlapping) for sub_range in sub_ranges):
        return CoarseVerdict.SUBRANGES_OCCUPIED

    if overlapping:
        return CoarseVerdict.PARTIALLY_OCCUPIED

    return CoarseVerdict.FREE
