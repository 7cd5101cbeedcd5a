"""
Domain models for intervals, schedules, slots and agenda entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pendulum import DateTime


WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def sunday_based_weekday(day: date) -> int:
    """Weekday number with 0=Sunday .. 6=Saturday, as stored on recurring time off."""
    return day.isoweekday() % 7


def absolute(moment: datetime) -> float:
    """
    POSIX timestamp of an aware value.

    Aware datetimes sharing one tzinfo compare by wall clock, which
    misorders the repeated hour of a fall-back day. Order by this instead.
    """
    return moment.timestamp()


@dataclass(frozen=True)
class LocalInterval:
    """
    Half-open wall-clock interval ``[start, end)`` in one named zone.

    Both boundaries are aware pendulum DateTimes, so the absolute
    instants are always one ``in_timezone("UTC")`` away.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if absolute(self.start) >= absolute(self.end):
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    @property
    def zone_name(self) -> str:
        return self.start.timezone_name

    @property
    def start_utc(self) -> DateTime:
        return self.start.in_timezone("UTC")

    @property
    def end_utc(self) -> DateTime:
        return self.end.in_timezone("UTC")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((absolute(self.end) - absolute(self.start)) // 60)

    def overlaps(self, other: "LocalInterval") -> bool:
        """Half-open overlap test; touching intervals do not overlap."""
        return absolute(self.start) < absolute(other.end) and absolute(other.start) < absolute(self.end)

    def contains(self, other: "LocalInterval") -> bool:
        """Check if ``other`` lies completely inside this interval."""
        return absolute(self.start) <= absolute(other.start) and absolute(other.end) <= absolute(self.end)

    def intersect(self, other: "LocalInterval") -> "LocalInterval | None":
        """
        Calculate the intersection of two intervals.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return LocalInterval(
            start=max(self.start, other.start, key=absolute),
            end=min(self.end, other.end, key=absolute),
        )

    def split(self, minutes: int) -> List["LocalInterval"]:
        """Cut the interval into consecutive pieces of ``minutes`` (last one may be shorter)."""
        pieces: List[LocalInterval] = []
        cursor = self.start
        while absolute(cursor) < absolute(self.end):
            piece_end = min(cursor.add(minutes=minutes), self.end, key=absolute)
            pieces.append(LocalInterval(start=cursor, end=piece_end))
            cursor = piece_end
        return pieces

    def to_dict(self) -> Dict[str, str]:
        return {
            "startLocal": self.start.to_iso8601_string(),
            "endLocal": self.end.to_iso8601_string(),
            "startUTC": self.start_utc.to_iso8601_string(),
            "endUTC": self.end_utc.to_iso8601_string(),
        }

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DayHours:
    """Working hours for one weekday; ``None`` boundaries mean not working."""
    start: Optional[time] = None
    end: Optional[time] = None
    is_working_day: bool = True


@dataclass(frozen=True)
class WorkingHours:
    """
    A provider's weekly working hours keyed by ``mon`` .. ``sun``.

    Days missing from the mapping are days off.
    """
    days: Mapping[str, DayHours] = field(default_factory=dict)

    def for_date(self, day: date) -> DayHours | None:
        return self.days.get(WEEKDAY_KEYS[day.weekday()])


@dataclass(frozen=True)
class Provider:
    """A bookable service provider (employee) belonging to a shop."""
    id: str
    shop_id: str
    name: str = ""
    working_hours: WorkingHours = field(default_factory=WorkingHours)


class BookingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


@dataclass(frozen=True)
class Booking:
    """
    A booking snapshot as read from persistence.

    ``start``/``end`` are absolute instants. ``duration_minutes`` is the
    declared service length, which may differ from ``end - start``.
    """
    id: str
    provider_id: str
    start: DateTime
    end: DateTime
    status: BookingStatus = BookingStatus.SCHEDULED
    duration_minutes: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def blocks(self) -> bool:
        """Only scheduled bookings take time away from the lattice."""
        return self.status is BookingStatus.SCHEDULED

    @property
    def visible(self) -> bool:
        """Cancelled bookings never show up anywhere."""
        return self.status is not BookingStatus.CANCELLED


@dataclass(frozen=True)
class FullDayTimeOff:
    """Time off covering one whole calendar date in the provider's zone."""
    id: str
    provider_id: str
    day: date
    reason: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class RangedTimeOff:
    """Time off between two absolute instants."""
    id: str
    provider_id: str
    start: DateTime
    end: DateTime
    reason: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class RecurringTimeOff:
    """Weekly time off: weekday (0=Sunday .. 6=Saturday) plus a wall-clock range."""
    id: str
    provider_id: str
    weekday: int
    start_time: time
    end_time: time
    reason: Optional[str] = None
    active: bool = True

    def __post_init__(self):
        if self.weekday not in range(7):
            raise ValueError(f"weekday must be between 0 and 6, got {self.weekday}")

    def matches(self, day: date) -> bool:
        return sunday_based_weekday(day) == self.weekday


TimeOff = Union[FullDayTimeOff, RangedTimeOff, RecurringTimeOff]


class BlockKind(str, Enum):
    BOOKING = "booking"
    FULL_DAY = "full-day"
    RANGED = "range"
    RECURRING = "recurring"


@dataclass(frozen=True)
class BlockingInterval:
    """
    A booking or time-off record resolved onto one date and zone.

    ``metadata`` is carried for display and never interpreted.
    """
    kind: BlockKind
    interval: LocalInterval
    source_id: Optional[str] = None
    declared_minutes: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def effective_minutes(self) -> int:
        return max(self.interval.duration_minutes(), self.declared_minutes or 0)

    @property
    def is_booking(self) -> bool:
        return self.kind is BlockKind.BOOKING


class Granularity(str, Enum):
    COARSE = "coarse"
    FINE = "fine"


@dataclass(frozen=True)
class SlotCandidate:
    """An offerable appointment start with its granularity tier."""
    interval: LocalInterval
    granularity: Granularity
    minutes: int

    @property
    def start(self) -> DateTime:
        return self.interval.start

    @property
    def end(self) -> DateTime:
        return self.interval.end

    @property
    def start_utc(self) -> DateTime:
        return self.interval.start_utc

    @property
    def end_utc(self) -> DateTime:
        return self.interval.end_utc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startLocalISO": self.start.to_iso8601_string(),
            "endLocalISO": self.end.to_iso8601_string(),
            "startUTC": self.start_utc.to_iso8601_string(),
            "endUTC": self.end_utc.to_iso8601_string(),
            "interval": self.minutes,
        }

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:mm - HH:mm (N min)
        """
        weekday = self.start.format("dddd")
        date_str = self.start.format("DD.MM.YYYY")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"
        return f"{weekday}, {date_str} | {time_str} ({self.minutes} min)"


class AgendaKind(str, Enum):
    WORKING_WINDOW = "workingWindow"
    BOOKING = "booking"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class AgendaEntry:
    kind: AgendaKind
    interval: LocalInterval
    subtype: Optional[BlockKind] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.kind.value}
        if self.subtype is not None:
            data["subtype"] = self.subtype.value
        data.update(self.interval.to_dict())
        data["meta"] = dict(self.metadata)
        return data
