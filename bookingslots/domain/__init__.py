"""
Domain layer - Pure business logic without external dependencies.
"""

from .agenda import compose_agenda
from .collector import collect_blocking_intervals, collect_booking_intervals, collect_time_off_intervals
from .models import (
    AgendaEntry,
    AgendaKind,
    BlockingInterval,
    BlockKind,
    Booking,
    BookingStatus,
    DayHours,
    FullDayTimeOff,
    Granularity,
    LocalInterval,
    Provider,
    RangedTimeOff,
    RecurringTimeOff,
    SlotCandidate,
    TimeOff,
    WorkingHours,
)
from .slot_lattice import DualGranularity, SlotStrategy, generate_slot_lattice
from .work_calendar import resolve_working_window
from .zones import DstPolicy, to_instant, to_local

__all__ = [
    "AgendaEntry",
    "AgendaKind",
    "BlockingInterval",
    "BlockKind",
    "Booking",
    "BookingStatus",
    "DayHours",
    "DstPolicy",
    "DualGranularity",
    "FullDayTimeOff",
    "Granularity",
    "LocalInterval",
    "Provider",
    "RangedTimeOff",
    "RecurringTimeOff",
    "SlotCandidate",
    "SlotStrategy",
    "TimeOff",
    "WorkingHours",
    "collect_blocking_intervals",
    "collect_booking_intervals",
    "collect_time_off_intervals",
    "compose_agenda",
    "generate_slot_lattice",
    "resolve_working_window",
    "to_instant",
    "to_local",
]
