"""
Agenda composition: one chronological timeline for display.

Unlike the slot lattice, nothing is resolved here. Entries are never
split or merged, only typed and sorted.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from .models import AgendaEntry, AgendaKind, BlockingInterval, LocalInterval, absolute


def compose_agenda(
    time_off: Iterable[BlockingInterval],
    bookings: Iterable[BlockingInterval],
    working_window: Optional[LocalInterval] = None,
    window_metadata: Optional[Mapping[str, Any]] = None,
) -> List[AgendaEntry]:
    """
    Merge working window, bookings and time off into a sorted list.

    Args:
        time_off: Time-off intervals as produced by the collector
        bookings: Booking intervals as produced by the collector
        working_window: Optional working window shown as its own entry
        window_metadata: Opaque metadata for the working-window entry

    Returns:
        Entries ordered by local start; ties keep insertion order
        (working window, then bookings, then time off)
    """
    entries: List[AgendaEntry] = []

    if working_window is not None:
        entries.append(
            AgendaEntry(
                kind=AgendaKind.WORKING_WINDOW,
                interval=working_window,
                metadata=dict(window_metadata or {}),
            )
        )

    for block in bookings:
        entries.append(
            AgendaEntry(kind=AgendaKind.BOOKING, interval=block.interval, metadata=block.metadata)
        )

    for block in time_off:
        entries.append(
            AgendaEntry(
                kind=AgendaKind.EXCEPTION,
                interval=block.interval,
                subtype=block.kind,
                metadata=block.metadata,
            )
        )

    # list.sort is stable
    entries.sort(key=lambda entry: absolute(entry.interval.start))
    return entries
