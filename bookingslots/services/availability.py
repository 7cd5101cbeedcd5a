"""
Application service for slot and agenda queries.

The service fetches immutable snapshots through a repository adapter and
delegates the actual computation to the pure domain functions. The
repository dependency is a simple protocol so tests can plug in a stub.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.agenda import compose_agenda
from ..domain.collector import (
    collect_blocking_intervals,
    collect_booking_intervals,
    collect_time_off_intervals,
)
from ..domain.exceptions import InvalidInputError
from ..domain.models import AgendaEntry, Booking, SlotCandidate, TimeOff, WorkingHours
from ..domain.slot_lattice import DualGranularity, SlotStrategy, fits_service
from ..domain.work_calendar import resolve_working_window
from ..domain.zones import DstPolicy, day_bounds, get_zone, parse_day, to_local

logger = logging.getLogger(__name__)

DEFAULT_ZONE = "Europe/Amsterdam"


class ScheduleRepositoryProtocol(Protocol):
    """Protocol describing the read contracts the service needs."""

    async def get_provider_working_hours(self, provider_id: str) -> WorkingHours:
        """Return weekly hours; raise ProviderNotFoundError for unknown ids."""

    async def get_provider_zone(self, shop_id: str) -> Optional[str]:
        """Return the shop's zone identifier, None when unset."""

    async def list_bookings(
        self,
        provider_id: str,
        start: DateTime,
        end: DateTime,
    ) -> Sequence[Booking]:
        """Return bookings whose absolute interval overlaps ``[start, end)``."""

    async def list_exceptions(
        self,
        provider_id: str,
        start: DateTime,
        end: DateTime,
    ) -> Sequence[TimeOff]:
        """Return time off that may touch ``[start, end)``, recurring entries included."""


class AvailabilityService:
    """
    Computes bookable slots and day agendas for the providers of one shop.

    Every call is a pure function of the fetched snapshots; nothing is
    reserved, so callers committing a booking must recheck with
    ``is_slot_available`` right before the write.
    """

    def __init__(
        self,
        repository: ScheduleRepositoryProtocol,
        shop_id: str,
        default_zone: str = DEFAULT_ZONE,
        dst_policy: DstPolicy = DstPolicy.COMPATIBLE,
    ) -> None:
        self._repository = repository
        self._shop_id = shop_id
        self._default_zone = default_zone
        self._dst_policy = dst_policy

    async def resolve_zone(self, zone: Optional[str] = None) -> str:
        """Explicit zone, else the shop's zone, else the default; validated."""
        if zone is None:
            zone = await self._repository.get_provider_zone(self._shop_id) or self._default_zone
        get_zone(zone)
        return zone

    async def compute_slots(
        self,
        provider_id: str,
        day: date | str,
        zone: Optional[str] = None,
        fine_minutes: int = 15,
        coarse_minutes: int = 30,
        service_minutes: Optional[int] = None,
        strategy: Optional[SlotStrategy] = None,
    ) -> List[SlotCandidate]:
        """
        Return the offerable slots for a provider on a date.

        Args:
            provider_id: Provider to query
            day: Calendar date in the provider's zone
            zone: Zone override, defaults to the shop's zone
            fine_minutes: Fine granularity
            coarse_minutes: Coarse granularity, a multiple of fine_minutes
            service_minutes: When given, keep only starts that fit a
                service of this length
            strategy: Alternative slot strategy replacing the granularities

        Raises:
            InvalidInputError: For a malformed date, zone or granularity
        """
        target_day = parse_day(day)
        strategy = strategy or DualGranularity(fine_minutes=fine_minutes, coarse_minutes=coarse_minutes)
        if service_minutes is not None and service_minutes <= 0:
            raise InvalidInputError(f"service_minutes must be positive, got {service_minutes}")
        zone = await self.resolve_zone(zone)

        working_hours, bookings, time_offs = await self._fetch_snapshots(provider_id, target_day, zone)

        window = resolve_working_window(working_hours, target_day, zone, self._dst_policy)
        if window is None:
            logger.debug("Provider %s is not working on %s", provider_id, target_day)
            return []

        blocks = collect_blocking_intervals(
            target_day, zone, bookings, time_offs,
            provider_id=provider_id, policy=self._dst_policy,
        )
        slots = strategy.generate(window, blocks)

        if service_minutes is not None:
            slots = [slot for slot in slots if fits_service(slot, service_minutes, window, blocks)]

        return slots

    async def compute_agenda(
        self,
        provider_id: str,
        day: date | str,
        zone: Optional[str] = None,
        include_working_window: bool = True,
    ) -> List[AgendaEntry]:
        """Return the merged, sorted agenda of a provider for a date."""
        target_day = parse_day(day)
        zone = await self.resolve_zone(zone)

        working_hours, bookings, time_offs = await self._fetch_snapshots(provider_id, target_day, zone)

        window = None
        if include_working_window:
            window = resolve_working_window(working_hours, target_day, zone, self._dst_policy)

        return compose_agenda(
            time_off=collect_time_off_intervals(
                time_offs, target_day, zone, provider_id=provider_id, policy=self._dst_policy,
            ),
            bookings=collect_booking_intervals(
                bookings, target_day, zone, provider_id=provider_id, blocking_only=False,
            ),
            working_window=window,
            window_metadata={"provider_id": provider_id},
        )

    async def agenda_document(
        self,
        provider_id: str,
        day: date | str,
        zone: Optional[str] = None,
        include_working_window: bool = True,
    ) -> Dict[str, Any]:
        """The agenda wrapped as ``{date, zone, count, entries}``."""
        target_day = parse_day(day)
        zone = await self.resolve_zone(zone)
        entries = await self.compute_agenda(provider_id, target_day, zone, include_working_window)
        return {
            "date": target_day.isoformat(),
            "zone": zone,
            "count": len(entries),
            "entries": [entry.to_dict() for entry in entries],
        }

    async def is_slot_available(
        self,
        provider_id: str,
        start: datetime,
        zone: Optional[str] = None,
        fine_minutes: int = 15,
        coarse_minutes: int = 30,
    ) -> bool:
        """
        Check that ``start`` is still offered, recomputing from fresh data.

        This is an optimistic check, not a reservation: the final write
        stays the sole arbiter.
        """
        zone = await self.resolve_zone(zone)
        local_start = to_local(start, zone)

        slots = await self.compute_slots(
            provider_id,
            local_start.date(),
            zone=zone,
            fine_minutes=fine_minutes,
            coarse_minutes=coarse_minutes,
        )
        return any(slot.start_utc == local_start for slot in slots)

    async def _fetch_snapshots(self, provider_id: str, day: date, zone: str):
        day_range = day_bounds(day, zone)
        working_hours, bookings, time_offs = await asyncio.gather(
            self._repository.get_provider_working_hours(provider_id),
            self._repository.list_bookings(provider_id, day_range.start_utc, day_range.end_utc),
            self._repository.list_exceptions(provider_id, day_range.start_utc, day_range.end_utc),
        )
        return working_hours, list(bookings), list(time_offs)
