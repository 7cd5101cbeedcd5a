"""
File-backed schedule repository.

Loads providers, shops, bookings and time off from a JSON document so the
engine can run without a database. Records are validated with pydantic
and converted to immutable domain snapshots on load.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator

from ..domain.exceptions import ProviderNotFoundError
from ..domain.models import (
    WEEKDAY_KEYS,
    Booking,
    BookingStatus,
    DayHours,
    FullDayTimeOff,
    Provider,
    RangedTimeOff,
    RecurringTimeOff,
    TimeOff,
    WorkingHours,
)
from ..domain.zones import parse_wall_time

logger = logging.getLogger(__name__)


def _to_utc(value: datetime) -> DateTime:
    # naive timestamps in the file are UTC
    return pendulum.instance(value, tz="UTC").in_timezone("UTC")


def _wall_time_or_none(value: Optional[str], context: str):
    if value is None:
        return None
    try:
        return parse_wall_time(value)
    except ValueError as exc:
        logger.warning("Ignoring malformed time %r for %s: %s", value, context, exc)
        return None


class DayHoursRecord(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None
    is_working_day: bool = True


class ShopRecord(BaseModel):
    id: str
    timezone: Optional[str] = None


class ProviderRecord(BaseModel):
    id: str
    shop_id: str
    name: str = ""
    working_hours: Dict[str, DayHoursRecord] = Field(default_factory=dict)

    @field_validator("working_hours")
    @classmethod
    def validate_weekday_keys(cls, value: Dict[str, DayHoursRecord]) -> Dict[str, DayHoursRecord]:
        """Ensure working hours are keyed by mon..sun."""
        unknown = [key for key in value if key not in WEEKDAY_KEYS]
        if unknown:
            raise ValueError(f"working_hours keys must be one of {WEEKDAY_KEYS}, got {unknown}")
        return value

    def to_domain(self) -> Provider:
        days = {
            key: DayHours(
                start=_wall_time_or_none(hours.start, f"{self.id}/{key}"),
                end=_wall_time_or_none(hours.end, f"{self.id}/{key}"),
                is_working_day=hours.is_working_day,
            )
            for key, hours in self.working_hours.items()
        }
        return Provider(
            id=self.id,
            shop_id=self.shop_id,
            name=self.name,
            working_hours=WorkingHours(days=days),
        )


class BookingRecord(BaseModel):
    id: str
    provider_id: str
    start: datetime
    end: datetime
    status: BookingStatus = BookingStatus.SCHEDULED
    duration_minutes: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> Booking:
        return Booking(
            id=self.id,
            provider_id=self.provider_id,
            start=_to_utc(self.start),
            end=_to_utc(self.end),
            status=self.status,
            duration_minutes=self.duration_minutes,
            metadata=self.metadata,
        )


class FullDayRecord(BaseModel):
    kind: Literal["full_day"]
    id: str
    provider_id: str
    day: date = Field(alias="date")
    reason: Optional[str] = None
    active: bool = True

    def to_domain(self) -> FullDayTimeOff:
        return FullDayTimeOff(
            id=self.id, provider_id=self.provider_id, day=self.day,
            reason=self.reason, active=self.active,
        )


class RangedRecord(BaseModel):
    kind: Literal["ranged"]
    id: str
    provider_id: str
    start: datetime
    end: datetime
    reason: Optional[str] = None
    active: bool = True

    def to_domain(self) -> RangedTimeOff:
        return RangedTimeOff(
            id=self.id, provider_id=self.provider_id,
            start=_to_utc(self.start), end=_to_utc(self.end),
            reason=self.reason, active=self.active,
        )


class RecurringRecord(BaseModel):
    kind: Literal["recurring"]
    id: str
    provider_id: str
    weekday: int = Field(ge=0, le=6)
    start: str
    end: str
    reason: Optional[str] = None
    active: bool = True

    @field_validator("start", "end")
    @classmethod
    def validate_wall_time(cls, value: str) -> str:
        """Ensure recurring boundaries are HH:MM."""
        parse_wall_time(value)
        return value

    def to_domain(self) -> RecurringTimeOff:
        return RecurringTimeOff(
            id=self.id, provider_id=self.provider_id, weekday=self.weekday,
            start_time=parse_wall_time(self.start), end_time=parse_wall_time(self.end),
            reason=self.reason, active=self.active,
        )


ExceptionRecord = Annotated[
    Union[FullDayRecord, RangedRecord, RecurringRecord],
    Field(discriminator="kind"),
]


class ScheduleDocument(BaseModel):
    shops: List[ShopRecord] = Field(default_factory=list)
    providers: List[ProviderRecord] = Field(default_factory=list)
    bookings: List[BookingRecord] = Field(default_factory=list)
    exceptions: List[ExceptionRecord] = Field(default_factory=list)


class JsonScheduleStore:
    """
    Repository over a JSON schedule document.

    Implements ScheduleRepositoryProtocol. Data is loaded once; every
    query returns snapshots that are never mutated afterwards.
    """

    def __init__(self, document: ScheduleDocument):
        self._zones = {shop.id: shop.timezone for shop in document.shops}
        self._providers = {record.id: record.to_domain() for record in document.providers}
        self._bookings = [record.to_domain() for record in document.bookings]
        self._time_offs: List[TimeOff] = [record.to_domain() for record in document.exceptions]

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "JsonScheduleStore":
        return cls(ScheduleDocument.model_validate(data))

    @classmethod
    def load(cls, path: Path) -> "JsonScheduleStore":
        """
        Load a schedule document from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the JSON or its records are invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Schedule data file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

        return cls.from_mapping(data)

    @property
    def providers(self) -> List[Provider]:
        return list(self._providers.values())

    def get_provider(self, provider_id: str) -> Provider:
        try:
            return self._providers[provider_id]
        except KeyError:
            raise ProviderNotFoundError(provider_id) from None

    async def get_provider_working_hours(self, provider_id: str) -> WorkingHours:
        return self.get_provider(provider_id).working_hours

    async def get_provider_zone(self, shop_id: str) -> Optional[str]:
        return self._zones.get(shop_id)

    async def list_bookings(self, provider_id: str, start: DateTime, end: DateTime) -> List[Booking]:
        return [
            booking for booking in self._bookings
            if booking.provider_id == provider_id
            and booking.start < end and booking.end > start
        ]

    async def list_exceptions(self, provider_id: str, start: DateTime, end: DateTime) -> List[TimeOff]:
        matched: List[TimeOff] = []

        for time_off in self._time_offs:
            if time_off.provider_id != provider_id or not time_off.active:
                continue

            if isinstance(time_off, FullDayTimeOff):
                # dates are zone-local, so widen to the UTC dates the range touches
                if start.date() <= time_off.day <= end.date():
                    matched.append(time_off)
            elif isinstance(time_off, RangedTimeOff):
                if time_off.start < end and time_off.end > start:
                    matched.append(time_off)
            else:
                matched.append(time_off)

        return matched
