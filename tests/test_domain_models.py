"""
Tests for domain models.
"""

from datetime import date, time

import pendulum
import pytest

from bookingslots.domain.models import (
    AgendaEntry,
    AgendaKind,
    BlockingInterval,
    BlockKind,
    Booking,
    BookingStatus,
    DayHours,
    Granularity,
    LocalInterval,
    RecurringTimeOff,
    SlotCandidate,
    WorkingHours,
    sunday_based_weekday,
)

ZONE = "Europe/Amsterdam"


def _at(hour, minute=0):
    return pendulum.datetime(2025, 3, 12, hour, minute, tz=ZONE)


def _fall_back(utc_hour, minute=0):
    """Wall clock on 2025-10-26, when 02:00-03:00 happens twice in Amsterdam."""
    return pendulum.datetime(2025, 10, 26, utc_hour, minute, tz="UTC").in_timezone(ZONE)


class TestLocalInterval:
    """Tests for LocalInterval model."""

    def test_create_valid_interval(self):
        """Test creating a valid interval."""
        interval = LocalInterval(start=_at(9), end=_at(17))

        assert interval.duration_minutes() == 480
        assert interval.zone_name == ZONE
        assert interval.start_utc == pendulum.datetime(2025, 3, 12, 8, 0, tz="UTC")

    def test_invalid_interval_raises_error(self):
        """Test that creating an inverted interval raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            LocalInterval(start=_at(17), end=_at(9))

    def test_overlaps_is_half_open(self):
        """Touching intervals do not overlap."""
        morning = LocalInterval(start=_at(9), end=_at(12))
        late_morning = LocalInterval(start=_at(11), end=_at(14))
        afternoon = LocalInterval(start=_at(12), end=_at(17))

        assert morning.overlaps(late_morning)
        assert late_morning.overlaps(morning)
        assert not morning.overlaps(afternoon)
        assert not afternoon.overlaps(morning)

    def test_contains(self):
        outer = LocalInterval(start=_at(9), end=_at(12))

        assert outer.contains(LocalInterval(start=_at(9), end=_at(12)))
        assert outer.contains(LocalInterval(start=_at(10), end=_at(11)))
        assert not outer.contains(LocalInterval(start=_at(11), end=_at(13)))

    def test_intersect(self):
        """Test intersection calculation."""
        first = LocalInterval(start=_at(9), end=_at(12))
        second = LocalInterval(start=_at(11), end=_at(14))

        intersection = first.intersect(second)

        assert intersection is not None
        assert intersection.start == _at(11)
        assert intersection.end == _at(12)
        assert first.intersect(LocalInterval(start=_at(14), end=_at(17))) is None

    def test_split(self):
        """Splitting yields consecutive pieces."""
        pieces = LocalInterval(start=_at(9), end=_at(9, 40)).split(15)

        assert [(p.start.minute, p.end.minute) for p in pieces] == [(0, 15), (15, 30), (30, 40)]

    def test_to_dict_carries_local_and_utc(self):
        data = LocalInterval(start=_at(9), end=_at(9, 30)).to_dict()

        assert data == {
            "startLocal": "2025-03-12T09:00:00+01:00",
            "endLocal": "2025-03-12T09:30:00+01:00",
            "startUTC": "2025-03-12T08:00:00Z",
            "endUTC": "2025-03-12T08:30:00Z",
        }



class TestRepeatedHour:
    """Intervals inside the repeated hour of a fall-back day."""

    def test_valid_across_the_transition(self):
        """02:45 summer time comes before 02:00 winter time."""
        interval = LocalInterval(start=_fall_back(0, 45), end=_fall_back(1))

        assert (interval.start.hour, interval.end.hour) == (2, 2)
        assert interval.duration_minutes() == 15

    def test_inverted_instants_rejected(self):
        with pytest.raises(ValueError):
            LocalInterval(start=_fall_back(1, 15), end=_fall_back(0, 45))

    def test_overlap_contains_and_intersect(self):
        # 02:30 summer time to 02:30 winter time
        first = LocalInterval(start=_fall_back(0, 30), end=_fall_back(1, 30))
        # 02:00 winter time to 03:00
        second = LocalInterval(start=_fall_back(1), end=_fall_back(2))

        assert first.overlaps(second)
        assert first.contains(LocalInterval(start=_fall_back(0, 45), end=_fall_back(1, 15)))
        assert not first.contains(second)
        assert not LocalInterval(start=_fall_back(0), end=_fall_back(0, 30)).overlaps(second)

        intersection = first.intersect(second)
        assert intersection is not None
        assert intersection.start_utc == pendulum.datetime(2025, 10, 26, 1, 0, tz="UTC")
        assert intersection.end_utc == pendulum.datetime(2025, 10, 26, 1, 30, tz="UTC")

    def test_split(self):
        pieces = LocalInterval(start=_fall_back(0, 30), end=_fall_back(1, 30)).split(15)

        assert len(pieces) == 4
        assert [p.start.format("HH:mm") for p in pieces] == ["02:30", "02:45", "02:00", "02:15"]

class TestWorkingHours:
    """Tests for WorkingHours and weekday helpers."""

    def test_for_date_uses_weekday_key(self):
        hours = WorkingHours(days={"wed": DayHours(start=time(9), end=time(17))})

        assert hours.for_date(date(2025, 3, 12)) == DayHours(start=time(9), end=time(17))
        assert hours.for_date(date(2025, 3, 13)) is None

    def test_sunday_based_weekday(self):
        assert sunday_based_weekday(date(2025, 3, 16)) == 0  # Sunday
        assert sunday_based_weekday(date(2025, 3, 12)) == 3  # Wednesday
        assert sunday_based_weekday(date(2025, 3, 15)) == 6  # Saturday


class TestBookingAndTimeOff:
    """Tests for booking status rules and time-off records."""

    def test_only_scheduled_bookings_block(self):
        start = pendulum.datetime(2025, 3, 12, 9, tz="UTC")
        end = start.add(minutes=30)

        for status in BookingStatus:
            booking = Booking(id="b", provider_id="p", start=start, end=end, status=status)
            assert booking.blocks is (status is BookingStatus.SCHEDULED)
            assert booking.visible is (status is not BookingStatus.CANCELLED)

    def test_recurring_weekday_validation(self):
        with pytest.raises(ValueError, match="weekday"):
            RecurringTimeOff(id="t", provider_id="p", weekday=7, start_time=time(13), end_time=time(14))

    def test_recurring_matches(self):
        lunch = RecurringTimeOff(id="t", provider_id="p", weekday=3, start_time=time(13), end_time=time(14))

        assert lunch.matches(date(2025, 3, 12))
        assert lunch.matches(date(2025, 3, 19))
        assert not lunch.matches(date(2025, 3, 13))

    def test_effective_minutes_prefers_longer_of_declared_and_actual(self):
        interval = LocalInterval(start=_at(10), end=_at(10, 20))

        assert BlockingInterval(kind=BlockKind.BOOKING, interval=interval).effective_minutes == 20
        assert BlockingInterval(kind=BlockKind.BOOKING, interval=interval, declared_minutes=30).effective_minutes == 30


class TestSerialisation:
    """Tests for the wire shapes of slots and agenda entries."""

    def test_slot_to_dict(self):
        slot = SlotCandidate(
            interval=LocalInterval(start=_at(9), end=_at(9, 30)),
            granularity=Granularity.COARSE,
            minutes=30,
        )

        assert slot.to_dict() == {
            "startLocalISO": "2025-03-12T09:00:00+01:00",
            "endLocalISO": "2025-03-12T09:30:00+01:00",
            "startUTC": "2025-03-12T08:00:00Z",
            "endUTC": "2025-03-12T08:30:00Z",
            "interval": 30,
        }
        assert "12.03.2025 | 09:00 - 09:30 (30 min)" in slot.format_display()

    def test_agenda_entry_to_dict(self):
        entry = AgendaEntry(
            kind=AgendaKind.EXCEPTION,
            interval=LocalInterval(start=_at(13), end=_at(14)),
            subtype=BlockKind.RECURRING,
            metadata={"reason": "Lunch"},
        )

        data = entry.to_dict()

        assert data["type"] == "exception"
        assert data["subtype"] == "recurring"
        assert data["startUTC"] == "2025-03-12T12:00:00Z"
        assert data["meta"] == {"reason": "Lunch"}
