"""
Tests for the zone conversion layer.
"""

from datetime import date, datetime, time

import pendulum
import pytest

from bookingslots.domain.exceptions import (
    AmbiguousOrNonexistentLocalTimeError,
    InvalidInputError,
    InvalidZoneError,
)
from bookingslots.domain.zones import (
    DstPolicy,
    day_bounds,
    parse_day,
    parse_wall_time,
    project,
    to_instant,
    to_local,
)

ZONE = "Europe/Amsterdam"


class TestToLocal:
    """Tests for instant -> wall clock."""

    def test_winter_and_summer_offsets(self):
        """The same UTC hour maps to different wall clocks across DST."""
        winter = to_local(pendulum.datetime(2025, 1, 15, 8, 0, tz="UTC"), ZONE)
        summer = to_local(pendulum.datetime(2025, 7, 15, 7, 0, tz="UTC"), ZONE)

        assert (winter.hour, winter.minute) == (9, 0)
        assert (summer.hour, summer.minute) == (9, 0)
        assert winter.utcoffset().total_seconds() == 3600
        assert summer.utcoffset().total_seconds() == 7200

    def test_naive_instant_is_utc(self):
        """Naive instants follow the UTC storage convention."""
        local = to_local(datetime(2025, 3, 12, 8, 0), ZONE)

        assert local.hour == 9

    def test_invalid_zone(self):
        """Unknown zones raise InvalidZoneError, which is an input error."""
        with pytest.raises(InvalidZoneError):
            to_local(pendulum.datetime(2025, 1, 15, tz="UTC"), "Mars/Olympus_Mons")

        with pytest.raises(InvalidInputError):
            to_local(pendulum.datetime(2025, 1, 15, tz="UTC"), "")


class TestToInstant:
    """Tests for wall clock -> instant."""

    def test_same_wall_clock_different_offsets(self):
        """09:00 is 08:00Z in winter and 07:00Z in summer."""
        assert to_instant(datetime(2025, 1, 15, 9, 0), ZONE) == pendulum.datetime(2025, 1, 15, 8, 0, tz="UTC")
        assert to_instant(datetime(2025, 7, 15, 9, 0), ZONE) == pendulum.datetime(2025, 7, 15, 7, 0, tz="UTC")

    @pytest.mark.parametrize("transition_day", [date(2025, 3, 30), date(2025, 10, 26)])
    def test_round_trip_across_transition(self, transition_day):
        """to_instant(to_local(i)) == i for every quarter hour around a transition."""
        instant = pendulum.datetime(
            transition_day.year, transition_day.month, transition_day.day, tz="UTC"
        ).subtract(hours=2)

        for _ in range(24):
            assert to_instant(to_local(instant, ZONE), ZONE) == instant
            instant = instant.add(minutes=15)

    def test_gap_raises_by_default(self):
        """02:30 does not exist on the spring-forward day."""
        with pytest.raises(AmbiguousOrNonexistentLocalTimeError) as exc_info:
            to_instant(datetime(2025, 3, 30, 2, 30), ZONE)

        assert exc_info.value.kind == "nonexistent"
        assert exc_info.value.zone == ZONE

    def test_gap_policies(self):
        """Gap resolution shifts forward or back by the gap length."""
        wall = datetime(2025, 3, 30, 2, 30)

        assert to_instant(wall, ZONE, DstPolicy.COMPATIBLE) == pendulum.datetime(2025, 3, 30, 1, 30, tz="UTC")
        assert to_instant(wall, ZONE, DstPolicy.LATER) == pendulum.datetime(2025, 3, 30, 1, 30, tz="UTC")
        assert to_instant(wall, ZONE, DstPolicy.EARLIER) == pendulum.datetime(2025, 3, 30, 0, 30, tz="UTC")

    def test_fold_raises_by_default(self):
        """02:30 happens twice on the fall-back day."""
        with pytest.raises(AmbiguousOrNonexistentLocalTimeError) as exc_info:
            to_instant(datetime(2025, 10, 26, 2, 30), ZONE)

        assert exc_info.value.kind == "ambiguous"

    def test_fold_policies(self):
        """Fold resolution picks the first or second occurrence."""
        wall = datetime(2025, 10, 26, 2, 30)

        assert to_instant(wall, ZONE, DstPolicy.EARLIER) == pendulum.datetime(2025, 10, 26, 0, 30, tz="UTC")
        assert to_instant(wall, ZONE, DstPolicy.COMPATIBLE) == pendulum.datetime(2025, 10, 26, 0, 30, tz="UTC")
        assert to_instant(wall, ZONE, DstPolicy.LATER) == pendulum.datetime(2025, 10, 26, 1, 30, tz="UTC")

    def test_project_anchors_wall_time(self):
        """project() returns the zone-local DateTime for a date and time."""
        local = project(date(2025, 3, 12), time(13, 0), ZONE)

        assert local.timezone_name == ZONE
        assert local.in_timezone("UTC") == pendulum.datetime(2025, 3, 12, 12, 0, tz="UTC")


class TestDayHelpers:
    """Tests for day parsing and boundaries."""

    def test_day_bounds_on_transition_days(self):
        """Spring-forward days last 23 hours, fall-back days 25."""
        assert day_bounds(date(2025, 3, 30), ZONE).duration_minutes() == 23 * 60
        assert day_bounds(date(2025, 10, 26), ZONE).duration_minutes() == 25 * 60
        assert day_bounds(date(2025, 3, 12), ZONE).duration_minutes() == 24 * 60

    def test_day_bounds_start_at_local_midnight(self):
        bounds = day_bounds(date(2025, 3, 12), ZONE)

        assert bounds.start_utc == pendulum.datetime(2025, 3, 11, 23, 0, tz="UTC")
        assert bounds.end_utc == pendulum.datetime(2025, 3, 12, 23, 0, tz="UTC")

    def test_parse_day(self):
        assert parse_day("2025-03-12") == date(2025, 3, 12)
        assert parse_day(date(2025, 3, 12)) == date(2025, 3, 12)

    @pytest.mark.parametrize("value", ["2025-13-01", "12.03.2025", "tomorrow", 20250312])
    def test_parse_day_invalid(self, value):
        with pytest.raises(InvalidInputError):
            parse_day(value)

    def test_parse_day_rejects_datetimes(self):
        with pytest.raises(InvalidInputError):
            parse_day(datetime(2025, 3, 12, 9, 0))

    def test_parse_wall_time(self):
        assert parse_wall_time("09:30") == time(9, 30)

        with pytest.raises(ValueError):
            parse_wall_time("9am")
        with pytest.raises(ValueError):
            parse_wall_time("25:00")
