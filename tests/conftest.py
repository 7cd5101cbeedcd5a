"""
Shared fixtures: one shop in Europe/Amsterdam with a single provider.

2025-03-12 is a Wednesday (UTC+01:00 in Amsterdam).
"""

import copy

import pytest


SCHEDULE_DATA = {
    "shops": [
        {"id": "shop-1", "timezone": "Europe/Amsterdam"},
        {"id": "shop-2"},
    ],
    "providers": [
        {
            "id": "emp-1",
            "shop_id": "shop-1",
            "name": "Sam",
            "working_hours": {
                "mon": {"start": "09:00", "end": "17:00"},
                "wed": {"start": "09:00", "end": "17:00"},
                "thu": {"start": "09:00", "end": "17:00"},
                "fri": {"start": "09:00", "end": "17:00"},
                "sat": {"start": "10:00", "end": "14:00", "is_working_day": False},
            },
        },
        {
            "id": "emp-2",
            "shop_id": "shop-2",
            "name": "Robin",
            "working_hours": {"wed": {"start": "9am", "end": "17:00"}},
        },
    ],
    "bookings": [
        {
            "id": "b-1",
            "provider_id": "emp-1",
            "start": "2025-03-12T09:00:00Z",
            "end": "2025-03-12T09:30:00Z",
            "status": "scheduled",
            "duration_minutes": 30,
            "metadata": {"service": "Haircut"},
        },
        {
            "id": "b-2",
            "provider_id": "emp-1",
            "start": "2025-03-12T10:00:00Z",
            "end": "2025-03-12T10:15:00Z",
            "status": "cancelled",
            "duration_minutes": 15,
        },
        {
            "id": "b-3",
            "provider_id": "emp-1",
            "start": "2025-03-14T10:00:00Z",
            "end": "2025-03-14T10:30:00Z",
            "status": "scheduled",
            "duration_minutes": 30,
        },
    ],
    "exceptions": [
        {
            "kind": "recurring",
            "id": "t-1",
            "provider_id": "emp-1",
            "weekday": 3,
            "start": "13:00",
            "end": "14:00",
            "reason": "Lunch",
        },
        {
            "kind": "full_day",
            "id": "t-2",
            "provider_id": "emp-1",
            "date": "2025-03-14",
            "reason": "Training",
        },
        {
            "kind": "ranged",
            "id": "t-3",
            "provider_id": "emp-1",
            "start": "2025-03-12T14:00:00Z",
            "end": "2025-03-12T15:00:00Z",
            "reason": "Cancelled errand",
            "active": False,
        },
    ],
}


@pytest.fixture
def schedule_data():
    """A fresh copy of the sample schedule document."""
    return copy.deepcopy(SCHEDULE_DATA)
