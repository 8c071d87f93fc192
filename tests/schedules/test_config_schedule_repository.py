from __future__ import annotations

import pytest

from src.classroom_attendance.classroom_attendance.common.datetime_utils import parse_clock_minutes
from src.classroom_attendance.classroom_attendance.core.exceptions import ValidationError
from src.classroom_attendance.classroom_attendance.schedules.config_schedule_repository import ConfigScheduleRepository


@pytest.mark.parametrize(
    "text, minutes",
    [("09:00", 540), ("9:05", 545), ("09:00 AM", 540), ("12:00 PM", 720), ("12:15 AM", 15), ("01:00 PM", 780), ("23:59", 1439)],
)
def test_parse_clock_minutes(text, minutes):
    assert parse_clock_minutes(text) == minutes


@pytest.mark.parametrize("text", ["", "9am", "24:00", "13:00 PM", "10:61"])
def test_parse_clock_minutes_rejects(text):
    with pytest.raises(ValueError):
        parse_clock_minutes(text)


def test_entries_are_sorted_and_parsed():
    repo = ConfigScheduleRepository(
        [
            {"start": "10:30 AM", "duration": 90, "subject": "Physics", "room": "Lab 201"},
            {"start": 540, "duration": 90, "subject": "Mathematics", "room": "Room 101"},
        ]
    )

    slots = repo.list_slots()
    assert [s.subject for s in slots] == ["Mathematics", "Physics"]
    assert slots[1].start_minute_of_day == 630
    assert slots[1].duration_minutes == 90


def test_duration_is_required():
    with pytest.raises(ValidationError):
        ConfigScheduleRepository([{"start": "09:00", "subject": "Mathematics"}])


def test_overlapping_entries_are_refused():
    with pytest.raises(ValidationError):
        ConfigScheduleRepository(
            [
                {"start": "09:00", "duration": 90, "subject": "Mathematics"},
                {"start": "10:00", "duration": 60, "subject": "Physics"},
            ]
        )


def test_back_to_back_entries_are_allowed():
    repo = ConfigScheduleRepository(
        [
            {"start": "09:00", "duration": 90, "subject": "Mathematics"},
            {"start": "10:30", "duration": 90, "subject": "Physics"},
        ]
    )
    assert len(repo.list_slots()) == 2
