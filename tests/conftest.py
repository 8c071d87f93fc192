from __future__ import annotations

from datetime import date, datetime

import pytest

from src.classroom_attendance.classroom_attendance.attendance.ledger import AttendanceLedger
from src.classroom_attendance.classroom_attendance.attendance.repository import InMemoryAttendanceRepository
from src.classroom_attendance.classroom_attendance.attendance.service import AttendanceService, ScanIngestService
from src.classroom_attendance.classroom_attendance.schedules.model import ScheduleSlot
from src.classroom_attendance.classroom_attendance.schedules.service import LectureClock
from src.classroom_attendance.classroom_attendance.tokens.rotator import TokenRotator

LECTURE_DAY = date(2026, 3, 2)


class StaticSchedules:
    def __init__(self, slots):
        self.slots = list(slots)

    def list_slots(self):
        return self.slots


class BrokenSchedules:
    def list_slots(self):
        raise ConnectionError("timetable service down")


def at(hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(LECTURE_DAY.year, LECTURE_DAY.month, LECTURE_DAY.day, hour, minute, second)


@pytest.fixture
def fixed_now() -> datetime:
    return at(9, 10)


@pytest.fixture
def physics_slot() -> ScheduleSlot:
    return ScheduleSlot(start_minute_of_day=540, duration_minutes=90, subject="Physics", room="Lab 201")


@pytest.fixture
def schedules(physics_slot) -> StaticSchedules:
    chemistry = ScheduleSlot(start_minute_of_day=660, duration_minutes=60, subject="Chemistry", room="Lab 105")
    return StaticSchedules([physics_slot, chemistry])


@pytest.fixture
def rotator(schedules) -> TokenRotator:
    return TokenRotator(LectureClock(schedules), rotation_seconds=5)


@pytest.fixture
def ledger() -> AttendanceLedger:
    return AttendanceLedger(InMemoryAttendanceRepository())


@pytest.fixture
def scan_service(rotator, ledger) -> ScanIngestService:
    return ScanIngestService(rotator, ledger, late_threshold_minutes=10)


@pytest.fixture
def attendance_service(ledger) -> AttendanceService:
    return AttendanceService(ledger)
