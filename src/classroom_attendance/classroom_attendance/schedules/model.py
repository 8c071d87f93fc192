from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..common.datetime_utils import format_clock
from ..common.validators import require_int_range
from ..core.constants import MINUTES_PER_DAY
from ..core.enums import SlotState
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ScheduleSlot:
    """A recurring lecture window in the daily timetable."""

    start_minute_of_day: int
    duration_minutes: int
    subject: str
    room: str = ""

    def __post_init__(self) -> None:
        require_int_range(self.start_minute_of_day, "start_minute_of_day", low=0, high=MINUTES_PER_DAY)
        require_int_range(self.duration_minutes, "duration_minutes", low=1)

    @property
    def end_minute_of_day(self) -> int:
        return self.start_minute_of_day + self.duration_minutes

    def contains(self, minute: int) -> bool:
        return self.start_minute_of_day <= minute < self.end_minute_of_day

    def label(self) -> str:
        return f"{format_clock(self.start_minute_of_day)} - {format_clock(self.end_minute_of_day % MINUTES_PER_DAY)}"


def make_lecture_id(slot: ScheduleSlot, day: date) -> str:
    return f"{day.strftime('%Y%m%d')}-{slot.start_minute_of_day:04d}"


def parse_lecture_id(lecture_id: str) -> tuple[date, int]:
    """Split ``YYYYMMDD-SSSS`` into the calendar day and the start minute."""
    try:
        day_part, minute_part = lecture_id.split("-")
        day = datetime.strptime(day_part, "%Y%m%d").date()
        start_minute = int(minute_part)
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid lecture id: {lecture_id!r}") from None
    if not 0 <= start_minute < MINUTES_PER_DAY:
        raise ValidationError(f"Invalid lecture id: {lecture_id!r}")
    return day, start_minute


def parse_lecture_day(lecture_id: str) -> date:
    return parse_lecture_id(lecture_id)[0]


@dataclass(frozen=True)
class LectureSession:
    """One occurrence of a slot on a calendar day (derived, never stored)."""

    slot: ScheduleSlot
    day: date

    @property
    def lecture_id(self) -> str:
        return make_lecture_id(self.slot, self.day)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.day, time()) + timedelta(minutes=self.slot.start_minute_of_day)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.slot.duration_minutes)

    def to_dict(self) -> dict:
        return {
            "lecture_id": self.lecture_id,
            "subject": self.slot.subject,
            "room": self.slot.room,
            "time": self.slot.label(),
            "date": self.day.isoformat(),
            "starts_at": self.starts_at.isoformat(),
            "ends_at": self.ends_at.isoformat(),
        }


@dataclass(frozen=True)
class SlotOverview:
    """Read-model for the daily timetable listing."""

    session: LectureSession
    state: SlotState

    def to_dict(self) -> dict:
        data = self.session.to_dict()
        data["status"] = self.state.value
        return data
