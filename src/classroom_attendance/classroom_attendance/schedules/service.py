from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import minute_of_day
from ..core.enums import SlotState
from ..core.exceptions import ClockOrScheduleUnavailable
from .model import LectureSession, ScheduleSlot, SlotOverview, parse_lecture_id
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


def resolve_active(now: datetime, schedule: Sequence[ScheduleSlot]) -> Optional[LectureSession]:
    """Return the session whose slot covers ``now``, or None between lectures.

    The schedule must not contain overlapping slots; the first match wins.
    """

    minute = minute_of_day(now)
    for slot in schedule:
        if slot.contains(minute):
            return LectureSession(slot=slot, day=now.date())
    return None


def slot_state(now: datetime, slot: ScheduleSlot) -> SlotState:
    minute = minute_of_day(now)
    if minute >= slot.end_minute_of_day:
        return SlotState.COMPLETED
    if slot.contains(minute):
        return SlotState.CURRENT
    return SlotState.UPCOMING


class LectureClock:
    """Maps wall-clock time onto the daily schedule."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def _load(self) -> Sequence[ScheduleSlot]:
        try:
            return self._schedules.list_slots()
        except Exception as e:
            logger.exception("Schedule source unavailable")
            raise ClockOrScheduleUnavailable("Schedule source unavailable") from e

    def active_session(self, now: datetime) -> Optional[LectureSession]:
        return resolve_active(now, self._load())

    def day_overview(self, now: datetime) -> list[SlotOverview]:
        return [
            SlotOverview(session=LectureSession(slot=slot, day=now.date()), state=slot_state(now, slot))
            for slot in self._load()
        ]

    def session_for(self, lecture_id: str) -> Optional[LectureSession]:
        """Rebuild the session a lecture id names, or None if no slot starts then.

        Raises ValidationError for ids that are not ``YYYYMMDD-SSSS``.
        """

        day, start_minute = parse_lecture_id(lecture_id)
        for slot in self._load():
            if slot.start_minute_of_day == start_minute:
                return LectureSession(slot=slot, day=day)
        return None
