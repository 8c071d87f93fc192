from __future__ import annotations

from typing import Protocol, Sequence

from .model import ScheduleSlot


class ScheduleRepository(Protocol):
    def list_slots(self) -> Sequence[ScheduleSlot]:
        """Return the daily timetable ordered by start time.

        Implementations may raise if the underlying source is unavailable.
        """

        raise NotImplementedError
