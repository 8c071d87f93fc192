from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from ..common.datetime_utils import parse_clock_minutes
from ..core.exceptions import ValidationError
from .model import ScheduleSlot
from .repository import ScheduleRepository


def slot_from_entry(entry: Mapping[str, Any]) -> ScheduleSlot:
    """Build a slot from a settings entry.

    ``start`` may be minutes since midnight or a clock string ("09:00",
    "10:30 AM"). ``duration`` is required: no default length is assumed.
    """

    if "duration" not in entry:
        raise ValidationError(f"Schedule entry for {entry.get('subject')!r} has no duration")

    start = entry.get("start")
    if isinstance(start, str):
        try:
            start = parse_clock_minutes(start)
        except ValueError as e:
            raise ValidationError(str(e)) from None

    return ScheduleSlot(
        start_minute_of_day=start,
        duration_minutes=entry["duration"],
        subject=str(entry.get("subject") or "").strip(),
        room=str(entry.get("room") or "").strip(),
    )


def ensure_no_overlap(slots: Sequence[ScheduleSlot]) -> None:
    for prev, cur in zip(slots, slots[1:]):
        if cur.start_minute_of_day < prev.end_minute_of_day:
            raise ValidationError(f"Schedule slots overlap: {prev.subject!r} and {cur.subject!r}")


class ConfigScheduleRepository(ScheduleRepository):
    """Timetable supplied by the settings module (``SCHEDULE``)."""

    def __init__(self, entries: Iterable[Mapping[str, Any]]):
        slots = sorted((slot_from_entry(e) for e in entries), key=lambda s: s.start_minute_of_day)
        ensure_no_overlap(slots)
        self._slots = tuple(slots)

    def list_slots(self) -> Sequence[ScheduleSlot]:
        return self._slots
