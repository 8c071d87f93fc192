from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..schedules.model import parse_lecture_day
from .model import AttendanceRecord, StatusCounts
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

# Lower is better. A scan may keep or improve a status, never worsen it.
_RANK = {AttendanceStatus.PRESENT: 0, AttendanceStatus.LATE: 1, AttendanceStatus.ABSENT: 2}


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class KeyedLocks:
    """One re-entrant lock per key; unrelated keys never wait on each other.

    Entries are reference counted and dropped when the last holder or waiter
    leaves, so the map only holds keys that are in use.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], _KeyLock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: tuple[str, str]) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]


class AttendanceLedger:
    """Single writer for attendance records.

    At most one record exists per (student_id, lecture_id). Mutations for a
    key are serialized; records are updated in place, never removed.
    """

    def __init__(self, repository: AttendanceRepository, *, locks: Optional[KeyedLocks] = None):
        self._repo = repository
        self._locks = locks if locks is not None else KeyedLocks()

    def locked(self, student_id: str, lecture_id: str):
        """Hold the write lock for one key (re-entrant for upsert/mark_absent)."""
        return self._locks.hold((student_id, lecture_id))

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._locks.hold(record.key):
            existing = self._repo.get(record.student_id, record.lecture_id)
            stored = record
            if existing is not None:
                if existing.status != AttendanceStatus.ABSENT and _RANK[existing.status] < _RANK[record.status]:
                    stored = replace(stored, status=existing.status)
                if not stored.student_name:
                    stored = replace(stored, student_name=existing.student_name)
            self._repo.put(stored)
            return stored

    def mark_absent(self, student_id: str, lecture_id: str, *, student_name: Optional[str] = None) -> AttendanceRecord:
        with self._locks.hold((student_id, lecture_id)):
            existing = self._repo.get(student_id, lecture_id)
            if existing is not None:
                stored = replace(
                    existing,
                    status=AttendanceStatus.ABSENT,
                    marked_at_ms=None,
                    student_name=student_name or existing.student_name,
                )
            else:
                stored = AttendanceRecord(
                    student_id=student_id,
                    student_name=student_name or "",
                    lecture_id=lecture_id,
                    lecture_date=parse_lecture_day(lecture_id),
                    marked_at_ms=None,
                    status=AttendanceStatus.ABSENT,
                )
            self._repo.put(stored)
            logger.info("Student %s marked absent for %s", student_id, lecture_id)
            return stored

    def get(self, student_id: str, lecture_id: str) -> Optional[AttendanceRecord]:
        return self._repo.get(student_id, lecture_id)

    def query_by_lecture(self, lecture_id: str) -> Sequence[AttendanceRecord]:
        return list(self._repo.list_for_lecture(lecture_id))

    def counts_by_status(self, lecture_id: str) -> StatusCounts:
        return StatusCounts.tally(self._repo.list_for_lecture(lecture_id))

    def query_by_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        return list(self._repo.list_for_student(student_id))

    def attendance_percentage(self, student_id: str) -> float:
        counts = StatusCounts.tally(self._repo.list_for_student(student_id))
        if counts.total == 0:
            return 0.0
        return round(counts.attended * 100.0 / counts.total, 1)
