from __future__ import annotations

import threading
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage boundary for the ledger: keyed get/put plus ordered listing."""

    def get(self, student_id: str, lecture_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def put(self, record: AttendanceRecord) -> None:
        """Insert, or replace the record with the same (student_id, lecture_id).

        A replaced record keeps its original position in listings.
        """

        raise NotImplementedError

    def list_for_lecture(self, lecture_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class InMemoryAttendanceRepository(AttendanceRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: dict[tuple[str, str], AttendanceRecord] = {}

    def get(self, student_id: str, lecture_id: str) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._by_key.get((student_id, lecture_id))

    def put(self, record: AttendanceRecord) -> None:
        with self._lock:
            # dict assignment to an existing key keeps insertion order
            self._by_key[record.key] = record

    def list_for_lecture(self, lecture_id: str) -> Sequence[AttendanceRecord]:
        with self._lock:
            return [r for r in self._by_key.values() if r.lecture_id == lecture_id]

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        with self._lock:
            return [r for r in self._by_key.values() if r.student_id == student_id]
