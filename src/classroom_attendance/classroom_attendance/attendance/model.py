from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_epoch_millis
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one lecture."""

    student_id: str
    student_name: str
    lecture_id: str
    lecture_date: date
    marked_at_ms: Optional[int]
    status: AttendanceStatus

    @property
    def key(self) -> tuple[str, str]:
        return (self.student_id, self.lecture_id)

    def to_dict(self) -> dict:
        marked_at = from_epoch_millis(self.marked_at_ms) if self.marked_at_ms is not None else None
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "lecture_id": self.lecture_id,
            "date": self.lecture_date.isoformat(),
            "marked_at_ms": self.marked_at_ms,
            "time": marked_at.strftime("%H:%M:%S") if marked_at else "-",
            "status": self.status.value,
        }


@dataclass(frozen=True)
class StatusCounts:
    present: int = 0
    late: int = 0
    absent: int = 0

    @property
    def attended(self) -> int:
        return self.present + self.late

    @property
    def total(self) -> int:
        return self.present + self.late + self.absent

    @classmethod
    def tally(cls, records: Sequence[AttendanceRecord]) -> "StatusCounts":
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        return cls(present=present, late=late, absent=absent)

    def to_dict(self) -> dict:
        return {"present": self.present, "late": self.late, "absent": self.absent}


@dataclass(frozen=True)
class EnrolledStudent:
    student_id: str
    student_name: str


@dataclass(frozen=True)
class RosterSnapshot:
    """Read-model for the teacher's live attendance panel."""

    lecture_id: str
    records: tuple[AttendanceRecord, ...]
    counts: StatusCounts
    taken_at: datetime
    not_scanned: tuple[EnrolledStudent, ...] = field(default_factory=tuple)
    enrolled_total: Optional[int] = None

    @property
    def attendance_rate(self) -> float:
        """Percent of the class (enrolled, or everyone seen) marked present or late."""
        base = max(self.enrolled_total or 0, len(self.records))
        if base == 0:
            return 0.0
        return round(self.counts.attended * 100.0 / base, 1)

    def to_dict(self) -> dict:
        return {
            "lecture_id": self.lecture_id,
            "students": [r.to_dict() for r in self.records],
            "not_scanned": [{"student_id": s.student_id, "student_name": s.student_name} for s in self.not_scanned],
            "counts": self.counts.to_dict(),
            "enrolled_total": self.enrolled_total,
            "attendance_rate": self.attendance_rate,
            "taken_at": self.taken_at.isoformat(),
        }
