from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "student_id, student_name, lecture_id, lecture_date, marked_at_ms, status"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        student_id=str(r["student_id"]),
        student_name=str(r["student_name"]),
        lecture_id=str(r["lecture_id"]),
        lecture_date=r["lecture_date"],
        marked_at_ms=int(r["marked_at_ms"]) if r.get("marked_at_ms") is not None else None,
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, db: DatabaseConnection):
        self._db = db

    def get(self, student_id: str, lecture_id: str) -> Optional[AttendanceRecord]:
        with self._db.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_ledger
                WHERE student_id=%s AND lecture_id=%s
                """,
                (student_id, lecture_id),
            )
            r = cur.fetchone()
            return _to_record(r) if r else None

    def put(self, record: AttendanceRecord) -> None:
        with self._db.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO attendance_ledger({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    student_name=VALUES(student_name),
                    lecture_date=VALUES(lecture_date),
                    marked_at_ms=VALUES(marked_at_ms),
                    status=VALUES(status)
                """,
                (
                    record.student_id,
                    record.student_name,
                    record.lecture_id,
                    record.lecture_date,
                    record.marked_at_ms,
                    record.status.value,
                ),
            )

    def list_for_lecture(self, lecture_id: str) -> Sequence[AttendanceRecord]:
        with self._db.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_ledger
                WHERE lecture_id=%s
                ORDER BY entry_id ASC
                """,
                (lecture_id,),
            )
            return [_to_record(r) for r in cur.fetchall()]

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        with self._db.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_ledger
                WHERE student_id=%s
                ORDER BY lecture_date DESC, entry_id DESC
                """,
                (student_id,),
            )
            return [_to_record(r) for r in cur.fetchall()]
