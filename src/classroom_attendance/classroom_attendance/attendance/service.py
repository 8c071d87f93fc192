from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Union

from ..common.datetime_utils import now_local, to_epoch_millis
from ..common.validators import as_text, require_non_empty
from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import RejectReason, Role
from ..core.exceptions import (
    AuthorizationError,
    ExpiredOrUnknownToken,
    MalformedToken,
    MissingIdentity,
    ValidationError,
)
from ..schedules.model import parse_lecture_day
from ..tokens.codec import decode_payload
from ..tokens.rotator import TokenRotator
from .factory import AttendanceStrategyFactory
from .ledger import AttendanceLedger
from .model import AttendanceRecord, EnrolledStudent, RosterSnapshot, StatusCounts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    record: AttendanceRecord
    accepted: bool = True

    def to_dict(self) -> dict:
        return {"success": True, "message": "Attendance marked", "record": self.record.to_dict()}


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    accepted: bool = False

    @property
    def message(self) -> str:
        return self.reason.message

    def to_dict(self) -> dict:
        return {"success": False, "reason": self.reason.value, "message": self.message}


ScanResult = Union[Accepted, Rejected]


class ScanIngestService:
    """Turns a decoded QR text plus a student identity into a ledger write.

    Checks run in a fixed order and stop at the first failure: payload shape,
    live token, student identity. Failures come back as ``Rejected`` values.
    """

    def __init__(
        self,
        rotator: TokenRotator,
        ledger: AttendanceLedger,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
    ):
        self._rotator = rotator
        self._ledger = ledger
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_threshold_minutes = int(late_threshold_minutes)

    def submit(
        self,
        decoded_text: str,
        student_id: Any,
        student_name: Any = None,
        *,
        now: datetime | None = None,
    ) -> ScanResult:
        now = now or now_local()
        try:
            record = self._ingest(decoded_text, student_id, student_name, now)
        except MalformedToken:
            return self._reject(RejectReason.MALFORMED, student_id)
        except ExpiredOrUnknownToken:
            return self._reject(RejectReason.EXPIRED_OR_UNKNOWN, student_id)
        except MissingIdentity:
            return self._reject(RejectReason.MISSING_IDENTITY, student_id)

        logger.info("Scan accepted: %s is %s for %s", record.student_id, record.status.value, record.lecture_id)
        return Accepted(record)

    def _ingest(self, decoded_text: str, student_id: Any, student_name: Any, now: datetime) -> AttendanceRecord:
        presented = decode_payload(decoded_text)
        key_student = as_text(student_id)

        # Token check, identity check and the write form one unit per key.
        with self._ledger.locked(key_student, presented.lecture_id):
            session = self._rotator.match(presented, now)
            if session is None:
                raise ExpiredOrUnknownToken(presented.lecture_id)

            try:
                key_student = require_non_empty(key_student, "student_id")
            except ValidationError:
                raise MissingIdentity("student_id") from None

            strategy = self._factory.for_scan(
                now=now, session=session, late_threshold_minutes=self._late_threshold_minutes
            )
            decision = strategy.decide_scan(now=now, session=session)

            return self._ledger.upsert(
                AttendanceRecord(
                    student_id=key_student,
                    student_name=as_text(student_name),
                    lecture_id=session.lecture_id,
                    lecture_date=session.day,
                    marked_at_ms=to_epoch_millis(now),
                    status=decision.status,
                )
            )

    def _reject(self, reason: RejectReason, student_id: Any) -> Rejected:
        logger.warning("Scan rejected (%s) for student %r", reason.value, student_id)
        return Rejected(reason)


class AttendanceService:
    """Roster queries, student history and the teacher's absent override."""

    def __init__(self, ledger: AttendanceLedger, *, enrolled: Sequence[EnrolledStudent] = ()):
        self._ledger = ledger
        self._enrolled = tuple(enrolled)

    def mark_absent(
        self,
        *,
        current_role: Role,
        student_id: str,
        lecture_id: str,
        student_name: Optional[str] = None,
    ) -> AttendanceRecord:
        if current_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can mark students absent")

        student_id = require_non_empty(student_id, "student_id")
        lecture_id = require_non_empty(lecture_id, "lecture_id")
        parse_lecture_day(lecture_id)

        if not student_name:
            student_name = next((s.student_name for s in self._enrolled if s.student_id == student_id), None)
        return self._ledger.mark_absent(student_id, lecture_id, student_name=student_name)

    def roster(self, lecture_id: str, *, now: datetime | None = None) -> RosterSnapshot:
        records = tuple(self._ledger.query_by_lecture(lecture_id))
        seen = {r.student_id for r in records}
        return RosterSnapshot(
            lecture_id=lecture_id,
            records=records,
            counts=StatusCounts.tally(records),
            taken_at=now or now_local(),
            not_scanned=tuple(s for s in self._enrolled if s.student_id not in seen),
            enrolled_total=len(self._enrolled) if self._enrolled else None,
        )

    def student_history(self, student_id: str) -> dict:
        student_id = require_non_empty(student_id, "student_id")
        records = self._ledger.query_by_student(student_id)
        return {
            "student_id": student_id,
            "records": [r.to_dict() for r in records],
            "attendance_percentage": self._ledger.attendance_percentage(student_id),
        }
