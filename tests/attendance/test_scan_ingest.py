from __future__ import annotations

from datetime import timedelta

import pytest

from src.classroom_attendance.classroom_attendance.attendance.ledger import AttendanceLedger, KeyedLocks
from src.classroom_attendance.classroom_attendance.attendance.repository import InMemoryAttendanceRepository
from src.classroom_attendance.classroom_attendance.attendance.service import Accepted, Rejected, ScanIngestService
from src.classroom_attendance.classroom_attendance.common.datetime_utils import to_epoch_millis
from src.classroom_attendance.classroom_attendance.core.enums import AttendanceStatus, RejectReason, Role
from src.classroom_attendance.classroom_attendance.core.exceptions import AuthorizationError, ValidationError
from src.classroom_attendance.classroom_attendance.tokens.codec import encode_payload
from src.classroom_attendance.classroom_attendance.tokens.model import SessionToken

from conftest import at


def test_scan_during_window_is_present(rotator, scan_service, ledger):
    token = rotator.tick(at(9, 10))

    result = scan_service.submit(encode_payload(token), "ST1", "Alex Johnson", now=at(9, 10, 3))

    assert isinstance(result, Accepted)
    assert result.record.status == AttendanceStatus.PRESENT
    assert result.record.lecture_id == "20260302-0540"
    assert result.record.marked_at_ms == to_epoch_millis(at(9, 10, 3))
    assert ledger.get("ST1", "20260302-0540") == result.record


def test_same_token_long_after_is_rejected(rotator, scan_service, ledger):
    token = rotator.tick(at(9, 10))

    result = scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 25))

    assert isinstance(result, Rejected)
    assert result.reason == RejectReason.EXPIRED_OR_UNKNOWN
    assert result.message
    assert ledger.query_by_lecture("20260302-0540") == []


@pytest.mark.parametrize("offset_ms, accepted", [(0, True), (5000, True), (9999, True), (10000, False), (-1, False)])
def test_token_window_boundaries(rotator, scan_service, offset_ms, accepted):
    token = rotator.tick(at(9, 5))
    now = at(9, 5) + timedelta(milliseconds=offset_ms)

    result = scan_service.submit(encode_payload(token), "ST1", "Alex", now=now)

    assert result.accepted is accepted


def test_two_students_same_token(rotator, scan_service, ledger):
    token = rotator.tick(at(9, 10))
    before = ledger.counts_by_status("20260302-0540").total

    first = scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 10, 1))
    second = scan_service.submit(encode_payload(token), "ST2", "Sarah", now=at(9, 10, 2))

    assert isinstance(first, Accepted) and isinstance(second, Accepted)
    assert ledger.counts_by_status("20260302-0540").total == before + 2


def test_double_scan_is_idempotent(rotator, scan_service, ledger):
    token = rotator.tick(at(9, 10, 58))
    scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 10, 59))
    again = scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 11, 2))

    records = ledger.query_by_lecture("20260302-0540")
    assert len(records) == 1
    # second scan lands after the late threshold but keeps "present"
    assert again.record.status == AttendanceStatus.PRESENT
    assert records[0].marked_at_ms == to_epoch_millis(at(9, 11, 2))


def test_late_scan_then_mark_absent(rotator, scan_service, attendance_service, ledger):
    token = rotator.tick(at(9, 12))
    result = scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 12))
    assert result.record.status == AttendanceStatus.LATE

    attendance_service.mark_absent(current_role=Role.TEACHER, student_id="ST1", lecture_id="20260302-0540")

    stored = ledger.get("ST1", "20260302-0540")
    assert stored.status == AttendanceStatus.ABSENT
    assert stored.marked_at_ms is None


def test_mark_absent_requires_teacher(attendance_service):
    with pytest.raises(AuthorizationError):
        attendance_service.mark_absent(current_role=Role.STUDENT, student_id="ST1", lecture_id="20260302-0540")


def test_mark_absent_validates_lecture(attendance_service):
    with pytest.raises(ValidationError):
        attendance_service.mark_absent(current_role=Role.TEACHER, student_id="ST1", lecture_id="tomorrow")


def test_malformed_payload_rejected_first(rotator, scan_service, ledger):
    rotator.tick(at(9, 10))

    result = scan_service.submit("OFFICE_CHECKIN_SYSTEM", "", None, now=at(9, 10, 1))

    assert isinstance(result, Rejected)
    assert result.reason == RejectReason.MALFORMED


def test_unknown_token_checked_before_identity(rotator, scan_service):
    token = rotator.tick(at(9, 10))
    forged = SessionToken(token.lecture_id, token.issued_at_ms, "forged-nonce")

    result = scan_service.submit(encode_payload(forged), "", None, now=at(9, 10, 1))

    assert result.reason == RejectReason.EXPIRED_OR_UNKNOWN


@pytest.mark.parametrize("student_id", ["", "   ", None])
def test_missing_identity(rotator, scan_service, ledger, student_id):
    token = rotator.tick(at(9, 10))

    result = scan_service.submit(encode_payload(token), student_id, "Alex", now=at(9, 10, 1))

    assert isinstance(result, Rejected)
    assert result.reason == RejectReason.MISSING_IDENTITY
    assert ledger.query_by_lecture("20260302-0540") == []


def test_no_lecture_means_no_valid_token(rotator, scan_service):
    assert rotator.tick(at(10, 45)) is None
    stale = SessionToken("20260302-0540", to_epoch_millis(at(10, 29, 59)), "whatever")

    result = scan_service.submit(encode_payload(stale), "ST1", "Alex", now=at(10, 30))

    assert result.reason == RejectReason.EXPIRED_OR_UNKNOWN


def test_scan_does_not_consume_token(rotator, scan_service):
    token = rotator.tick(at(9, 10))
    scan_service.submit(encode_payload(token), "ST1", "Alex", now=at(9, 10, 1))

    assert rotator.current_token() == token
    assert rotator.match(token, at(9, 10, 2)) is not None


def test_reject_payload_shape():
    body = Rejected(RejectReason.MISSING_IDENTITY).to_dict()
    assert body == {"success": False, "reason": "missing_identity", "message": RejectReason.MISSING_IDENTITY.message}


def test_rejected_scans_leave_no_lock_entries(rotator):
    locks = KeyedLocks()
    service = ScanIngestService(rotator, AttendanceLedger(InMemoryAttendanceRepository(), locks=locks))
    rotator.tick(at(9, 10))

    for i in range(50):
        junk = SessionToken(f"junk-{i}", to_epoch_millis(at(9, 10)), "nonce")
        result = service.submit(encode_payload(junk), f"ST{i}", None, now=at(9, 10, 1))
        assert result.reason == RejectReason.EXPIRED_OR_UNKNOWN

    assert len(locks) == 0


def test_non_string_identity_is_normalised(rotator, scan_service, ledger):
    token = rotator.tick(at(9, 10))

    result = scan_service.submit(encode_payload(token), 2024001, 42, now=at(9, 10, 1))

    assert isinstance(result, Accepted)
    assert result.record.student_id == "2024001"
    assert result.record.student_name == "42"
    assert ledger.get("2024001", "20260302-0540") is not None
