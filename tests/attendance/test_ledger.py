from __future__ import annotations

import threading
from datetime import date

from src.classroom_attendance.classroom_attendance.attendance.ledger import AttendanceLedger, KeyedLocks
from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord
from src.classroom_attendance.classroom_attendance.attendance.repository import InMemoryAttendanceRepository
from src.classroom_attendance.classroom_attendance.core.enums import AttendanceStatus

LECTURE = "20260302-0540"


def _record(student_id="ST1", status=AttendanceStatus.PRESENT, marked_at_ms=1000, name="Alex", lecture=LECTURE):
    return AttendanceRecord(
        student_id=student_id,
        student_name=name,
        lecture_id=lecture,
        lecture_date=date(2026, 3, 2),
        marked_at_ms=marked_at_ms,
        status=status,
    )


def test_upsert_inserts_then_replaces(ledger):
    ledger.upsert(_record(marked_at_ms=1000))
    ledger.upsert(_record(marked_at_ms=2000))

    records = ledger.query_by_lecture(LECTURE)
    assert len(records) == 1
    assert records[0].marked_at_ms == 2000


def test_upsert_never_downgrades_present_to_late(ledger):
    ledger.upsert(_record(status=AttendanceStatus.PRESENT, marked_at_ms=1000))
    stored = ledger.upsert(_record(status=AttendanceStatus.LATE, marked_at_ms=5000))

    assert stored.status == AttendanceStatus.PRESENT
    assert stored.marked_at_ms == 5000


def test_upsert_cannot_mark_absent(ledger):
    ledger.upsert(_record(status=AttendanceStatus.LATE))
    stored = ledger.upsert(_record(status=AttendanceStatus.ABSENT, marked_at_ms=None))
    assert stored.status == AttendanceStatus.LATE


def test_upsert_keeps_known_name_when_blank(ledger):
    ledger.upsert(_record(name="Alex"))
    assert ledger.upsert(_record(name="")).student_name == "Alex"


def test_mark_absent_downgrades_and_clears_time(ledger):
    for status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        ledger.upsert(_record(student_id=status.value, status=status))
        stored = ledger.mark_absent(status.value, LECTURE)
        assert stored.status == AttendanceStatus.ABSENT
        assert stored.marked_at_ms is None
        assert ledger.get(status.value, LECTURE) == stored


def test_mark_absent_without_prior_scan_creates_record(ledger):
    stored = ledger.mark_absent("ST9", LECTURE, student_name="Emma Davis")

    assert stored.status == AttendanceStatus.ABSENT
    assert stored.lecture_date == date(2026, 3, 2)
    assert stored.student_name == "Emma Davis"
    assert len(ledger.query_by_lecture(LECTURE)) == 1


def test_scan_after_mark_absent_restores_status(ledger):
    ledger.upsert(_record(status=AttendanceStatus.PRESENT))
    ledger.mark_absent("ST1", LECTURE)
    stored = ledger.upsert(_record(status=AttendanceStatus.LATE, marked_at_ms=9000))
    assert stored.status == AttendanceStatus.LATE


def test_query_keeps_insertion_order_across_updates(ledger):
    for sid in ("A", "B", "C"):
        ledger.upsert(_record(student_id=sid))
    ledger.upsert(_record(student_id="A", marked_at_ms=99))
    ledger.mark_absent("B", LECTURE)

    assert [r.student_id for r in ledger.query_by_lecture(LECTURE)] == ["A", "B", "C"]


def test_counts_by_status_are_derived(ledger):
    ledger.upsert(_record(student_id="A", status=AttendanceStatus.PRESENT))
    ledger.upsert(_record(student_id="B", status=AttendanceStatus.LATE))
    ledger.upsert(_record(student_id="C", status=AttendanceStatus.PRESENT))
    ledger.mark_absent("D", LECTURE)
    ledger.upsert(_record(student_id="E", lecture="20260302-0660"))

    counts = ledger.counts_by_status(LECTURE)
    assert counts.to_dict() == {"present": 2, "late": 1, "absent": 1}


def test_student_history_and_percentage(ledger):
    ledger.upsert(_record(lecture="20260302-0540", status=AttendanceStatus.PRESENT))
    ledger.upsert(_record(lecture="20260302-0660", status=AttendanceStatus.LATE))
    ledger.mark_absent("ST1", "20260303-0540")
    ledger.mark_absent("ST1", "20260304-0540")

    assert len(ledger.query_by_student("ST1")) == 4
    assert ledger.attendance_percentage("ST1") == 50.0
    assert ledger.attendance_percentage("nobody") == 0.0


def test_concurrent_upserts_for_one_key_leave_one_record():
    ledger = AttendanceLedger(InMemoryAttendanceRepository())
    start = threading.Barrier(8)

    def scan(i):
        start.wait()
        ledger.upsert(_record(marked_at_ms=i))

    threads = [threading.Thread(target=scan, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ledger.query_by_lecture(LECTURE)) == 1


def test_lock_for_one_key_does_not_block_another(ledger):
    done = threading.Event()

    with ledger.locked("ST1", LECTURE):
        worker = threading.Thread(target=lambda: (ledger.upsert(_record(student_id="ST2")), done.set()))
        worker.start()
        assert done.wait(timeout=2)
        worker.join()

    assert ledger.get("ST2", LECTURE) is not None


def test_keyed_locks_drop_entries_on_release():
    locks = KeyedLocks()

    with locks.hold(("ST1", LECTURE)):
        with locks.hold(("ST1", LECTURE)):
            assert len(locks) == 1
        assert len(locks) == 1

    assert len(locks) == 0


def test_ledger_writes_leave_no_lock_entries():
    locks = KeyedLocks()
    ledger = AttendanceLedger(InMemoryAttendanceRepository(), locks=locks)

    ledger.upsert(_record(student_id="A"))
    ledger.mark_absent("B", LECTURE)

    assert len(locks) == 0
