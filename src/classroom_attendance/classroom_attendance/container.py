from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from .attendance.factory import AttendanceStrategyFactory
from .attendance.ledger import AttendanceLedger
from .attendance.live import LiveRosterBoard
from .attendance.model import EnrolledStudent
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository, InMemoryAttendanceRepository
from .attendance.service import AttendanceService, ScanIngestService
from .common.datetime_utils import now_local
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .schedules.config_schedule_repository import ConfigScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import LectureClock
from .tokens.loop import RotationLoop
from .tokens.rotator import TokenRotator


@dataclass(frozen=True)
class Container:
    scheduler: BackgroundScheduler
    clock: Callable[[], datetime]

    schedules_repo: ScheduleRepository
    attendance_repo: AttendanceRepository

    lecture_clock: LectureClock
    token_rotator: TokenRotator
    rotation_loop: RotationLoop
    ledger: AttendanceLedger
    scan_service: ScanIngestService
    attendance_service: AttendanceService
    live_board: LiveRosterBoard

    def start_background_jobs(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
        self.rotation_loop.start()

    def shutdown(self) -> None:
        self.live_board.close_all()
        self.rotation_loop.stop()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)


def _build_attendance_repo(settings: Any) -> AttendanceRepository:
    storage = str(getattr(settings, "STORAGE", "memory")).lower()
    if storage == "memory":
        return InMemoryAttendanceRepository()
    if storage == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLAttendanceRepository(conn)
    raise ValueError(f"Unknown STORAGE setting: {storage!r}")


def build_container(
    *,
    settings: Any,
    clock: Callable[[], datetime] = now_local,
    scheduler: Optional[BackgroundScheduler] = None,
) -> Container:
    rotation_seconds = int(getattr(settings, "ROTATION_SECONDS", constants.DEFAULT_ROTATION_SECONDS))
    grace_seconds = int(getattr(settings, "GRACE_SECONDS", rotation_seconds))
    late_threshold = int(getattr(settings, "LATE_THRESHOLD_MINUTES", constants.DEFAULT_LATE_THRESHOLD_MINUTES))
    refresh_seconds = int(getattr(settings, "REFRESH_SECONDS", constants.DEFAULT_REFRESH_SECONDS))

    scheduler = scheduler or BackgroundScheduler(daemon=True)

    schedules_repo = ConfigScheduleRepository(getattr(settings, "SCHEDULE", []))
    attendance_repo = _build_attendance_repo(settings)
    enrolled = [
        EnrolledStudent(student_id=str(s["id"]), student_name=str(s.get("name") or ""))
        for s in getattr(settings, "ENROLLED_STUDENTS", [])
    ]

    lecture_clock = LectureClock(schedules_repo)
    token_rotator = TokenRotator(lecture_clock, rotation_seconds=rotation_seconds, grace_seconds=grace_seconds)
    rotation_loop = RotationLoop(token_rotator, scheduler, clock=clock)
    ledger = AttendanceLedger(attendance_repo)
    scan_service = ScanIngestService(
        token_rotator,
        ledger,
        strategy_factory=AttendanceStrategyFactory(),
        late_threshold_minutes=late_threshold,
    )
    attendance_service = AttendanceService(ledger, enrolled=enrolled)
    live_board = LiveRosterBoard(
        attendance_service, scheduler, lecture_clock, refresh_seconds=refresh_seconds, clock=clock
    )

    return Container(
        scheduler=scheduler,
        clock=clock,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        lecture_clock=lecture_clock,
        token_rotator=token_rotator,
        rotation_loop=rotation_loop,
        ledger=ledger,
        scan_service=scan_service,
        attendance_service=attendance_service,
        live_board=live_board,
    )
