from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...schedules.model import LectureSession
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Scan inside the late threshold."""

    def decide_scan(self, *, now: datetime, session: LectureSession) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
