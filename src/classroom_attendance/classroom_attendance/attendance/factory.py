from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..schedules.model import LectureSession
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_scan(self, *, now: datetime, session: LectureSession, late_threshold_minutes: int) -> AttendanceStrategy:
        # Whole minutes since the lecture began: 09:10:59 is still minute 10.
        elapsed_minutes = (now - session.starts_at) // timedelta(minutes=1)
        if elapsed_minutes <= late_threshold_minutes:
            return PresentStrategy()
        return LateStrategy()
