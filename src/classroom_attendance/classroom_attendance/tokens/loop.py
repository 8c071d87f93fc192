from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

from ..common.datetime_utils import now_local
from ..core.exceptions import ClockOrScheduleUnavailable
from .rotator import TokenRotator

logger = logging.getLogger(__name__)


class RotationLoop:
    """Drives TokenRotator.tick on a fixed interval.

    ``max_instances=1`` makes the scheduler skip a tick while the previous one
    is still running; ``coalesce`` folds missed ticks into one.
    """

    JOB_ID = "token-rotation"

    def __init__(
        self,
        rotator: TokenRotator,
        scheduler: BaseScheduler,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._rotator = rotator
        self._scheduler = scheduler
        self._clock = clock
        self._job = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is not None:
            return
        self._rotator.resume()
        self._job = self._scheduler.add_job(
            self.run_once,
            trigger="interval",
            seconds=self._rotator.rotation_seconds,
            id=self.JOB_ID,
            name="Rotate attendance QR token",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=self._clock(),
        )
        logger.info("Token rotation started (every %ss)", self._rotator.rotation_seconds)

    def run_once(self) -> Optional[object]:
        try:
            return self._rotator.tick(self._clock())
        except ClockOrScheduleUnavailable:
            logger.error("Schedule unavailable; token rotation stopped")
            self.stop()
            return None

    def stop(self) -> None:
        job, self._job = self._job, None
        if job is not None:
            try:
                job.remove()
            except JobLookupError:
                pass
            logger.info("Token rotation stopped")
        self._rotator.invalidate()
