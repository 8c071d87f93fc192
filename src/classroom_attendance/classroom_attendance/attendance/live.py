from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_REFRESH_SECONDS
from ..core.exceptions import ValidationError
from ..schedules.service import LectureClock
from .model import RosterSnapshot
from .service import AttendanceService

logger = logging.getLogger(__name__)


class LiveRosterFeed:
    """Polls the ledger for one lecture and keeps the latest snapshot.

    Staleness is bounded by the refresh period. The feed stops itself after
    the first refresh at or past ``ends_at``.
    """

    def __init__(
        self,
        service: AttendanceService,
        scheduler: BaseScheduler,
        lecture_id: str,
        *,
        ends_at: Optional[datetime] = None,
        refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._service = service
        self._scheduler = scheduler
        self._lecture_id = lecture_id
        self._ends_at = ends_at
        self._refresh_seconds = int(refresh_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._latest: Optional[RosterSnapshot] = None
        self._job = None

    @property
    def lecture_id(self) -> str:
        return self._lecture_id

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is not None:
            return
        self._job = self._scheduler.add_job(
            self.refresh,
            trigger="interval",
            seconds=self._refresh_seconds,
            id=f"live-roster:{self._lecture_id}",
            name=f"Refresh roster {self._lecture_id}",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            next_run_time=self._clock(),
        )
        logger.info("Live roster for %s refreshing every %ss", self._lecture_id, self._refresh_seconds)

    def refresh(self) -> RosterSnapshot:
        now = self._clock()
        snapshot = self._service.roster(self._lecture_id, now=now)
        with self._lock:
            self._latest = snapshot
        if self._ends_at is not None and now >= self._ends_at and self.running:
            logger.info("Lecture %s has ended; live roster closing", self._lecture_id)
            self.stop()
        return snapshot

    def latest(self) -> Optional[RosterSnapshot]:
        with self._lock:
            return self._latest

    def stop(self) -> None:
        job, self._job = self._job, None
        if job is None:
            return
        try:
            job.remove()
        except JobLookupError:
            pass
        logger.info("Live roster for %s stopped", self._lecture_id)


class LiveRosterBoard:
    """Keeps one feed per scheduled lecture that a teacher is watching."""

    def __init__(
        self,
        service: AttendanceService,
        scheduler: BaseScheduler,
        lecture_clock: LectureClock,
        *,
        refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._service = service
        self._scheduler = scheduler
        self._lecture_clock = lecture_clock
        self._refresh_seconds = refresh_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._feeds: dict[str, LiveRosterFeed] = {}

    @property
    def refresh_seconds(self) -> int:
        return self._refresh_seconds

    def watch(self, lecture_id: str) -> LiveRosterFeed:
        """Return the feed for ``lecture_id``, starting it while the lecture runs.

        Raises ValidationError when the id names no slot in the timetable.
        """

        session = self._lecture_clock.session_for(lecture_id)
        if session is None:
            raise ValidationError(f"Unknown lecture: {lecture_id!r}")

        with self._lock:
            # feeds that closed themselves at the end of their lecture
            for stale in [k for k, f in self._feeds.items() if not f.running]:
                del self._feeds[stale]

            feed = self._feeds.get(lecture_id)
            if feed is not None:
                return feed

            feed = LiveRosterFeed(
                self._service,
                self._scheduler,
                lecture_id,
                ends_at=session.ends_at,
                refresh_seconds=self._refresh_seconds,
                clock=self._clock,
            )
            if self._clock() < session.ends_at:
                self._feeds[lecture_id] = feed
                feed.start()
            return feed

    def snapshot(self, lecture_id: str) -> RosterSnapshot:
        feed = self.watch(lecture_id)
        return feed.latest() or feed.refresh()

    def close(self, lecture_id: str) -> bool:
        with self._lock:
            feed = self._feeds.pop(lecture_id, None)
        if feed is None:
            return False
        feed.stop()
        return True

    def close_all(self) -> None:
        with self._lock:
            feeds, self._feeds = list(self._feeds.values()), {}
        for feed in feeds:
            feed.stop()
