from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import to_epoch_millis
from ..core.constants import DEFAULT_ROTATION_SECONDS, NONCE_BYTES
from ..core.exceptions import ClockOrScheduleUnavailable
from ..schedules.model import LectureSession
from ..schedules.service import LectureClock
from .model import SessionToken

logger = logging.getLogger(__name__)


def new_nonce() -> str:
    return secrets.token_urlsafe(NONCE_BYTES)


class TokenRotator:
    """Owns the live token(s) for the active lecture.

    Holds the current token and the one it replaced ("grace"). A token is
    accepted only on ``[issued_at, issued_at + rotation + grace)`` and only
    while its lecture is still the active one.
    """

    def __init__(
        self,
        clock: LectureClock,
        *,
        rotation_seconds: int = DEFAULT_ROTATION_SECONDS,
        grace_seconds: Optional[int] = None,
        nonce_factory: Callable[[], str] = new_nonce,
    ):
        if rotation_seconds <= 0:
            raise ValueError("rotation_seconds must be positive")
        self._clock = clock
        self._rotation_seconds = int(rotation_seconds)
        self._grace_seconds = int(rotation_seconds if grace_seconds is None else grace_seconds)
        self._nonce_factory = nonce_factory

        self._lock = threading.Lock()
        self._session: Optional[LectureSession] = None
        self._current: Optional[SessionToken] = None
        self._grace: Optional[SessionToken] = None
        # Cleared by invalidate(); a tick started before that must not publish.
        self._armed = True
        self._generation = 0

    @property
    def rotation_seconds(self) -> int:
        return self._rotation_seconds

    @property
    def grace_seconds(self) -> int:
        return self._grace_seconds

    @property
    def window_ms(self) -> int:
        return (self._rotation_seconds + self._grace_seconds) * 1000

    def tick(self, now: datetime) -> Optional[SessionToken]:
        """Mint the next token for the active lecture, or drop everything when idle.

        Returns None without publishing when the rotator has been invalidated,
        including by an invalidate() that lands while the schedule is read.
        Raises ClockOrScheduleUnavailable after clearing state if the
        schedule cannot be read.
        """

        with self._lock:
            if not self._armed:
                return None
            generation = self._generation

        try:
            session = self._clock.active_session(now)
        except ClockOrScheduleUnavailable:
            with self._lock:
                self._clear()
            raise

        now_ms = to_epoch_millis(now)
        with self._lock:
            if not self._armed or self._generation != generation:
                logger.debug("Discarding tick at %s: rotation was stopped", now_ms)
                return None

            if session is None:
                if self._session is not None:
                    logger.info("Lecture %s is over; tokens cleared", self._session.lecture_id)
                self._clear()
                return None

            if self._session is None or self._session.lecture_id != session.lecture_id:
                self._clear()
                self._session = session
                logger.info("Issuing tokens for lecture %s (%s)", session.lecture_id, session.slot.subject)

            token = SessionToken(lecture_id=session.lecture_id, issued_at_ms=now_ms, nonce=self._nonce_factory())
            self._grace = self._current
            self._current = token
            if self._grace is not None and not self._grace.is_live(now_ms, self.window_ms):
                self._grace = None

            logger.debug("Rotated token for %s at %s", session.lecture_id, now_ms)
            return token

    def resume(self) -> None:
        """Allow tick() to publish tokens again after invalidate()."""
        with self._lock:
            self._armed = True

    def invalidate(self) -> None:
        """Drop held tokens and refuse to publish until resume()."""
        with self._lock:
            self._armed = False
            self._generation += 1
            if self._session is not None:
                logger.info("Tokens for lecture %s invalidated", self._session.lecture_id)
            self._clear()

    def _clear(self) -> None:
        self._session = None
        self._current = None
        self._grace = None

    def current_token(self) -> Optional[SessionToken]:
        with self._lock:
            return self._current

    def current_session(self) -> Optional[LectureSession]:
        with self._lock:
            return self._session

    def seconds_until_rotation(self, now: datetime) -> int:
        with self._lock:
            if self._current is None:
                return 0
            elapsed_ms = to_epoch_millis(now) - self._current.issued_at_ms
        return max(0, self._rotation_seconds - elapsed_ms // 1000)

    def match(self, presented: SessionToken, now: datetime) -> Optional[LectureSession]:
        """Return the session if ``presented`` is one of the live tokens."""

        now_ms = to_epoch_millis(now)
        with self._lock:
            if self._session is None or presented.lecture_id != self._session.lecture_id:
                return None
            for held in (self._current, self._grace):
                if held is not None and held.matches(presented) and held.is_live(now_ms, self.window_ms):
                    return self._session
        return None
