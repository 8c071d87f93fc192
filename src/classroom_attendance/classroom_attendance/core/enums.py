from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization checks."""

    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the ledger."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class SlotState(str, Enum):
    """Where a schedule slot sits relative to the current time of day."""

    COMPLETED = "completed"
    CURRENT = "current"
    UPCOMING = "upcoming"


class RejectReason(str, Enum):
    """Why a scan was refused."""

    MALFORMED = "malformed"
    EXPIRED_OR_UNKNOWN = "expired_or_unknown"
    MISSING_IDENTITY = "missing_identity"

    @property
    def message(self) -> str:
        return {
            RejectReason.MALFORMED: "This is not an attendance QR code. Please scan again.",
            RejectReason.EXPIRED_OR_UNKNOWN: "QR code expired or not recognized. Scan the code currently on screen.",
            RejectReason.MISSING_IDENTITY: "We could not identify you. Please sign in again before scanning.",
        }[self]
