from __future__ import annotations

import hmac
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionToken:
    """Short-lived credential shown as a QR code during one lecture."""

    lecture_id: str
    issued_at_ms: int
    nonce: str

    def matches(self, other: "SessionToken") -> bool:
        return (
            self.lecture_id == other.lecture_id
            and self.issued_at_ms == other.issued_at_ms
            and hmac.compare_digest(self.nonce.encode("utf-8"), other.nonce.encode("utf-8"))
        )

    def is_live(self, now_ms: int, window_ms: int) -> bool:
        return self.issued_at_ms <= now_ms < self.issued_at_ms + window_ms
