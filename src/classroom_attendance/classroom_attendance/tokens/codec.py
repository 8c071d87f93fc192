"""Text payload carried inside the QR image.

Format: compact JSON ``{"lectureId": str, "issuedAt": int, "nonce": str}``.
"""

from __future__ import annotations

import json

from ..core.exceptions import MalformedToken
from .model import SessionToken


def encode_payload(token: SessionToken) -> str:
    return json.dumps(
        {"lectureId": token.lecture_id, "issuedAt": token.issued_at_ms, "nonce": token.nonce},
        separators=(",", ":"),
    )


def decode_payload(text: str) -> SessionToken:
    if not isinstance(text, str) or not text.strip():
        raise MalformedToken("empty payload")

    try:
        data = json.loads(text)
    except ValueError:
        raise MalformedToken("payload is not JSON") from None

    if not isinstance(data, dict):
        raise MalformedToken("payload is not an object")

    lecture_id = data.get("lectureId")
    issued_at = data.get("issuedAt")
    nonce = data.get("nonce")

    if not isinstance(lecture_id, str) or not lecture_id:
        raise MalformedToken("lectureId missing")
    # bool is an int subclass
    if isinstance(issued_at, bool) or not isinstance(issued_at, int):
        raise MalformedToken("issuedAt missing")
    if not isinstance(nonce, str) or not nonce:
        raise MalformedToken("nonce missing")

    return SessionToken(lecture_id=lecture_id, issued_at_ms=issued_at, nonce=nonce)
