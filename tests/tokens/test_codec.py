from __future__ import annotations

import json

import pytest

from src.classroom_attendance.classroom_attendance.core.exceptions import MalformedToken
from src.classroom_attendance.classroom_attendance.tokens.codec import decode_payload, encode_payload
from src.classroom_attendance.classroom_attendance.tokens.model import SessionToken


def test_payload_has_expected_fields():
    token = SessionToken(lecture_id="20260302-0540", issued_at_ms=1772442600000, nonce="abc")

    data = json.loads(encode_payload(token))

    assert data == {"lectureId": "20260302-0540", "issuedAt": 1772442600000, "nonce": "abc"}
    assert decode_payload(encode_payload(token)) == token


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "OFFICE_CHECKIN_SYSTEM",
        "[1, 2, 3]",
        '{"lectureId": "L1", "issuedAt": 1}',
        '{"lectureId": "", "issuedAt": 1, "nonce": "n"}',
        '{"lectureId": "L1", "issuedAt": "1", "nonce": "n"}',
        '{"lectureId": "L1", "issuedAt": true, "nonce": "n"}',
        '{"lectureId": "L1", "issuedAt": 1.5, "nonce": "n"}',
        '{"lectureId": 7, "issuedAt": 1, "nonce": "n"}',
        '{"lectureId": "L1", "issuedAt": 1, "nonce": ""}',
    ],
)
def test_malformed_payloads(text):
    with pytest.raises(MalformedToken):
        decode_payload(text)
