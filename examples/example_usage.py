"""Example: drive one lecture through the service layer (no Flask).

Controllers are thin; the rotator, scan ingest and ledger do the work.
"""

import importlib
from datetime import datetime

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.container import build_container
from src.classroom_attendance.classroom_attendance.core.enums import Role
from src.classroom_attendance.classroom_attendance.tokens.codec import encode_payload


def main():
    settings = importlib.import_module(get_settings_module())
    now = datetime.now().replace(hour=9, minute=12, second=0, microsecond=0)
    container = build_container(settings=settings, clock=lambda: now)

    token = container.token_rotator.tick(now)
    print("QR payload:", encode_payload(token))

    for student in settings.ENROLLED_STUDENTS[:3]:
        result = container.scan_service.submit(encode_payload(token), student["id"], student["name"], now=now)
        print(result.to_dict())

    container.attendance_service.mark_absent(
        current_role=Role.TEACHER, student_id=settings.ENROLLED_STUDENTS[2]["id"], lecture_id=token.lecture_id
    )
    print(container.attendance_service.roster(token.lecture_id, now=now).to_dict())


if __name__ == "__main__":
    main()
