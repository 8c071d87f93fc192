"""Settings shared by every environment module."""

import json
import os


def env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def env_json(name: str, default):
    raw = os.environ.get(name)
    return json.loads(raw) if raw else default


# Daily timetable. ``start`` accepts "HH:MM" or "hh:mm AM/PM"; ``duration`` is minutes.
DEFAULT_SCHEDULE = [
    {"start": "09:00 AM", "duration": 90, "subject": "Mathematics", "room": "Room 101"},
    {"start": "10:30 AM", "duration": 90, "subject": "Physics", "room": "Lab 201"},
    {"start": "01:00 PM", "duration": 90, "subject": "Computer Science", "room": "Room 305"},
    {"start": "02:30 PM", "duration": 90, "subject": "English Literature", "room": "Room 102"},
]

DEFAULT_ENROLLED_STUDENTS = [
    {"id": "ST2024001", "name": "Alex Johnson"},
    {"id": "ST2024002", "name": "Sarah Williams"},
    {"id": "ST2024003", "name": "Mike Chen"},
    {"id": "ST2024004", "name": "Emma Davis"},
    {"id": "ST2024005", "name": "David Brown"},
]

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": env_int("DB_PORT", 3306),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance"),
}
