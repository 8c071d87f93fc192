import os

from .config import DB_CONFIG, DEFAULT_SCHEDULE, env_int, env_json

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORAGE = os.getenv("STORAGE", "mysql")
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ROTATION_SECONDS = env_int("ROTATION_SECONDS", 5)
GRACE_SECONDS = env_int("GRACE_SECONDS", ROTATION_SECONDS)
LATE_THRESHOLD_MINUTES = env_int("LATE_THRESHOLD_MINUTES", 10)
REFRESH_SECONDS = env_int("REFRESH_SECONDS", 5)

SCHEDULE = env_json("SCHEDULE_JSON", DEFAULT_SCHEDULE)
ENROLLED_STUDENTS = env_json("ENROLLED_STUDENTS_JSON", [])

START_BACKGROUND_JOBS = True
