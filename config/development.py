import os

from .config import DB_CONFIG, DEFAULT_ENROLLED_STUDENTS, DEFAULT_SCHEDULE, env_int, env_json

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "memory" keeps the ledger in process; "mysql" uses DB_CONFIG
STORAGE = os.getenv("STORAGE", "memory")
# If enabled with mysql storage, app will apply schema.sql on startup (idempotent)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

ROTATION_SECONDS = env_int("ROTATION_SECONDS", 5)
GRACE_SECONDS = env_int("GRACE_SECONDS", ROTATION_SECONDS)
LATE_THRESHOLD_MINUTES = env_int("LATE_THRESHOLD_MINUTES", 10)
REFRESH_SECONDS = env_int("REFRESH_SECONDS", 5)

SCHEDULE = env_json("SCHEDULE_JSON", DEFAULT_SCHEDULE)
ENROLLED_STUDENTS = env_json("ENROLLED_STUDENTS_JSON", DEFAULT_ENROLLED_STUDENTS)

# Start background loops (token rotation, live roster) with the app
START_BACKGROUND_JOBS = True
