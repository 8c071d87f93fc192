from .config import DB_CONFIG, DEFAULT_ENROLLED_STUDENTS, DEFAULT_SCHEDULE

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORAGE = "memory"
AUTO_INIT_DB = False

ROTATION_SECONDS = 5
GRACE_SECONDS = 5
LATE_THRESHOLD_MINUTES = 10
REFRESH_SECONDS = 5

SCHEDULE = DEFAULT_SCHEDULE
ENROLLED_STUDENTS = DEFAULT_ENROLLED_STUDENTS

# Tests drive ticks by hand
START_BACKGROUND_JOBS = False
