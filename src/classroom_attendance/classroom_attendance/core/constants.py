"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ROTATION_SECONDS = 5
# Grace defaults to one rotation period when not configured.
DEFAULT_GRACE_SECONDS = DEFAULT_ROTATION_SECONDS
DEFAULT_LATE_THRESHOLD_MINUTES = 10
DEFAULT_REFRESH_SECONDS = 5

MINUTES_PER_DAY = 24 * 60
NONCE_BYTES = 16
