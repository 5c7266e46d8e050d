"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0

# Fallback geofence around a student's own registered coordinates.
REGISTERED_LOCATION_RADIUS_METERS = 1000.0
ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"

DEFAULT_FACE_MATCH_THRESHOLD = 0.6
DEFAULT_LOCATION_TIMEOUT_SECONDS = 10.0
DEFAULT_LOCATION_WORKERS = 4
DEFAULT_VERIFICATION_MAX_AGE_SECONDS = 300

DEFAULT_LINK_ACTIVE_MINUTES_BEFORE = 15
DEFAULT_LINK_ACTIVE_MINUTES_AFTER = 30

ATTENDANCE_KEY_SEPARATOR = "_"
FACE_IMAGE_PREFIX = "face-images"
