import os

# Main and secondary campus share one center until the secondary site is surveyed.
DEFAULT_CAMPUS_ZONES = [
    {
        "id": "main-campus",
        "name": "Main Campus",
        "center": {"lat": 6.897664, "lng": 80.599450},
        "radius": 1000,
        "allowed_hours": {"start": "00:00", "end": "23:59"},
    },
    {
        "id": "secondary-campus",
        "name": "Secondary Campus",
        "center": {"lat": 6.897664, "lng": 80.599450},
        "radius": 1000,
        "allowed_hours": {"start": "00:00", "end": "23:59"},
    },
]


def db_config_from_env(*, default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "class_attendance"),
    }


UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
UPLOAD_BASE_URL = os.getenv("UPLOAD_BASE_URL", "/uploads")

FACE_MATCH_THRESHOLD = float(os.getenv("FACE_MATCH_THRESHOLD", "0.6"))
LOCATION_TIMEOUT_SECONDS = float(os.getenv("LOCATION_TIMEOUT_SECONDS", "10"))
LOCATION_WORKERS = int(os.getenv("LOCATION_WORKERS", "4"))
VERIFICATION_MAX_AGE_SECONDS = int(os.getenv("VERIFICATION_MAX_AGE_SECONDS", "300"))

CAMPUS_ZONES = DEFAULT_CAMPUS_ZONES
