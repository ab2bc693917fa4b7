import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Attendance rules
CORRECTION_WINDOW_HOURS = float(os.getenv("CORRECTION_WINDOW_HOURS", "24"))
LOW_ATTENDANCE_THRESHOLD = float(os.getenv("LOW_ATTENDANCE_THRESHOLD", "75"))
ADMIN_ROLE = os.getenv("ADMIN_ROLE", "school_admin")

# Without an SMS gateway alerts are only logged; report them as sent here.
LOG_ALERTS_AS_SENT = bool(int(os.getenv("LOG_ALERTS_AS_SENT", "1")))
