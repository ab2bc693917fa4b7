import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

CORRECTION_WINDOW_HOURS = float(os.getenv("CORRECTION_WINDOW_HOURS", "24"))
LOW_ATTENDANCE_THRESHOLD = float(os.getenv("LOW_ATTENDANCE_THRESHOLD", "75"))
ADMIN_ROLE = os.getenv("ADMIN_ROLE", "school_admin")

# Logged-only alerts are reported as not sent unless explicitly enabled.
LOG_ALERTS_AS_SENT = bool(int(os.getenv("LOG_ALERTS_AS_SENT", "0")))
