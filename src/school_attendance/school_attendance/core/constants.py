"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CORRECTION_WINDOW_HOURS = 24
LOW_ATTENDANCE_THRESHOLD = 75.0
DEFAULT_SYNC_BATCH_LIMIT = 100
PERCENTAGE_DECIMALS = 2
