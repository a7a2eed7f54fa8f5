"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60

IDEMPOTENCY_WINDOW_SECONDS = 5
OVERTIME_MAX_HOURS = 2.0

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REPORT_DAYS = 7

# Midnight crossover: an end time before 06:00 paired with a start after 20:00
# is read as next-day.
EARLY_MORNING_LIMIT = 6 * 60
LATE_EVENING_LIMIT = 20 * 60
