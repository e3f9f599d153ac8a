"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Europe/London"
DEFAULT_SESSION_WINDOW_DAYS = 14
DEFAULT_LEAD_MINUTES = 15
DEFAULT_LOCK_HOURS = 12
DEFAULT_SAVE_ATTEMPTS = 3
DEFAULT_ACTIVE_BOOKING_STATUSES = ("active", "confirmed", "current")
