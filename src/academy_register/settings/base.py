import os


def _env_list(name: str, default: str) -> tuple:
    return tuple(s.strip() for s in os.getenv(name, default).split(",") if s.strip())


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_register"),
}

# Single fixed academy timezone (IANA name).
ACADEMY_TIMEZONE = os.getenv("ACADEMY_TIMEZONE", "Europe/London")

SESSION_WINDOW_DAYS = int(os.getenv("SESSION_WINDOW_DAYS", "14"))
REGISTER_LEAD_MINUTES = int(os.getenv("REGISTER_LEAD_MINUTES", "15"))
REGISTER_LOCK_HOURS = int(os.getenv("REGISTER_LOCK_HOURS", "12"))
REGISTER_SAVE_ATTEMPTS = int(os.getenv("REGISTER_SAVE_ATTEMPTS", "3"))
ACTIVE_BOOKING_STATUSES = _env_list("ACTIVE_BOOKING_STATUSES", "active,confirmed,current")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))
