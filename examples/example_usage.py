"""Example: use the service layer directly (no Flask).

Prints the upcoming sessions and the registers already taken today.
"""

import importlib

from dotenv import load_dotenv

from academy_register.common.datetime_utils import local_date, now_utc
from academy_register.container import build_container
from academy_register.settings import get_settings_module


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    result = container.session_service.upcoming(window_days=7)
    for s in result.sessions:
        print(f"{s.starts_at:%a %d %b %H:%M}Z  {s.class_name:<30} booked={s.enrolled_count}")
    for skipped in result.skipped:
        print(f"skipped {skipped.class_id}: {skipped.reason}")

    today = local_date(now_utc(), container.projector.zone)
    for row in container.register_service.find_registers_by_date(today):
        print(row.to_dict())


if __name__ == "__main__":
    main()
