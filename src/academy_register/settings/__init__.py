import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; development is the default.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "academy_register.settings.production"

    if env in {"test", "testing"}:
        return "academy_register.settings.testing"

    return "academy_register.settings.development"
