import os


def get_settings_module() -> str:
    # Chọn module cấu hình theo biến môi trường APP_ENV (mặc định: development)
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "kindergarten.settings.production"

    if env in {"test", "testing"}:
        return "kindergarten.settings.testing"

    return "kindergarten.settings.development"
