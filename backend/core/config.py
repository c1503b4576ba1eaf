import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./doctor_booking.db")

API_SECRET_KEY = os.getenv("API_SECRET_KEY", "change-me")

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:3000"])

CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "UTC")
BOOKING_WINDOW_DAYS = int(os.getenv("BOOKING_WINDOW_DAYS", "7"))
STRICT_SLOT_PARSING = _get_bool(os.getenv("STRICT_SLOT_PARSING"), default=False)

IDENTITY_PROVIDER_URL = os.getenv("IDENTITY_PROVIDER_URL", "http://localhost:54321").rstrip("/")
IDENTITY_PROVIDER_ANON_KEY = os.getenv("IDENTITY_PROVIDER_ANON_KEY", "")
IDENTITY_PROVIDER_SERVICE_KEY = os.getenv("IDENTITY_PROVIDER_SERVICE_KEY", "")
IDENTITY_PROVIDER_JWT_SECRET = os.getenv("IDENTITY_PROVIDER_JWT_SECRET", "change-me")
IDENTITY_PROVIDER_TIMEOUT_SECONDS = float(os.getenv("IDENTITY_PROVIDER_TIMEOUT_SECONDS", "10"))
PASSWORD_RESET_REDIRECT_URL = os.getenv("PASSWORD_RESET_REDIRECT_URL", "")
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "doctor-images")

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

def validate_runtime_config() -> None:
    try:
        ZoneInfo(CLINIC_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"CLINIC_TIMEZONE {CLINIC_TIMEZONE!r} is not a known IANA timezone.") from exc
    if BOOKING_WINDOW_DAYS < 1:
        raise RuntimeError("BOOKING_WINDOW_DAYS must be at least 1.")

    if APP_ENV.lower() != "production":
        return
    if API_SECRET_KEY == "change-me":
        raise RuntimeError("API_SECRET_KEY must be set in production.")
    if IDENTITY_PROVIDER_JWT_SECRET == "change-me":
        raise RuntimeError("IDENTITY_PROVIDER_JWT_SECRET must be set in production.")
    if not IDENTITY_PROVIDER_SERVICE_KEY:
        raise RuntimeError("IDENTITY_PROVIDER_SERVICE_KEY must be set in production.")
