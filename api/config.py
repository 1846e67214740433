"""
Environment-aware configuration.
Values come from the process environment after .env is loaded; durations are
parsed once here so nothing downstream re-reads or re-coerces them.
"""
import os
from dotenv import load_dotenv

from utils.durations import parse_duration

load_dotenv()  # Read .env if present


def _window(max_env: str, window_env: str, default_max: int, default_window_ms: int) -> str:
    """Build a rate-limit string like '10 per 60 second' from a count and a window in ms."""
    limit = int(os.getenv(max_env, str(default_max)))
    window_ms = int(os.getenv(window_env, str(default_window_ms)))
    return f"{limit} per {max(1, window_ms // 1000)} second"


def _duration(env_name: str, default: str):
    """Read a duration env var; a bad value raises ValueError naming the variable."""
    raw = os.getenv(env_name, default)
    try:
        return parse_duration(raw)
    except ValueError as exc:
        raise ValueError(f"{env_name}={raw!r} is not a valid duration (e.g. 15m, 7d, \"2 days\")") from exc


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("FRONTEND_ORIGIN", "*")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///marketplace.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

    # Access and refresh tokens use independent secrets
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret-change-me")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    ACCESS_TOKEN_EXPIRES = _duration("ACCESS_TOKEN_EXPIRES_IN", "15m")
    REFRESH_TOKEN_EXPIRES = _duration("REFRESH_TOKEN_EXPIRES_IN", "7d")
    REFRESH_COOKIE_NAME = "refreshToken"
    REFRESH_COOKIE_SECURE = False

    # SMS OTP provider
    OTP_SEND_URL = os.getenv("OTP_SEND_URL", "")
    OTP_VALIDATE_URL = os.getenv("OTP_VALIDATE_URL", "")
    OTP_CUSTOMER_ID = os.getenv("OTP_CUSTOMER_ID", "")
    OTP_AUTH_TOKEN = os.getenv("OTP_AUTH_TOKEN", "")
    OTP_HTTP_TIMEOUT = float(os.getenv("OTP_HTTP_TIMEOUT", "10"))

    # Flask-Limiter
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_DEFAULT = _window("RATE_LIMIT_MAX", "RATE_LIMIT_WINDOW_MS", 10, 60_000)
    OTP_RATE_LIMIT = _window("OTP_LIMIT_MAX", "OTP_LIMIT_WINDOW_MS", 5, 300_000)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite://"
    JWT_ACCESS_SECRET = "test-access-secret-at-least-32-bytes-long"
    JWT_REFRESH_SECRET = "test-refresh-secret-at-least-32-bytes-long"
    OTP_SEND_URL = "https://otp.test/verification/v3/send"
    OTP_VALIDATE_URL = "https://otp.test/verification/v3/validateOtp"
    OTP_CUSTOMER_ID = "C-TEST"
    OTP_AUTH_TOKEN = "test-auth-token"
    RATELIMIT_ENABLED = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    REFRESH_COOKIE_SECURE = True


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
