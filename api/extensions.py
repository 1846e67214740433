"""Flask extensions shared across blueprints; bound to the app in create_app()."""
from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Per-IP limits; the app-wide default comes from RATELIMIT_DEFAULT
limiter = Limiter(key_func=get_remote_address)


def otp_rate_limit() -> str:
    return current_app.config["OTP_RATE_LIMIT"]
