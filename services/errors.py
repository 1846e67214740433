"""
Typed errors raised by the auth services.

Each error carries the HTTP status and envelope code it maps to; the
handler registered in api/errors.py turns them into JSON responses.
"""
from __future__ import annotations


class AuthError(Exception):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(self, message: str | None = None, status_code: int | None = None, details: dict | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class InvalidOtpError(AuthError):
    status_code = 400
    code = "INVALID_OTP"
    default_message = "Invalid OTP"


class InvalidTokenError(AuthError):
    """Bad signature, malformed token or wrong token type."""
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ExpiredTokenError(InvalidTokenError):
    default_message = "Unauthorized"


class InvalidRefreshTokenError(AuthError):
    """No active refresh token row matched (rotated, revoked, expired or unknown)."""
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(AuthError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(AuthError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class UpstreamProviderError(AuthError):
    status_code = 500
    code = "UPSTREAM_ERROR"
    default_message = "OTP provider request failed"
