"""
Authentication blueprint:
- POST /auth/send-otp
- POST /auth/verify-otp
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

The implementation:
- Phone numbers are verified with the SMS OTP provider (services.otp_gateway)
- Issues short-lived access tokens (bearer) and longer-lived refresh tokens (cookie),
  JWTs signed with separate secrets (services.token_issuer)
- Stores only refresh token hashes so they can be rotated and revoked (services.refresh_tokens)
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, current_app

from api.extensions import limiter, otp_rate_limit
from models.schemas.auth import SendOtpSchema, VerifyOtpSchema, UserSummarySchema
from models.enums import UserStatus
from services.errors import InvalidOtpError, InvalidRefreshTokenError
from services.users import get_user, upsert_verified_user
from utils.decorators import jwt_required

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/auth")

send_otp_schema = SendOtpSchema()
verify_otp_schema = VerifyOtpSchema()
user_summary_schema = UserSummarySchema()


def _services():
    return current_app.extensions["auth_services"]


def _client_meta():
    return request.remote_addr, request.headers.get("User-Agent")


def _set_refresh_cookie(response, raw_token: str):
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        raw_token,
        max_age=_services().issuer.refresh_ttl_seconds,
        httponly=True,
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        samesite="Strict",
        path="/",
    )
    return response


def _clear_refresh_cookie(response):
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        path="/",
        httponly=True,
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        samesite="Strict",
    )
    return response


@bp.post("/send-otp")
@limiter.limit(otp_rate_limit)
def send_otp():
    """
    Send an SMS OTP to a phone number.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [phone, purpose]
          properties:
            phone: { type: string, example: "9876543210" }
            countryCode: { type: integer, example: 91 }
            purpose: { type: string, enum: [LOGIN, REGISTER] }
    responses:
      200:
        description: OTP sent
      400:
        description: Validation error
      429:
        description: Too many requests
    """
    payload = request.get_json(silent=True) or {}
    data = send_otp_schema.load(payload)

    challenge = _services().otp.send_otp(
        phone=data["phone"],
        country_code=str(data["country_code"]),
        purpose=data["purpose"],
    )
    return jsonify(
        {
            "ok": True,
            "verificationId": challenge.verification_id,
            "timeout": challenge.timeout_seconds,
        }
    ), 200


@bp.post("/verify-otp")
@limiter.limit(otp_rate_limit)
def verify_otp():
    """
    Verify an OTP: logs the user in (registering on first sight).
    Returns an access token and sets the refreshToken cookie.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [phone, verificationId, code]
          properties:
            phone: { type: string }
            countryCode: { type: integer }
            verificationId: { type: string }
            code: { type: string }
    responses:
      200:
        description: OK (returns access token, sets refresh cookie)
      400:
        description: Validation error or invalid OTP
    """
    payload = request.get_json(silent=True) or {}
    data = verify_otp_schema.load(payload)
    services = _services()

    country_code = str(data["country_code"])
    validation = services.otp.validate_otp(
        phone=data["phone"],
        country_code=country_code,
        verification_id=data["verification_id"],
        code=data["code"],
    )
    if not validation.ok:
        raise InvalidOtpError()

    user = upsert_verified_user(services.storage, data["phone"], country_code)

    ip, user_agent = _client_meta()
    access_token = services.issuer.sign_access_token(user.id, user.role)
    refresh_token = services.refresh_tokens.issue_refresh_token(user.id, ip=ip, user_agent=user_agent)

    response = jsonify(
        {
            "accessToken": access_token,
            "expiresIn": services.issuer.access_ttl_seconds,
            "user": user_summary_schema.dump(user),
        }
    )
    return _set_refresh_cookie(response, refresh_token), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange the refreshToken cookie for a new access token (rotates the cookie).
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (returns access token, sets new refresh cookie)
      401:
        description: Unauthorized
    """
    cookie_name = current_app.config["REFRESH_COOKIE_NAME"]
    raw = request.cookies.get(cookie_name)
    if not raw:
        raise InvalidRefreshTokenError("No refresh token provided")

    services = _services()
    payload = services.issuer.verify_refresh_token(raw)

    # Role comes from the database, not from whatever the old token said
    user = get_user(services.storage, payload.sub)
    if user is None or user.status == UserStatus.SUSPENDED.value:
        raise InvalidRefreshTokenError()

    ip, user_agent = _client_meta()
    new_raw = services.refresh_tokens.rotate_refresh_token(raw, user.id, ip=ip, user_agent=user_agent)
    access_token = services.issuer.sign_access_token(user.id, user.role)

    response = jsonify(
        {
            "accessToken": access_token,
            "expiresIn": services.issuer.access_ttl_seconds,
        }
    )
    return _set_refresh_cookie(response, new_raw), 200


@bp.post("/logout")
def logout():
    """
    logout: revokes the refresh token cookie (if any) and clears it
    ---
    tags:
      - Auth
    responses:
      200:
        description: Logged out
    """
    raw = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    if raw:
        try:
            _services().refresh_tokens.revoke_refresh_token(raw)
        except InvalidRefreshTokenError:
            logger.info("Logout with an inactive refresh token")

    response = jsonify({"ok": True})
    return _clear_refresh_cookie(response), 200


@bp.get("/me")
@jwt_required()
def me(auth):
    """
    Get the caller's identity from the access token.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"user": {"sub": auth.sub, "role": auth.role}}), 200
