"""
Auth services, built once from configuration and handed to the API layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from services.otp_gateway import OtpGateway
from services.refresh_tokens import RefreshTokenStore
from services.token_issuer import TokenIssuer


@dataclass
class AuthServices:
    storage: Any
    issuer: TokenIssuer
    otp: OtpGateway
    refresh_tokens: RefreshTokenStore

    @classmethod
    def from_config(cls, config: Mapping[str, Any], storage, transport=None) -> "AuthServices":
        issuer = TokenIssuer(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER"),
        )
        otp = OtpGateway(
            storage,
            send_url=config.get("OTP_SEND_URL", ""),
            validate_url=config.get("OTP_VALIDATE_URL", ""),
            customer_id=config.get("OTP_CUSTOMER_ID", ""),
            auth_token=config.get("OTP_AUTH_TOKEN", ""),
            timeout=config.get("OTP_HTTP_TIMEOUT", 10.0),
            transport=transport,
        )
        return cls(
            storage=storage,
            issuer=issuer,
            otp=otp,
            refresh_tokens=RefreshTokenStore(storage, issuer),
        )
