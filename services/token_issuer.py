"""
JWT issuing and verification for access and refresh tokens (PyJWT).

Access and refresh tokens are signed with independent secrets, so leaking
one secret does not let an attacker forge the other token class.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from services.errors import ExpiredTokenError, InvalidTokenError

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class AccessTokenPayload:
    sub: str
    role: str | None


@dataclass(frozen=True)
class RefreshTokenPayload:
    sub: str
    token_id: str


class TokenIssuer:
    """Stateless signer/verifier configured once at startup."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        issuer: str | None = None,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.issuer = issuer

    @property
    def access_ttl_seconds(self) -> int:
        return int(self.access_ttl.total_seconds())

    @property
    def refresh_ttl_seconds(self) -> int:
        return int(self.refresh_ttl.total_seconds())

    def sign_access_token(self, subject_id: str, role: str | None) -> str:
        return self._encode(
            {"sub": str(subject_id), "role": role},
            ACCESS,
            self.access_secret,
            self.access_ttl,
        )

    def sign_refresh_token(self, subject_id: str, token_id: str) -> str:
        return self._encode(
            {"sub": str(subject_id), "tokenId": token_id},
            REFRESH,
            self.refresh_secret,
            self.refresh_ttl,
        )

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        decoded = self._decode(token, ACCESS, self.access_secret)
        return AccessTokenPayload(sub=decoded["sub"], role=decoded.get("role"))

    def verify_refresh_token(self, token: str) -> RefreshTokenPayload:
        decoded = self._decode(token, REFRESH, self.refresh_secret)
        token_id = decoded.get("tokenId")
        if not token_id:
            raise InvalidTokenError()
        return RefreshTokenPayload(sub=decoded["sub"], token_id=token_id)

    def _encode(self, claims: Dict[str, Any], token_type: str, secret: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update(
            {
                "type": token_type,
                "iat": int(now.timestamp()),
                "exp": int((now + ttl).timestamp()),
            }
        )
        if self.issuer:
            payload["iss"] = self.issuer
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _decode(self, token: str, expected_type: str, secret: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT. Only cryptographic and format checks happen
        here; nothing is looked up in the database.
        """
        options = {"require": ["exp", "sub"]}
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options=options,
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError() from exc

        if decoded.get("type") != expected_type or not decoded.get("sub"):
            raise InvalidTokenError()
        return decoded
