"""
Refresh-token store and rotation.

Only SHA-256 hashes of refresh tokens are persisted. Rotation and revocation
both go through a single conditional UPDATE
(`... WHERE token_hash = :h AND is_revoked = false AND expires_at > now`),
so of two requests presenting the same token exactly one sees rowcount 1.
"""
from __future__ import annotations

import logging

from sqlalchemy import update

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from services.errors import InvalidRefreshTokenError
from services.token_codec import hash_token, random_id

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    def __init__(self, storage, issuer):
        self.storage = storage
        self.issuer = issuer

    def _new_row(self, user_id: str, raw_token: str, ip: str | None, user_agent: str | None) -> RefreshToken:
        return RefreshToken(
            user_id=str(user_id),
            token_hash=hash_token(raw_token),
            is_revoked=False,
            expires_at=utcnow() + self.issuer.refresh_ttl,
            ip_address=ip,
            user_agent=user_agent[:512] if user_agent else None,
        )

    def _revoke_active(self, session, token_hash: str, user_id: str | None = None) -> bool:
        now = utcnow()
        conditions = [
            RefreshToken.token_hash == token_hash,
            RefreshToken.is_revoked.is_(False),
            RefreshToken.expires_at > now,
        ]
        if user_id is not None:
            conditions.append(RefreshToken.user_id == str(user_id))
        result = session.execute(
            update(RefreshToken)
            .where(*conditions)
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def store_refresh_token(self, user_id: str, raw_token: str, ip: str | None = None, user_agent: str | None = None) -> RefreshToken:
        """Persist the hash of a freshly issued refresh token. Never overwrites."""
        row = self._new_row(user_id, raw_token, ip, user_agent)
        with self.storage.transaction() as session:
            session.add(row)
        return row

    def issue_refresh_token(self, user_id: str, ip: str | None = None, user_agent: str | None = None) -> str:
        """Sign a new refresh token for a fresh login and store it."""
        raw = self.issuer.sign_refresh_token(user_id, random_id())
        self.store_refresh_token(user_id, raw, ip=ip, user_agent=user_agent)
        return raw

    def rotate_refresh_token(self, old_raw_token: str, user_id: str, ip: str | None = None, user_agent: str | None = None) -> str:
        """
        Revoke the presented token and mint its successor in one transaction.

        Raises InvalidRefreshTokenError when the token is not active for this user
        (already rotated, revoked, expired or never issued; the cases are not
        told apart).
        """
        old_hash = hash_token(old_raw_token)
        with self.storage.transaction() as session:
            if not self._revoke_active(session, old_hash, user_id=user_id):
                logger.info("Refresh token rotation rejected for user %s", user_id)
                raise InvalidRefreshTokenError()
            new_raw = self.issuer.sign_refresh_token(user_id, random_id())
            session.add(self._new_row(user_id, new_raw, ip, user_agent))
        return new_raw

    def revoke_refresh_token(self, raw_token: str) -> None:
        """Revoke an active token. Raises InvalidRefreshTokenError if none matches."""
        with self.storage.transaction() as session:
            if not self._revoke_active(session, hash_token(raw_token)):
                raise InvalidRefreshTokenError()

    def active_tokens(self, user_id: str) -> list[RefreshToken]:
        session = self.storage.get_session()
        return (
            session.query(RefreshToken)
            .filter(
                RefreshToken.user_id == str(user_id),
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > utcnow(),
            )
            .order_by(RefreshToken.created_at)
            .all()
        )
