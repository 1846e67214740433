"""
RefreshToken model: stores hashed refresh tokens so we can revoke and rotate them
Fields:
- user_id (String(36)) - FK to users.id
- token_hash (SHA-256 hex of the raw token; the raw token lives only in the client cookie)
- is_revoked / revoked_at (flipped once, never back)
- expires_at
- ip_address, user_agent (audit only)
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), nullable=False, unique=True)
    is_revoked = Column(Boolean, default=False, nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(512), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} revoked={self.is_revoked}>"
