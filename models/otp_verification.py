"""
OtpVerification model: local ledger of one OTP challenge.
Fields:
- phone, country_code
- verification_id (issued by the OTP provider)
- status: PENDING -> VERIFIED | FAILED, never reversed
- purpose: LOGIN | REGISTER
- attempts, expires_at, verified_at
Rows are never deleted; they are the audit trail for OTP traffic.
"""
from sqlalchemy import Column, String, Integer, DateTime, UniqueConstraint, Index

from models.base_model import BaseModel, Base
from models.enums import OtpStatus, OtpPurpose


class OtpVerification(BaseModel, Base):
    __tablename__ = "otp_verifications"

    phone = Column(String(15), nullable=False)
    country_code = Column(String(5), nullable=False)
    verification_id = Column(String(100), nullable=False)
    status = Column(String(10), nullable=False, default=OtpStatus.PENDING.value)
    purpose = Column(String(10), nullable=False, default=OtpPurpose.LOGIN.value)
    attempts = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("verification_id", "phone", name="uq_otp_verification_phone"),
        Index("ix_otp_verifications_phone", "phone"),
    )

    def __repr__(self):
        return f"<OtpVerification {self.verification_id} status={self.status}>"
