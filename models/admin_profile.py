"""
AdminProfile: per-admin permission set and active flag, one per ADMIN/SUPER_ADMIN user.
"""
from sqlalchemy import Column, String, Boolean, JSON, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class AdminProfile(BaseModel, Base):
    __tablename__ = "admin_profiles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    designation = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    permissions = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="admin_profile")

    def has_any_permission(self, *permissions) -> bool:
        held = set(self.permissions or [])
        return any(str(getattr(p, "value", p)) in held for p in permissions)
